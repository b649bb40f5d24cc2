"""Periodic reachability monitoring with automatic recovery."""

from __future__ import annotations

import asyncio
import logging
import signal
import threading
from datetime import timedelta
from typing import Protocol

from . import network
from .config import Config
from .network import NetworkError
from .utils import LOGGER_NAME, setup_file_logger

log = logging.getLogger(f"{LOGGER_NAME}.monitor")

RETRY_DELAY = 0.5
_STOP_POLL = 0.2

_state_lock = threading.Lock()
_monitoring_active = False


class _StopFlag(Protocol):
    def is_set(self) -> bool: ...


def _claim_monitoring() -> bool:
    global _monitoring_active
    with _state_lock:
        if _monitoring_active:
            return False
        _monitoring_active = True
        return True


def _release_monitoring() -> None:
    global _monitoring_active
    with _state_lock:
        _monitoring_active = False


def _millis(seconds: float) -> int:
    return int(seconds * 1000)


async def check_status(config: Config) -> dict[str, tuple[bool, bool | None]]:
    """Check every target once and log the outcome.

    Returns a mapping from target name to ``(ping_ok, port_ok)``; ``port_ok``
    is None for targets without a port.
    """
    log.info("네트워크 상태 확인 시작")
    results: dict[str, tuple[bool, bool | None]] = {}

    for target in config.targets:
        timeout = config.target_timeout(target)
        try:
            rtt = await network.ping_host(target.address, timeout)
        except NetworkError as exc:
            log.warning("대상 '%s' (%s) 응답 없음: %s", target.name, target.address, exc)
            ping_ok = False
        else:
            log.info("대상 '%s' (%s) 응답 시간: %dms",
                     target.name, target.address, _millis(rtt))
            ping_ok = True

        port_ok: bool | None = None
        if target.port is not None:
            try:
                await network.check_port(target.address, target.port, timeout)
            except NetworkError as exc:
                log.warning("대상 '%s' (%s:%d) 포트 연결 실패: %s",
                            target.name, target.address, target.port, exc)
                port_ok = False
            else:
                log.info("대상 '%s' (%s:%d) 포트 연결 성공",
                         target.name, target.address, target.port)
                port_ok = True

        results[target.name] = (ping_ok, port_ok)

    log.info("네트워크 상태 확인 완료")
    return results


async def check_recovery_success(config: Config) -> bool:
    """Return whether the default target answers a ping."""
    try:
        await network.ping_host(
            config.default_target, timedelta(milliseconds=config.ping_timeout_ms)
        )
    except NetworkError:
        return False
    return True


async def perform_recovery_actions(config: Config) -> bool:
    """Run recovery actions in order until the network comes back.

    Returns True once a recovery check succeeds, False if every action was
    tried without success.
    """
    for action in config.recovery_actions:
        log.info("복구 작업 '%s' 실행 중", action.name)
        try:
            output = await network.execute_command(action.command)
        except NetworkError as exc:
            log.error("복구 작업 '%s' 실패: %s", action.name, exc)
            continue

        log.info("복구 작업 '%s' 성공: %s", action.name, output)
        if action.wait_after_ms is not None:
            log.info("복구 작업 후 %dms 대기 중", action.wait_after_ms)
            await asyncio.sleep(action.wait_after_ms / 1000)

        if await check_recovery_success(config):
            log.info("네트워크 연결이 복구되었습니다")
            if config.notification_enabled and config.notification_command:
                try:
                    await network.execute_command(config.notification_command)
                except NetworkError as exc:
                    log.warning("복구 알림 전송 실패: %s", exc)
                else:
                    log.info("복구 알림 전송 성공")
            return True

    log.error("모든 복구 작업이 실패했습니다")
    return False


async def _probe_target(config: Config, target) -> bool:
    retry_count = config.target_retry_count(target)
    timeout = config.target_timeout(target)
    for attempt in range(1, retry_count + 1):
        try:
            rtt = await network.ping_host(target.address, timeout)
        except NetworkError as exc:
            if attempt == retry_count:
                log.error("대상 '%s' (%s) 모든 재시도 실패: %s",
                          target.name, target.address, exc)
            else:
                log.warning("대상 '%s' (%s) 재시도 #%d 실패: %s",
                            target.name, target.address, attempt, exc)
                await asyncio.sleep(RETRY_DELAY)
            continue
        if attempt > 1:
            log.info("대상 '%s' (%s) 재시도 #%d 성공, 응답 시간: %dms",
                     target.name, target.address, attempt, _millis(rtt))
        else:
            log.info("대상 '%s' (%s) 응답 시간: %dms",
                     target.name, target.address, _millis(rtt))
        return True
    return False


async def _wait_for_stop(stop_event: _StopFlag, seconds: float) -> None:
    if isinstance(stop_event, asyncio.Event):
        try:
            await asyncio.wait_for(stop_event.wait(), seconds)
        except TimeoutError:
            pass
        return
    loop = asyncio.get_running_loop()
    deadline = loop.time() + seconds
    while not stop_event.is_set():
        remaining = deadline - loop.time()
        if remaining <= 0:
            return
        await asyncio.sleep(min(remaining, _STOP_POLL))


def _install_interrupt(event: asyncio.Event) -> bool:
    def on_interrupt() -> None:
        log.info("Ctrl+C 신호 감지, 모니터링 종료 중...")
        event.set()

    try:
        asyncio.get_running_loop().add_signal_handler(signal.SIGINT, on_interrupt)
    except (NotImplementedError, RuntimeError, ValueError):
        return False
    return True


async def start_monitoring(config: Config, stop_event: _StopFlag | None = None) -> bool:
    """Monitor targets until ``stop_event`` is set, recovering when all fail.

    Without a stop event, SIGINT stops the loop where the platform allows it.
    Returns False without doing anything if monitoring is already running.
    """
    if not _claim_monitoring():
        log.warning("이미 모니터링이 실행 중입니다")
        return False

    interrupt_installed = False
    try:
        log.info("네트워크 모니터링 시작")
        if config.log_file:
            setup_file_logger(config.log_file)

        if stop_event is None:
            stop_event = asyncio.Event()
            interrupt_installed = _install_interrupt(stop_event)

        interval = float(config.check_interval_sec)
        while not stop_event.is_set():
            all_failed = True
            for target in config.targets:
                if await _probe_target(config, target):
                    all_failed = False

            if all_failed and config.recovery_actions:
                log.error("모든 네트워크 대상 연결 실패, 복구 작업 시작")
                await perform_recovery_actions(config)

            await _wait_for_stop(stop_event, interval)
    finally:
        if interrupt_installed:
            asyncio.get_running_loop().remove_signal_handler(signal.SIGINT)
        _release_monitoring()
        log.info("네트워크 모니터링 종료")
    return True