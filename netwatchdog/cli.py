"""Command-line entry point: monitor, check status, test a host or open the window."""

from __future__ import annotations

import argparse
import asyncio
import logging
import signal
from collections.abc import Sequence

from . import network
from .config import Config, ConfigError, load_config
from .monitor import check_status, start_monitoring
from .network import NetworkError
from .utils import LOGGER_NAME, set_debug_mode, setup_console_logger

log = logging.getLogger(f"{LOGGER_NAME}.cli")

DEFAULT_CONFIG = "config.toml"
SHUTDOWN_TIMEOUT = 5.0
_INTERRUPT_MESSAGE = "Ctrl+C 감지됨. 모니터링을 안전하게 종료합니다..."


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="netwatchdog",
        description="로컬 네트워크 장애 감지 및 자동 복구 툴",
    )
    parser.add_argument("-c", "--config", default=DEFAULT_CONFIG, help="설정 파일 경로")
    parser.add_argument("-d", "--debug", action="store_true", help="디버그 모드 활성화")

    commands = parser.add_subparsers(dest="command", metavar="COMMAND")
    commands.add_parser("status", help="네트워크 상태 확인")
    test = commands.add_parser("test", help="네트워크 연결 테스트")
    test.add_argument("-H", "--host", default=None, help="테스트할 호스트 주소")
    commands.add_parser("gui", help="GUI 모드로 실행")
    return parser


async def _monitor_until_interrupted(config: Config) -> None:
    stop = asyncio.Event()
    loop = asyncio.get_running_loop()

    def on_interrupt() -> None:
        print(_INTERRUPT_MESSAGE)
        stop.set()

    try:
        loop.add_signal_handler(signal.SIGINT, on_interrupt)
        installed = True
    except (NotImplementedError, RuntimeError, ValueError):
        installed = False

    task = asyncio.create_task(start_monitoring(config, stop))
    waiter = asyncio.create_task(stop.wait())
    try:
        await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
        log.info("모니터링을 종료합니다.")
        stop.set()
        try:
            await asyncio.wait_for(task, SHUTDOWN_TIMEOUT)
        except TimeoutError:
            log.info("모니터링 종료 시간이 초과되었습니다. 강제 종료합니다.")
        else:
            log.info("모니터링이 정상적으로 종료되었습니다.")
    finally:
        waiter.cancel()
        if installed:
            loop.remove_signal_handler(signal.SIGINT)


def _run_status(config: Config) -> int:
    log.info("네트워크 상태 확인 중...")
    try:
        asyncio.run(check_status(config))
    except (NetworkError, OSError) as exc:
        log.error("네트워크 상태 확인 실패: %s", exc)
        return 1
    return 0


def _run_test(config: Config, host: str | None) -> int:
    target = host if host is not None else config.default_target
    log.info("네트워크 연결 테스트 중: %s", target)
    try:
        asyncio.run(network.test_connection(target))
    except (NetworkError, OSError) as exc:
        log.error("네트워크 연결 테스트 실패: %s", exc)
        return 1
    return 0


def _run_gui(config_path: str) -> int:
    from .gui import run_gui

    log.info("GUI 모드로 실행 중...")
    try:
        run_gui(config_path)
    except Exception as exc:  # tkinter reports a missing display with TclError
        log.error("GUI 실행 실패: %s", exc)
        return 1
    return 0


def _run_monitor(config: Config) -> int:
    log.info("모니터링 시작 중...")
    try:
        asyncio.run(_monitor_until_interrupted(config))
    except KeyboardInterrupt:
        print(_INTERRUPT_MESSAGE)
        log.info("모니터링을 종료합니다.")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Parse arguments, load the configuration and run the chosen command."""
    args = _build_parser().parse_args(argv)

    if args.debug:
        set_debug_mode(True)
    setup_console_logger()

    try:
        config = load_config(args.config)
    except ConfigError as exc:
        log.error("설정 파일 로드 실패: %s", exc)
        return 1

    if args.command == "status":
        return _run_status(config)
    if args.command == "test":
        return _run_test(config, args.host)
    if args.command == "gui":
        return _run_gui(args.config)
    return _run_monitor(config)


if __name__ == "__main__":
    raise SystemExit(main())