"""Reachability checks and system commands used for monitoring and recovery."""

from __future__ import annotations

import asyncio
import ipaddress
import math
import os
import shutil
import subprocess
import time
from datetime import timedelta

_IS_WINDOWS = os.name == "nt"

COMMON_PORTS = (80, 443, 8080)
TEST_TIMEOUT = 5.0


class NetworkError(Exception):
    """Raised when a network check or system command fails."""


def _seconds(timeout: float | timedelta) -> float:
    if isinstance(timeout, timedelta):
        return timeout.total_seconds()
    return float(timeout)


def _decode(data: bytes) -> str:
    return data.decode("utf-8", errors="replace")


def _ping_argv(address: str, timeout: float) -> list[str]:
    if _IS_WINDOWS:
        return ["ping", "-n", "1", "-w", str(max(1, int(timeout * 1000))), address]
    return ["ping", "-c", "1", "-W", str(max(1, math.ceil(timeout))), address]


def _shell_argv(cmd: str) -> list[str]:
    if _IS_WINDOWS:
        return ["powershell", "-Command", cmd]
    return ["sh", "-c", cmd]


def _interfaces_argv() -> list[str]:
    if _IS_WINDOWS:
        return ["powershell", "-Command", "Get-NetAdapter | Format-Table -AutoSize"]
    if shutil.which("ip"):
        return ["ip", "addr", "show"]
    return ["ifconfig", "-a"]


async def ping_host(host: str, timeout: float | timedelta) -> float:
    """Send one ICMP echo to an IP address; return the round trip in seconds."""
    try:
        address = ipaddress.ip_address(host)
    except ValueError as exc:
        raise NetworkError(f"IP 주소 변환 실패: {exc}") from exc
    seconds = _seconds(timeout)
    start = time.perf_counter()
    try:
        proc = await asyncio.create_subprocess_exec(
            *_ping_argv(str(address), seconds),
            stdout=subprocess.DEVNULL,
            stderr=subprocess.PIPE,
        )
    except OSError as exc:
        raise NetworkError(f"Pinger 생성 실패: {exc}") from exc
    try:
        _, stderr = await asyncio.wait_for(proc.communicate(), seconds + 1.0)
    except TimeoutError:
        proc.kill()
        await proc.wait()
        raise NetworkError("Ping 전송 실패: timed out") from None
    if proc.returncode != 0:
        detail = _decode(stderr).strip() or f"exit status {proc.returncode}"
        raise NetworkError(f"Ping 전송 실패: {detail}")
    return time.perf_counter() - start


async def check_port(host: str, port: int, timeout: float | timedelta) -> None:
    """Open and close a TCP connection to host:port within the timeout."""
    try:
        _, writer = await asyncio.wait_for(
            asyncio.open_connection(host, port), _seconds(timeout)
        )
    except TimeoutError:
        raise NetworkError("포트 연결 시간 초과") from None
    except OSError as exc:
        raise NetworkError(f"포트 연결 실패: {exc}") from exc
    writer.close()
    try:
        await writer.wait_closed()
    except OSError:
        pass


async def test_connection(host: str) -> None:
    """Print a ping, common-port and interface report for a host."""
    try:
        rtt = await ping_host(host, TEST_TIMEOUT)
        print(f"ICMP 핑 성공: {int(rtt * 1000)}ms")
    except NetworkError as exc:
        print(f"ICMP 핑 실패: {exc}")

    for port in COMMON_PORTS:
        try:
            await check_port(host, port, TEST_TIMEOUT)
            print(f"포트 {port} 연결 성공")
        except NetworkError as exc:
            print(f"포트 {port} 연결 실패: {exc}")

    try:
        print(f"네트워크 인터페이스 정보:\n{network_interfaces()}")
    except NetworkError as exc:
        print(f"네트워크 인터페이스 정보 가져오기 실패: {exc}")


async def execute_command(cmd: str) -> str:
    """Run a command through the system shell and return its standard output."""
    try:
        proc = await asyncio.create_subprocess_exec(
            *_shell_argv(cmd),
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
        )
    except OSError as exc:
        raise NetworkError(f"명령어 실행 실패: {exc}") from exc
    stdout, stderr = await proc.communicate()
    if proc.returncode == 0:
        return _decode(stdout)
    raise NetworkError(f"명령어 실행 오류: {_decode(stderr)}")


def network_interfaces() -> str:
    """Return the system's description of its network interfaces."""
    try:
        result = subprocess.run(_interfaces_argv(), capture_output=True)
    except OSError as exc:
        raise NetworkError(f"네트워크 인터페이스 정보 가져오기 실패: {exc}") from exc
    if result.returncode == 0:
        return _decode(result.stdout)
    raise NetworkError(f"네트워크 인터페이스 정보 가져오기 오류: {_decode(result.stderr)}")


async def _run_reported(cmd: str, success: str, failure: str) -> None:
    try:
        await execute_command(cmd)
    except NetworkError as exc:
        print(f"{failure}: {exc}")
        raise
    print(success)


async def restart_network_interface(interface_name: str) -> None:
    """Restart the named network adapter."""
    quoted = interface_name.replace("'", "''")
    await _run_reported(
        f"Restart-NetAdapter -Name '{quoted}' -Confirm:$false",
        f"네트워크 인터페이스 '{interface_name}' 재시작 성공",
        f"네트워크 인터페이스 '{interface_name}' 재시작 실패",
    )


async def flush_dns() -> None:
    """Clear the DNS client cache."""
    await _run_reported("Clear-DnsClientCache", "DNS 캐시 초기화 성공", "DNS 캐시 초기화 실패")


async def renew_ip() -> None:
    """Renew the DHCP lease."""
    await _run_reported("ipconfig /renew", "IP 설정 갱신 성공", "IP 설정 갱신 실패")