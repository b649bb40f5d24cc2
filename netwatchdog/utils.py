"""Debug flag, one-time logger setup and path helpers."""

from __future__ import annotations

import logging
import sys
import threading
from collections.abc import Callable
from pathlib import Path

LOGGER_NAME = "netwatchdog"
_LOG_FORMAT = "%(asctime)s [%(levelname)s] - %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_debug_mode = False
_logger_lock = threading.Lock()
_logger_installed = False


def set_debug_mode(enabled: bool) -> None:
    """Turn debug-level logging on or off for loggers set up afterwards."""
    global _debug_mode
    _debug_mode = bool(enabled)


def is_debug_mode() -> bool:
    """Return whether debug mode is on."""
    return _debug_mode


def _install_logger(make_handler: Callable[[], logging.Handler]) -> bool:
    global _logger_installed
    with _logger_lock:
        if _logger_installed:
            return False
        _logger_installed = True
        level = logging.DEBUG if _debug_mode else logging.INFO
        try:
            handler = make_handler()
        except OSError as exc:
            print(f"로그 파일 생성 실패: {exc}", file=sys.stderr)
            return False
        handler.setFormatter(logging.Formatter(_LOG_FORMAT, _DATE_FORMAT))
        logger = logging.getLogger(LOGGER_NAME)
        logger.addHandler(handler)
        logger.setLevel(level)
        return True


def setup_file_logger(log_file: str | Path) -> bool:
    """Send package logs to a freshly truncated file.

    Only the first logger setup of the process takes effect; returns True
    when this call installed the logger.
    """
    return _install_logger(
        lambda: logging.FileHandler(log_file, mode="w", encoding="utf-8")
    )


def setup_console_logger() -> bool:
    """Send package logs to standard error; only the first setup takes effect."""
    return _install_logger(lambda: logging.StreamHandler(sys.stderr))


def file_exists(path: str | Path) -> bool:
    """Return whether the path exists."""
    return Path(path).exists()


def executable_path() -> Path:
    """Return the absolute path of the running program."""
    program = sys.argv[0] if sys.argv and sys.argv[0] else sys.executable
    if not program:
        raise FileNotFoundError("실행 파일 경로를 찾을 수 없습니다.")
    return Path(program).resolve()


def executable_dir() -> Path:
    """Return the directory that holds the running program."""
    path = executable_path()
    parent = path.parent
    if parent == path:
        raise FileNotFoundError("실행 파일의 디렉토리를 찾을 수 없습니다.")
    return parent


def is_absolute_path(path: str | Path) -> bool:
    """Return whether the path is absolute."""
    return Path(path).is_absolute()


def to_absolute_path(path: str | Path) -> Path:
    """Resolve a relative path against the program's directory."""
    if is_absolute_path(path):
        return Path(path)
    return executable_dir() / path