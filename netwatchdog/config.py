"""Configuration model and TOML persistence for the network watchdog."""

from __future__ import annotations

import tomllib
from dataclasses import asdict, dataclass
from datetime import timedelta
from pathlib import Path
from typing import Any

import tomli_w

_U8_MAX = 0xFF
_U16_MAX = 0xFFFF
_U64_MAX = 2**64 - 1

_DEFAULT_NOTIFICATION_COMMAND = (
    "powershell -Command \"[System.Reflection.Assembly]::LoadWithPartialName("
    "'System.Windows.Forms'); [System.Windows.Forms.MessageBox]::Show("
    "'네트워크 연결이 복구되었습니다.', '네트워크 모니터', "
    "[System.Windows.Forms.MessageBoxButtons]::OK, "
    "[System.Windows.Forms.MessageBoxIcon]::Information)\""
)
_DEFAULT_RECOVERY_COMMAND = (
    "powershell -Command \"Restart-NetAdapter -Name 'Ethernet' -Confirm:$false\""
)


class ConfigError(Exception):
    """Raised when a configuration file cannot be read, parsed or written."""


def _read_error(exc: Exception) -> ConfigError:
    return ConfigError(f"설정 파일을 읽을 수 없음: {exc}")


def _parse_error(detail: object) -> ConfigError:
    return ConfigError(f"설정 파일 파싱 오류: {detail}")


@dataclass
class NetworkTarget:
    """A host to watch, with optional per-target overrides."""

    name: str
    address: str
    port: int | None = None
    timeout_ms: int | None = None
    retry_count: int | None = None


@dataclass
class RecoveryAction:
    """A shell command run when every target is unreachable."""

    name: str
    command: str
    wait_after_ms: int | None = None


def _value(data: dict[str, Any], key: str, kind: type, *,
           optional: bool = False, maximum: int | None = None) -> Any:
    value = data.get(key)
    if value is None:
        if optional:
            return None
        raise _parse_error(f"missing field `{key}`")
    if kind is int:
        if isinstance(value, bool) or not isinstance(value, int):
            raise _parse_error(f"invalid type for `{key}`: expected an integer")
        if not 0 <= value <= maximum:
            raise _parse_error(f"invalid value for `{key}`: expected 0..={maximum}")
    elif not isinstance(value, kind):
        raise _parse_error(f"invalid type for `{key}`: expected {kind.__name__}")
    return value


def _table(item: Any, key: str) -> dict[str, Any]:
    if not isinstance(item, dict):
        raise _parse_error(f"invalid entry in `{key}`: expected a table")
    return item


def _target_from_dict(data: dict[str, Any]) -> NetworkTarget:
    return NetworkTarget(
        name=_value(data, "name", str),
        address=_value(data, "address", str),
        port=_value(data, "port", int, optional=True, maximum=_U16_MAX),
        timeout_ms=_value(data, "timeout_ms", int, optional=True, maximum=_U64_MAX),
        retry_count=_value(data, "retry_count", int, optional=True, maximum=_U8_MAX),
    )


def _action_from_dict(data: dict[str, Any]) -> RecoveryAction:
    return RecoveryAction(
        name=_value(data, "name", str),
        command=_value(data, "command", str),
        wait_after_ms=_value(data, "wait_after_ms", int, optional=True, maximum=_U64_MAX),
    )


def _without_none(data: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in data.items() if value is not None}


@dataclass
class Config:
    """Settings for monitoring, recovery and notification."""

    default_target: str
    check_interval_sec: int
    ping_timeout_ms: int
    retry_count: int
    targets: list[NetworkTarget]
    recovery_actions: list[RecoveryAction]
    log_file: str | None
    notification_enabled: bool
    notification_command: str | None

    @classmethod
    def default(cls) -> Config:
        """Return the built-in default configuration."""
        return cls(
            default_target="8.8.8.8",
            check_interval_sec=60,
            ping_timeout_ms=1000,
            retry_count=3,
            targets=[
                NetworkTarget("Google DNS", "8.8.8.8", None, 1000, 3),
                NetworkTarget("Local Router", "192.168.1.1", None, 500, 2),
            ],
            recovery_actions=[
                RecoveryAction("네트워크 어댑터 재시작", _DEFAULT_RECOVERY_COMMAND, 5000),
            ],
            log_file="network_monitor.log",
            notification_enabled=True,
            notification_command=_DEFAULT_NOTIFICATION_COMMAND,
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Config:
        """Build a configuration from parsed TOML data, validating every field."""
        targets = _value(data, "targets", list)
        actions = _value(data, "recovery_actions", list)
        return cls(
            default_target=_value(data, "default_target", str),
            check_interval_sec=_value(data, "check_interval_sec", int, maximum=_U64_MAX),
            ping_timeout_ms=_value(data, "ping_timeout_ms", int, maximum=_U64_MAX),
            retry_count=_value(data, "retry_count", int, maximum=_U8_MAX),
            targets=[_target_from_dict(_table(t, "targets")) for t in targets],
            recovery_actions=[
                _action_from_dict(_table(a, "recovery_actions")) for a in actions
            ],
            log_file=_value(data, "log_file", str, optional=True),
            notification_enabled=_value(data, "notification_enabled", bool),
            notification_command=_value(data, "notification_command", str, optional=True),
        )

    def to_dict(self) -> dict[str, Any]:
        """Return a TOML-ready mapping; unset optional fields are left out."""
        return _without_none({
            "default_target": self.default_target,
            "check_interval_sec": self.check_interval_sec,
            "ping_timeout_ms": self.ping_timeout_ms,
            "retry_count": self.retry_count,
            "targets": [_without_none(asdict(t)) for t in self.targets],
            "recovery_actions": [_without_none(asdict(a)) for a in self.recovery_actions],
            "log_file": self.log_file,
            "notification_enabled": self.notification_enabled,
            "notification_command": self.notification_command,
        })

    @classmethod
    def from_toml(cls, text: str) -> Config:
        """Parse a configuration from TOML text."""
        try:
            data = tomllib.loads(text)
        except tomllib.TOMLDecodeError as exc:
            raise _parse_error(exc) from exc
        return cls.from_dict(data)

    def to_toml(self) -> str:
        """Serialise the configuration as TOML text."""
        try:
            return tomli_w.dumps(self.to_dict())
        except (TypeError, ValueError) as exc:
            raise _parse_error(exc) from exc

    def target_timeout(self, target: NetworkTarget) -> timedelta:
        """Timeout for a target, falling back to the global ping timeout."""
        millis = target.timeout_ms if target.timeout_ms is not None else self.ping_timeout_ms
        return timedelta(milliseconds=millis)

    def target_retry_count(self, target: NetworkTarget) -> int:
        """Retry count for a target, falling back to the global value."""
        return target.retry_count if target.retry_count is not None else self.retry_count


def save_config(config: Config, path: str | Path) -> None:
    """Write the configuration to a TOML file."""
    text = config.to_toml()
    try:
        Path(path).write_text(text, encoding="utf-8")
    except OSError as exc:
        raise _read_error(exc) from exc


def load_config(path: str | Path) -> Config:
    """Load a configuration; a missing file is created with the defaults."""
    path = Path(path)
    if not path.exists():
        config = Config.default()
        save_config(config, path)
        return config
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise _read_error(exc) from exc
    return Config.from_toml(text)