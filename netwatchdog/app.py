"""Window-independent state and actions behind the monitor's desktop interface."""

from __future__ import annotations

import asyncio
import sys
import threading
import time
from concurrent.futures import Future
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from enum import Enum
from pathlib import Path

from . import network
from .config import Config, ConfigError, NetworkTarget, save_config as write_config
from .config import load_config
from .network import NetworkError

_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def _stamp(message: str) -> str:
    return f"[{datetime.now().strftime(_TIMESTAMP_FORMAT)}] {message}"


class LogLevel(Enum):
    """Kind of a log line, which decides how it is shown."""

    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


@dataclass
class TargetStatus:
    """Latest check results for one network target."""

    name: str
    address: str
    port: int | None = None
    last_check: float = field(default_factory=time.monotonic)
    ping_rtt: float | None = None
    ping_error: str | None = None
    port_checked: bool = False
    port_error: str | None = None

    @classmethod
    def from_target(cls, target: NetworkTarget) -> TargetStatus:
        """Return an unchecked status for a configured target."""
        return cls(name=target.name, address=target.address, port=target.port)

    @property
    def checked(self) -> bool:
        """Whether a ping has been attempted at least once."""
        return self.ping_rtt is not None or self.ping_error is not None

    def is_ok(self) -> bool:
        """Ping succeeded and, when a port is set, the port answered too."""
        if self.ping_rtt is None:
            return False
        if self.port is None:
            return True
        return self.port_checked and self.port_error is None


async def _probe(status: TargetStatus, address: str, port: int | None,
                 timeout: timedelta) -> None:
    try:
        status.ping_rtt = await network.ping_host(address, timeout)
        status.ping_error = None
    except NetworkError as exc:
        status.ping_rtt = None
        status.ping_error = str(exc)
    if port is not None:
        try:
            await network.check_port(address, port, timeout)
            status.port_error = None
        except NetworkError as exc:
            status.port_error = str(exc)
        status.port_checked = True


class NetworkMonitorApp:
    """Configuration, target statuses, logs and background work for the interface."""

    def __init__(self, config_path: str | Path) -> None:
        self.config_path = Path(config_path)
        try:
            config = load_config(self.config_path)
        except ConfigError as exc:
            print(f"Failed to load config: {exc}", file=sys.stderr)
            config = Config.default()

        self._lock = threading.Lock()
        self._config = config
        self._statuses: dict[str, TargetStatus] = {
            target.name: TargetStatus.from_target(target) for target in config.targets
        }
        self._logs: list[tuple[str, LogLevel]] = []
        self._pending_logs: list[tuple[str, LogLevel]] = []

        self.monitoring_active = False
        self._stop_event = threading.Event()
        self._monitor_thread: threading.Thread | None = None

        self.recovery_in_progress = False
        self._recovery: Future[None] | None = None

        self.show_config_editor = False
        self.config_editor_text = ""
        self.config_save_error: str | None = None

    @property
    def config(self) -> Config:
        """The configuration currently in effect."""
        with self._lock:
            return self._config

    @property
    def target_statuses(self) -> dict[str, TargetStatus]:
        """A snapshot of the status of every target, keyed by name."""
        with self._lock:
            return {name: replace(status) for name, status in self._statuses.items()}

    @property
    def logs(self) -> list[tuple[str, LogLevel]]:
        """Log lines with their levels, oldest first."""
        return list(self._logs)

    def add_log(self, message: str, level: LogLevel = LogLevel.INFO) -> None:
        """Append a timestamped line to the log."""
        self._logs.append((_stamp(message), level))

    def clear_logs(self) -> None:
        """Remove every log line."""
        self._logs.clear()

    def start_monitoring(self) -> None:
        """Start checking targets in the background at the configured interval."""
        if self.monitoring_active:
            return
        self.monitoring_active = True
        self.add_log("Monitoring started", LogLevel.SUCCESS)
        stop_event = threading.Event()
        self._stop_event = stop_event
        self._monitor_thread = threading.Thread(
            target=self._monitor_loop, args=(stop_event,),
            name="netwatchdog-monitor", daemon=True,
        )
        self._monitor_thread.start()

    def _monitor_loop(self, stop_event: threading.Event) -> None:
        while not stop_event.is_set():
            self.check_targets_once()
            stop_event.wait(self.config.check_interval_sec)

    def stop_monitoring(self) -> None:
        """Ask the background checks to stop after the current round."""
        if not self.monitoring_active:
            return
        self.monitoring_active = False
        self._stop_event.set()
        self.add_log("Monitoring stopped", LogLevel.WARNING)

    def check_targets_once(self) -> dict[str, TargetStatus]:
        """Ping every target (and its port, if set) once; return the new statuses."""
        with self._lock:
            targets = list(self._config.targets)
            timeout = timedelta(milliseconds=self._config.ping_timeout_ms)

        for target in targets:
            with self._lock:
                current = self._statuses.get(target.name)
                if current is None:
                    current = TargetStatus.from_target(target)
                    self._statuses[target.name] = current
                status = replace(current)

            status.last_check = time.monotonic()
            asyncio.run(_probe(status, target.address, target.port, timeout))

            with self._lock:
                self._statuses[target.name] = status

        return self.target_statuses

    def _queue_log(self, message: str, level: LogLevel) -> None:
        with self._lock:
            self._pending_logs.append((_stamp(message), level))

    def perform_recovery(self) -> None:
        """Run the recovery actions in the background; see poll_recovery."""
        if self.recovery_in_progress:
            return
        self.recovery_in_progress = True
        self.add_log("Starting recovery actions", LogLevel.WARNING)
        future: Future[None] = Future()
        self._recovery = future
        threading.Thread(
            target=self._run_recovery, args=(self.config, future),
            name="netwatchdog-recovery", daemon=True,
        ).start()

    def _run_recovery(self, config: Config, future: Future[None]) -> None:
        try:
            for action in config.recovery_actions:
                self._queue_log(f"Executing recovery action '{action.name}'", LogLevel.WARNING)
                try:
                    output = asyncio.run(network.execute_command(action.command))
                except NetworkError as exc:
                    self._queue_log(
                        f"Recovery action '{action.name}' failed: {exc}", LogLevel.ERROR
                    )
                    raise NetworkError(
                        f"Recovery action '{action.name}' failed: {exc}"
                    ) from exc
                self._queue_log(
                    f"Recovery action '{action.name}' succeeded: {output}", LogLevel.SUCCESS
                )
                if action.wait_after_ms is not None:
                    time.sleep(action.wait_after_ms / 1000)
        except Exception as exc:  # handed to the caller through the future
            future.set_exception(exc)
            return
        future.set_result(None)

    def poll_recovery(self) -> bool:
        """Collect recovery logs; return True when the recovery finished in this call."""
        with self._lock:
            pending, self._pending_logs = self._pending_logs, []
        self._logs.extend(pending)

        future = self._recovery
        if future is None or not future.done():
            return False

        error = future.exception()
        if error is None:
            self.add_log("All recovery actions completed", LogLevel.SUCCESS)
        else:
            self.add_log(f"Recovery action failed: {error}", LogLevel.ERROR)
        self.recovery_in_progress = False
        self._recovery = None
        return True

    def open_config_editor(self) -> str:
        """Fill the editor with the current configuration as TOML and show it."""
        try:
            text = self.config.to_toml()
        except ConfigError as exc:
            self.add_log(f"Failed to serialize config: {exc}", LogLevel.ERROR)
            return self.config_editor_text
        self.config_editor_text = text
        self.show_config_editor = True
        self.config_save_error = None
        return text

    def close_config_editor(self) -> None:
        """Hide the editor and forget any save error."""
        self.show_config_editor = False
        self.config_save_error = None

    def save_config(self, text: str | None = None) -> bool:
        """Parse, save and apply edited TOML; return whether it succeeded."""
        if text is not None:
            self.config_editor_text = text
        try:
            new_config = Config.from_toml(self.config_editor_text)
        except ConfigError as exc:
            self.config_save_error = f"Failed to parse settings: {exc}"
            self.add_log(self.config_save_error, LogLevel.ERROR)
            return False

        try:
            write_config(new_config, self.config_path)
        except ConfigError as exc:
            self.config_save_error = f"Failed to save settings: {exc}"
            self.add_log(self.config_save_error, LogLevel.ERROR)
            return False

        names = {target.name for target in new_config.targets}
        with self._lock:
            self._config = new_config
            self._statuses = {
                name: status for name, status in self._statuses.items() if name in names
            }
            for target in new_config.targets:
                self._statuses.setdefault(target.name, TargetStatus.from_target(target))

        self.close_config_editor()
        self.add_log("Settings saved successfully", LogLevel.SUCCESS)
        return True