import re
import socket
import time

import pytest

from netwatchdog.app import LogLevel, NetworkMonitorApp, TargetStatus
from netwatchdog.config import Config, NetworkTarget, RecoveryAction, save_config


def make_config(targets=(), actions=(), interval=60):
    config = Config.default()
    config.targets = list(targets)
    config.recovery_actions = list(actions)
    config.check_interval_sec = interval
    config.log_file = None
    return config


def make_app(tmp_path, config):
    path = tmp_path / "config.toml"
    save_config(config, path)
    return NetworkMonitorApp(path)


def wait_recovery(app, limit=20.0):
    deadline = time.monotonic() + limit
    while time.monotonic() < deadline:
        if app.poll_recovery():
            return True
        time.sleep(0.05)
    return False


def messages(app):
    return [message for message, _ in app.logs]


def test_target_status_from_target_starts_unchecked():
    status = TargetStatus.from_target(NetworkTarget("router", "10.0.0.1", 22))
    assert (status.name, status.address, status.port) == ("router", "10.0.0.1", 22)
    assert not status.checked
    assert not status.is_ok()


@pytest.mark.parametrize(
    "port, ping_rtt, port_checked, port_error, expected",
    [
        (None, 0.01, False, None, True),
        (None, None, False, None, False),
        (80, 0.01, False, None, False),
        (80, 0.01, True, None, True),
        (80, 0.01, True, "refused", False),
        (80, None, True, None, False),
    ],
)
def test_target_status_is_ok(port, ping_rtt, port_checked, port_error, expected):
    status = TargetStatus("t", "10.0.0.1", port, ping_rtt=ping_rtt,
                          port_checked=port_checked, port_error=port_error)
    assert status.is_ok() is expected


def test_missing_config_file_uses_and_writes_defaults(tmp_path):
    path = tmp_path / "config.toml"
    app = NetworkMonitorApp(path)
    assert path.exists()
    assert app.config == Config.default()
    assert list(app.target_statuses) == [t.name for t in Config.default().targets]


def test_broken_config_file_falls_back_to_defaults(tmp_path, capsys):
    path = tmp_path / "config.toml"
    path.write_text("not = [valid", encoding="utf-8")
    app = NetworkMonitorApp(path)
    assert app.config == Config.default()
    assert "Failed to load config" in capsys.readouterr().err


def test_add_log_and_clear(tmp_path):
    app = make_app(tmp_path, make_config())
    app.add_log("hello", LogLevel.ERROR)
    [(message, level)] = app.logs
    assert re.fullmatch(r"\[\d{4}-\d\d-\d\d \d\d:\d\d:\d\d\] hello", message)
    assert level is LogLevel.ERROR
    app.clear_logs()
    assert app.logs == []


def test_open_config_editor_round_trips(tmp_path):
    config = make_config([NetworkTarget("a", "10.0.0.1", 443)])
    app = make_app(tmp_path, config)
    text = app.open_config_editor()
    assert app.show_config_editor
    assert app.config_editor_text == text
    assert Config.from_toml(text) == config
    app.close_config_editor()
    assert not app.show_config_editor
    assert app.config_save_error is None


def test_save_config_applies_and_syncs_statuses(tmp_path):
    app = make_app(tmp_path, make_config([NetworkTarget("old", "10.0.0.1")]))
    new_config = make_config([NetworkTarget("new", "10.0.0.2", 80)])
    app.open_config_editor()
    assert app.save_config(new_config.to_toml()) is True
    assert app.config == new_config
    assert Config.from_toml(app.config_path.read_text(encoding="utf-8")) == new_config
    assert list(app.target_statuses) == ["new"]
    assert app.target_statuses["new"].port == 80
    assert not app.show_config_editor
    assert messages(app)[-1].endswith("Settings saved successfully")


def test_save_config_keeps_existing_status(tmp_path):
    app = make_app(tmp_path, make_config([NetworkTarget("keep", "10.0.0.1")]))
    before = app.target_statuses["keep"].last_check
    new_config = make_config([NetworkTarget("keep", "10.0.0.1"), NetworkTarget("b", "10.0.0.3")])
    assert app.save_config(new_config.to_toml())
    statuses = app.target_statuses
    assert statuses["keep"].last_check == before
    assert set(statuses) == {"keep", "b"}


def test_save_config_rejects_invalid_text(tmp_path):
    config = make_config()
    app = make_app(tmp_path, config)
    app.open_config_editor()
    assert app.save_config("default_target = 5") is False
    assert app.config_save_error.startswith("Failed to parse settings:")
    assert app.show_config_editor
    assert app.config == config
    assert app.logs[-1][1] is LogLevel.ERROR


def test_save_config_reports_write_failure(tmp_path):
    config = make_config()
    app = make_app(tmp_path, config)
    app.config_path.unlink()
    app.config_path.mkdir()
    assert app.save_config(make_config(interval=5).to_toml()) is False
    assert app.config_save_error.startswith("Failed to save settings:")
    assert app.config == config


def test_check_targets_once_records_ping_and_port_results(tmp_path):
    with socket.create_server(("127.0.0.1", 0)) as server:
        port = server.getsockname()[1]
        app = make_app(tmp_path, make_config([NetworkTarget("local", "localhost", port)]))
        statuses = app.check_targets_once()
    status = statuses["local"]
    assert status.checked
    assert status.ping_rtt is None
    assert "IP 주소 변환 실패" in status.ping_error
    assert status.port_checked
    assert status.port_error is None
    assert not status.is_ok()
    assert app.target_statuses["local"] == status


def test_start_and_stop_monitoring(tmp_path):
    app = make_app(tmp_path, make_config())
    app.start_monitoring()
    app.start_monitoring()
    assert app.monitoring_active
    app.stop_monitoring()
    app.stop_monitoring()
    assert not app.monitoring_active
    logged = messages(app)
    assert len(logged) == 2
    assert logged[0].endswith("Monitoring started")
    assert logged[1].endswith("Monitoring stopped")


def test_recovery_runs_all_actions(tmp_path):
    actions = [RecoveryAction("first", "echo hello"), RecoveryAction("second", "echo bye")]
    app = make_app(tmp_path, make_config(actions=actions))
    app.perform_recovery()
    assert app.recovery_in_progress
    assert wait_recovery(app)
    assert not app.recovery_in_progress
    logged = messages(app)
    assert any("Recovery action 'first' succeeded: hello" in m for m in logged)
    assert any("Recovery action 'second' succeeded: bye" in m for m in logged)
    assert logged[-1].endswith("All recovery actions completed")


def test_recovery_stops_at_first_failure(tmp_path):
    actions = [RecoveryAction("broken", "exit 3"), RecoveryAction("never", "echo no")]
    app = make_app(tmp_path, make_config(actions=actions))
    app.perform_recovery()
    assert wait_recovery(app)
    logged = messages(app)
    assert not any("'never'" in m for m in logged)
    assert "Recovery action failed: Recovery action 'broken' failed:" in logged[-1]
    assert app.logs[-1][1] is LogLevel.ERROR


def test_recovery_is_not_started_twice(tmp_path):
    app = make_app(tmp_path, make_config(actions=[RecoveryAction("slow", "sleep 0.5")]))
    app.perform_recovery()
    app.perform_recovery()
    assert wait_recovery(app)
    started = [m for m in messages(app) if m.endswith("Starting recovery actions")]
    assert len(started) == 1
    assert app.poll_recovery() is False