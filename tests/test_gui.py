from dataclasses import replace
from types import SimpleNamespace

from netwatchdog.app import NetworkMonitorApp, TargetStatus
from netwatchdog.config import Config, NetworkTarget, RecoveryAction
from netwatchdog.gui import recovery_rows, settings_rows, status_rows, target_rows


def _fake_app(*statuses):
    return SimpleNamespace(target_statuses={s.name: s for s in statuses})


def test_status_rows_fresh_app_is_unknown(tmp_path):
    app = NetworkMonitorApp(tmp_path / "config.toml")
    rows = status_rows(app)
    assert [row[0] for row in rows] == ["Google DNS", "Local Router"]
    assert rows[0] == ("Google DNS", "8.8.8.8", "Unknown", "-")
    assert rows[1] == ("Local Router", "192.168.1.1", "Unknown", "-")


def test_status_rows_after_failed_ping_is_offline(tmp_path):
    path = tmp_path / "config.toml"
    config = replace(
        Config.default(),
        targets=[NetworkTarget("Broken", "not-an-ip")],
    )
    path.write_text(config.to_toml(), encoding="utf-8")
    app = NetworkMonitorApp(path)
    app.check_targets_once()
    assert status_rows(app) == [("Broken", "not-an-ip", "Offline", "-")]


def test_status_rows_online_with_response_time():
    status = TargetStatus(name="A", address="10.0.0.1", ping_rtt=0.25)
    assert status_rows(_fake_app(status)) == [("A", "10.0.0.1", "Online", "250 ms")]


def test_status_rows_port_shown_and_required():
    unchecked_port = TargetStatus(name="P", address="10.0.0.2", port=8080, ping_rtt=0.25)
    ok_port = TargetStatus(name="Q", address="10.0.0.3", port=443, ping_rtt=0.25,
                           port_checked=True)
    failed_port = TargetStatus(name="R", address="10.0.0.4", port=22, ping_rtt=0.25,
                               port_checked=True, port_error="refused")
    rows = status_rows(_fake_app(unchecked_port, ok_port, failed_port))
    assert rows[0][1] == "10.0.0.2:8080"
    assert rows[0][2] == "Offline"
    assert rows[1][1:3] == ("10.0.0.3:443", "Online")
    assert rows[2][2] == "Offline"
    assert rows[2][3] == "250 ms"


def test_status_rows_ping_error_is_offline():
    status = TargetStatus(name="E", address="10.0.0.5", ping_error="timeout")
    assert status_rows(_fake_app(status)) == [("E", "10.0.0.5", "Offline", "-")]


def test_settings_rows_default():
    rows = dict(settings_rows(Config.default()))
    assert rows["Default Target:"] == "8.8.8.8"
    assert rows["Check Interval:"] == "60 sec"
    assert rows["Ping Timeout:"] == "1000 ms"
    assert rows["Retry Count:"] == "3"
    assert rows["Log File:"] == "network_monitor.log"
    assert rows["Notifications:"] == "Yes"


def test_settings_rows_order_and_missing_values():
    config = replace(Config.default(), log_file=None, notification_enabled=False)
    rows = settings_rows(config)
    assert [label for label, _ in rows] == [
        "Default Target:", "Check Interval:", "Ping Timeout:",
        "Retry Count:", "Log File:", "Notifications:",
    ]
    assert rows[4] == ("Log File:", "None")
    assert rows[5] == ("Notifications:", "No")


def test_target_rows():
    config = replace(
        Config.default(),
        targets=[
            NetworkTarget("Google DNS", "8.8.8.8"),
            NetworkTarget("Web", "10.0.0.9", port=443),
        ],
    )
    assert target_rows(config) == [
        ("Google DNS", "8.8.8.8", "None"),
        ("Web", "10.0.0.9", "443"),
    ]


def test_recovery_rows():
    config = replace(
        Config.default(),
        recovery_actions=[
            RecoveryAction("flush", "Clear-DnsClientCache", 5000),
            RecoveryAction("renew", "ipconfig /renew"),
        ],
    )
    assert recovery_rows(config) == [
        ("flush", "Clear-DnsClientCache", "5000 ms"),
        ("renew", "ipconfig /renew", "None"),
    ]


def test_rows_empty_config_lists():
    config = replace(Config.default(), targets=[], recovery_actions=[])
    assert target_rows(config) == []
    assert recovery_rows(config) == []
    assert status_rows(_fake_app()) == []