import tomllib
from datetime import timedelta

import pytest

from netwatchdog.config import (
    Config,
    ConfigError,
    NetworkTarget,
    RecoveryAction,
    load_config,
    save_config,
)


def test_default_values_match_builtin_settings():
    config = Config.default()
    assert config.default_target == "8.8.8.8"
    assert config.check_interval_sec == 60
    assert config.ping_timeout_ms == 1000
    assert config.retry_count == 3
    assert [t.name for t in config.targets] == ["Google DNS", "Local Router"]
    assert config.targets[1].address == "192.168.1.1"
    assert config.recovery_actions[0].wait_after_ms == 5000
    assert config.log_file == "network_monitor.log"
    assert config.notification_enabled is True


def test_toml_round_trip_preserves_config():
    config = Config.default()
    assert Config.from_toml(config.to_toml()) == config


def test_round_trip_with_ports_and_no_optionals():
    config = Config(
        default_target="10.0.0.1",
        check_interval_sec=5,
        ping_timeout_ms=250,
        retry_count=1,
        targets=[NetworkTarget("web", "10.0.0.2", port=8080)],
        recovery_actions=[RecoveryAction("noop", "echo hi")],
        log_file=None,
        notification_enabled=False,
        notification_command=None,
    )
    assert Config.from_toml(config.to_toml()) == config


def test_unset_optional_fields_are_omitted_from_toml():
    data = tomllib.loads(Config.default().to_toml())
    assert "port" not in data["targets"][0]
    assert data["targets"][0]["timeout_ms"] == 1000


def test_to_dict_and_from_dict_are_inverse():
    config = Config.default()
    assert Config.from_dict(config.to_dict()) == config


def test_target_timeout_prefers_target_value():
    config = Config.default()
    target = NetworkTarget("a", "1.2.3.4", timeout_ms=500)
    assert config.target_timeout(target) == timedelta(milliseconds=500)


def test_target_timeout_falls_back_to_global():
    config = Config.default()
    target = NetworkTarget("a", "1.2.3.4")
    assert config.target_timeout(target) == timedelta(milliseconds=config.ping_timeout_ms)


def test_target_retry_count_override_and_fallback():
    config = Config.default()
    assert config.target_retry_count(NetworkTarget("a", "x", retry_count=7)) == 7
    assert config.target_retry_count(NetworkTarget("a", "x")) == config.retry_count


def test_load_config_creates_default_file(tmp_path):
    path = tmp_path / "config.toml"
    config = load_config(path)
    assert config == Config.default()
    assert path.exists()
    assert Config.from_toml(path.read_text(encoding="utf-8")) == config


def test_save_then_load_returns_same_config(tmp_path):
    path = tmp_path / "saved.toml"
    config = Config.default()
    config.check_interval_sec = 15
    save_config(config, path)
    assert load_config(path) == config


def test_invalid_toml_raises_config_error(tmp_path):
    path = tmp_path / "bad.toml"
    path.write_text("this is = = not toml", encoding="utf-8")
    with pytest.raises(ConfigError, match="설정 파일 파싱 오류"):
        load_config(path)


def test_missing_required_field_raises():
    data = Config.default().to_dict()
    del data["default_target"]
    with pytest.raises(ConfigError, match="default_target"):
        Config.from_dict(data)


def test_retry_count_out_of_range_raises():
    data = Config.default().to_dict()
    data["retry_count"] = 300
    with pytest.raises(ConfigError):
        Config.from_dict(data)


def test_boolean_for_integer_field_raises():
    data = Config.default().to_dict()
    data["check_interval_sec"] = True
    with pytest.raises(ConfigError):
        Config.from_dict(data)


def test_port_out_of_range_raises():
    data = Config.default().to_dict()
    data["targets"][0]["port"] = 70000
    with pytest.raises(ConfigError):
        Config.from_dict(data)


def test_save_to_missing_directory_raises(tmp_path):
    with pytest.raises(ConfigError, match="설정 파일을 읽을 수 없음"):
        save_config(Config.default(), tmp_path / "missing" / "c.toml")