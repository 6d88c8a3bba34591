"""Tests for configuration loading and validation."""

import os

import pytest

from dbus_explorer.config import ConfigLoadError, ExplorerConfig, load_config
from dbus_explorer.errors import ConfigValidationError, ErrorCode


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in list(os.environ):
        if key.startswith("DBUS_EXPLORER_"):
            monkeypatch.delenv(key)


class TestExplorerConfig:
    def test_defaults(self):
        config = ExplorerConfig()

        assert config.bus == "system"
        assert config.bus_address is None
        assert config.call_timeout == 1.0
        assert config.exploration_timeout is None
        assert config.max_in_flight == 8
        assert config.strategy == "bfs"
        assert config.include_standard_interfaces is False
        assert config.resolve_owners is True
        assert config.log_level == "info"

    def test_from_environment(self, monkeypatch):
        monkeypatch.setenv("DBUS_EXPLORER_BUS", "SESSION")
        monkeypatch.setenv("DBUS_EXPLORER_MAX_IN_FLIGHT", "3")
        monkeypatch.setenv("DBUS_EXPLORER_INCLUDE_STANDARD_INTERFACES", "true")
        monkeypatch.setenv("DBUS_EXPLORER_EXPLORATION_TIMEOUT", "2.5")

        config = ExplorerConfig()

        assert config.bus == "session"
        assert config.max_in_flight == 3
        assert config.include_standard_interfaces is True
        assert config.exploration_timeout == 2.5

    @pytest.mark.parametrize(
        "field, value",
        [
            ("bus", "starship"),
            ("strategy", "random"),
            ("log_level", "loud"),
            ("max_in_flight", 0),
            ("max_concurrent_services", -1),
            ("call_timeout", 0),
            ("exploration_timeout", -5),
        ],
    )
    def test_invalid_values(self, field, value):
        with pytest.raises(ConfigValidationError) as exc_info:
            ExplorerConfig(**{field: value})

        assert exc_info.value.field == field
        assert exc_info.value.error_code is ErrorCode.INVALID_CONFIG


class TestLoadConfig:
    def test_without_file(self):
        assert load_config().bus == "system"

    def test_yaml_file(self, tmp_path):
        path = tmp_path / "explorer.yaml"
        path.write_text("bus: session\nmax_in_flight: 2\nstrategy: dfs\n")

        config = load_config(path)

        assert config.bus == "session"
        assert config.max_in_flight == 2
        assert config.strategy == "dfs"

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_config(path) == ExplorerConfig()

    def test_environment_beats_file(self, tmp_path, monkeypatch):
        path = tmp_path / "explorer.yaml"
        path.write_text("bus: system\n")
        monkeypatch.setenv("DBUS_EXPLORER_BUS", "session")

        assert load_config(path).bus == "session"

    def test_overrides_beat_environment(self, monkeypatch):
        monkeypatch.setenv("DBUS_EXPLORER_BUS", "session")

        config = load_config(bus="system", bus_address=None)

        assert config.bus == "system"
        assert config.bus_address is None

    def test_wrong_type_in_file(self, tmp_path):
        path = tmp_path / "explorer.yaml"
        path.write_text("max_in_flight: lots\n")

        with pytest.raises(ConfigValidationError) as exc_info:
            load_config(path)

        assert exc_info.value.field == "max_in_flight"
        assert exc_info.value.value == "lots"
        assert exc_info.value.error_code is ErrorCode.INVALID_CONFIG

    def test_wrong_type_in_environment(self, monkeypatch):
        monkeypatch.setenv("DBUS_EXPLORER_MAX_IN_FLIGHT", "abc")

        with pytest.raises(ConfigValidationError) as exc_info:
            load_config()

        assert exc_info.value.field == "max_in_flight"
        assert "max_in_flight" in str(exc_info.value)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigLoadError) as exc_info:
            load_config(tmp_path / "nope.yaml")
        assert "not found" in str(exc_info.value)

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("bus: [unclosed\n")

        with pytest.raises(ConfigLoadError):
            load_config(path)

    def test_non_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")

        with pytest.raises(ConfigLoadError):
            load_config(path)

    def test_invalid_value_in_file(self, tmp_path):
        path = tmp_path / "explorer.yaml"
        path.write_text("strategy: sideways\n")

        with pytest.raises(ConfigValidationError):
            load_config(path)
