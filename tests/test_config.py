"""
Tests for configuration loading and validation.
"""

from __future__ import annotations

import pytest

from activator.common.config import (
    SignalSourceType,
    load_activator_config,
    load_config_file,
    validate_config,
)
from activator.common.exceptions import ConfigError


class TestLoadActivatorConfig:
    def test_defaults(self):
        config = load_activator_config(None)

        assert config.node_id == "fan-activator"
        assert config.observe.port == 5683
        assert config.observe.path == "temperature/push"
        assert config.history.capacity == 4
        assert config.control.default_threshold == 25
        assert config.control.weighting == "inverse"
        assert config.control.max_intensity == 7
        assert config.control.idle_frequency_hz == 5.0
        assert config.signal.source is SignalSourceType.SIMULATED
        assert config.signal.calibration_offset == 55
        assert config.command.port == 5684
        assert validate_config(config) == []

    def test_leading_slash_stripped_from_path(self):
        config = load_activator_config({"observe": {"address": "10.0.0.2", "path": "/temperature/push"}})

        assert config.observe.path == "temperature/push"
        assert config.observe_url == "10.0.0.2:5683/temperature/push"

    def test_unknown_signal_source(self):
        with pytest.raises(ConfigError) as excinfo:
            load_activator_config({"signal": {"source": "antenna"}})

        assert "antenna" in excinfo.value.message
        assert excinfo.value.recoverable is False


class TestValidateConfig:
    def test_reports_every_problem(self):
        config = load_activator_config({
            "history": {"capacity": 0},
            "control": {"max_intensity": 9, "idle_frequency_hz": 5, "max_frequency_hz": 2},
            "command": {"port": 70000},
        })

        errors = validate_config(config)

        assert "history.capacity must be at least 1" in errors
        assert "control.max_intensity must be between 1 and 7" in errors
        assert "control.max_frequency_hz must be >= control.idle_frequency_hz" in errors
        assert "command.port out of range: 70000" in errors

    def test_negative_toggle_interval(self):
        config = load_activator_config({"observe": {"toggle_interval_s": -1}})

        assert validate_config(config) == ["observe.toggle_interval_s must not be negative"]


class TestLoadConfigFile:
    def test_none_yields_defaults(self):
        assert load_config_file(None).history.capacity == 4

    def test_reads_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(
            "node_id: bench\n"
            "control:\n"
            "  default_threshold: 30\n"
            "  weighting: linear\n"
            "signal:\n"
            "  source: static\n"
            "  static_value: -60\n"
        )

        config = load_config_file(path)

        assert config.node_id == "bench"
        assert config.control.default_threshold == 30
        assert config.control.weighting == "linear"
        assert config.signal.source is SignalSourceType.STATIC
        assert config.signal.static_value == -60

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            load_config_file(tmp_path / "absent.yaml")

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("- just\n- a list\n")

        with pytest.raises(ConfigError, match="mapping"):
            load_config_file(path)

    def test_invalid_values_rejected(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("history:\n  capacity: 0\n")

        with pytest.raises(ConfigError, match="history.capacity"):
            load_config_file(path)


class TestSignalSettings:
    def test_simulated_start_outside_bounds(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("signal:\n  source: simulated\n  static_value: -10\n")

        with pytest.raises(ConfigError, match="signal.static_value -10 outside"):
            load_config_file(path)

    def test_static_source_accepts_any_value(self):
        config = load_activator_config({"signal": {"source": "static", "static_value": -10}})

        assert validate_config(config) == []

    def test_custom_bounds(self):
        config = load_activator_config({
            "signal": {"static_value": -10, "floor": -30, "ceiling": 0},
        })

        assert config.signal.floor == -30
        assert validate_config(config) == []

    def test_inverted_bounds(self):
        config = load_activator_config({"signal": {"floor": -20, "ceiling": -90}})

        assert validate_config(config) == ["signal.floor must be <= signal.ceiling"]
