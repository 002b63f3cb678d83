"""Tests for telemetry configuration loading and validation."""

from pathlib import Path

import pytest
import yaml

from devflow.config.settings import RuntimeSettings
from devflow.telemetry.config import (
    EditConfig,
    FocusConfig,
    LogRotationConfig,
    TelemetryConfig,
    load_telemetry_config,
    save_telemetry_config,
)
from devflow.telemetry.constants import (
    DEFAULT_EDIT_INACTIVITY_SECONDS,
    DEFAULT_MIN_FOCUS_SESSION_SECONDS,
    LOG_LEVEL_INFO,
)
from devflow.telemetry.exceptions import ValidationError


def _write_config(project_root: Path, data: object) -> Path:
    config_file = project_root / ".devflow" / "config.yaml"
    config_file.parent.mkdir(parents=True, exist_ok=True)
    config_file.write_text(yaml.safe_dump(data), encoding="utf-8")
    return config_file


class TestDefaults:
    def test_defaults(self) -> None:
        config = TelemetryConfig()
        assert config.focus.min_session_seconds == DEFAULT_MIN_FOCUS_SESSION_SECONDS
        assert config.edits.inactivity_seconds == DEFAULT_EDIT_INACTIVITY_SECONDS
        assert config.log_level == LOG_LEVEL_INFO
        assert config.log_rotation.enabled is True

    def test_from_empty_dict(self) -> None:
        assert TelemetryConfig.from_dict({}) == TelemetryConfig()

    def test_round_trip_through_dict(self) -> None:
        config = TelemetryConfig(
            focus=FocusConfig(min_session_seconds=10),
            edits=EditConfig(inactivity_seconds=2.5),
            log_level="DEBUG",
        )
        assert TelemetryConfig.from_dict(config.to_dict()) == config


class TestValidation:
    @pytest.mark.parametrize("value", [0, 0.5, 3601])
    def test_focus_threshold_range(self, value: float) -> None:
        with pytest.raises(ValidationError) as exc_info:
            FocusConfig(min_session_seconds=value)
        assert exc_info.value.field == "min_session_seconds"

    @pytest.mark.parametrize("value", [-1, 0, 601])
    def test_inactivity_range(self, value: float) -> None:
        with pytest.raises(ValidationError):
            EditConfig(inactivity_seconds=value)

    def test_invalid_log_level(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            TelemetryConfig(log_level="LOUD")
        assert "LOUD" in str(exc_info.value)

    def test_log_level_is_case_insensitive(self) -> None:
        assert TelemetryConfig(log_level="debug").log_level == "debug"

    def test_log_rotation_limits(self) -> None:
        with pytest.raises(ValidationError):
            LogRotationConfig(max_size_mb=0)
        with pytest.raises(ValidationError):
            LogRotationConfig(backup_count=-1)
        with pytest.raises(ValidationError):
            LogRotationConfig(backup_count=11)

    @pytest.mark.parametrize("value", ["thirty", None, True, [30]])
    def test_focus_threshold_must_be_a_number(self, value: object) -> None:
        with pytest.raises(ValidationError) as exc_info:
            FocusConfig(min_session_seconds=value)  # type: ignore[arg-type]
        assert exc_info.value.field == "min_session_seconds"

    def test_log_rotation_counts_must_be_integers(self) -> None:
        with pytest.raises(ValidationError):
            LogRotationConfig(max_size_mb=2.5)  # type: ignore[arg-type]
        with pytest.raises(ValidationError) as exc_info:
            LogRotationConfig(backup_count="3")  # type: ignore[arg-type]
        assert exc_info.value.field == "backup_count"
        with pytest.raises(ValidationError):
            LogRotationConfig(enabled="yes")  # type: ignore[arg-type]

    def test_section_must_be_a_mapping(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            TelemetryConfig.from_dict({"edits": 5})
        assert exc_info.value.field == "edits"

    def test_max_bytes(self) -> None:
        assert LogRotationConfig(max_size_mb=2).get_max_bytes() == 2 * 1024 * 1024


class TestLoadTelemetryConfig:
    def test_missing_file_returns_defaults(self, tmp_path: Path) -> None:
        assert load_telemetry_config(tmp_path) == TelemetryConfig()

    def test_loads_telemetry_section(self, tmp_path: Path) -> None:
        _write_config(
            tmp_path,
            {"telemetry": {"focus": {"min_session_seconds": 60}, "edits": {"inactivity_seconds": 1}}},
        )
        config = load_telemetry_config(tmp_path)
        assert config.focus.min_session_seconds == 60
        assert config.edits.inactivity_seconds == 1

    def test_invalid_values_fall_back_to_defaults(self, tmp_path: Path) -> None:
        _write_config(tmp_path, {"telemetry": {"focus": {"min_session_seconds": -5}}})
        assert load_telemetry_config(tmp_path) == TelemetryConfig()

    def test_malformed_yaml_falls_back_to_defaults(self, tmp_path: Path) -> None:
        config_file = tmp_path / ".devflow" / "config.yaml"
        config_file.parent.mkdir()
        config_file.write_text("telemetry: [unclosed", encoding="utf-8")
        assert load_telemetry_config(tmp_path) == TelemetryConfig()

    def test_non_mapping_falls_back_to_defaults(self, tmp_path: Path) -> None:
        _write_config(tmp_path, ["not", "a", "mapping"])
        assert load_telemetry_config(tmp_path) == TelemetryConfig()

    def test_non_numeric_threshold_falls_back_to_defaults(self, tmp_path: Path) -> None:
        _write_config(tmp_path, {"telemetry": {"focus": {"min_session_seconds": "thirty"}}})
        assert load_telemetry_config(tmp_path) == TelemetryConfig()

    def test_non_string_log_level_falls_back_to_defaults(self, tmp_path: Path) -> None:
        _write_config(tmp_path, {"telemetry": {"log_level": 5}})
        assert load_telemetry_config(tmp_path) == TelemetryConfig()

    def test_scalar_section_falls_back_to_defaults(self, tmp_path: Path) -> None:
        _write_config(tmp_path, {"telemetry": {"focus": "fast"}})
        assert load_telemetry_config(tmp_path) == TelemetryConfig()

    def test_list_telemetry_key_falls_back_to_defaults(self, tmp_path: Path) -> None:
        _write_config(tmp_path, {"telemetry": [1, 2]})
        assert load_telemetry_config(tmp_path) == TelemetryConfig()

    def test_config_dir_from_environment(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("DEVFLOW_CONFIG_DIR", "custom")
        config_file = tmp_path / "custom" / "config.yaml"
        config_file.parent.mkdir()
        config_file.write_text(
            yaml.safe_dump({"telemetry": {"focus": {"min_session_seconds": 12}}}),
            encoding="utf-8",
        )
        assert load_telemetry_config(tmp_path).focus.min_session_seconds == 12


class TestSaveTelemetryConfig:
    def test_writes_and_reloads(self, tmp_path: Path) -> None:
        config = TelemetryConfig(focus=FocusConfig(min_session_seconds=15))
        path = save_telemetry_config(tmp_path, config)

        assert path == tmp_path / ".devflow" / "config.yaml"
        assert load_telemetry_config(tmp_path) == config

    def test_preserves_other_sections(self, tmp_path: Path) -> None:
        config_file = _write_config(tmp_path, {"editor": {"theme": "dark"}})
        save_telemetry_config(tmp_path, TelemetryConfig())

        data = yaml.safe_load(config_file.read_text(encoding="utf-8"))
        assert data["editor"] == {"theme": "dark"}
        assert "telemetry" in data

    def test_explicit_settings(self, tmp_path: Path) -> None:
        settings = RuntimeSettings(config_dir="alt")
        path = save_telemetry_config(tmp_path, TelemetryConfig(), settings)
        assert path == tmp_path / "alt" / "config.yaml"
