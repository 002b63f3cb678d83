"""Configuration management for the telemetry engine.

Configuration follows a priority hierarchy:
1. Environment variables (DEVFLOW_*, see devflow.config.settings)
2. Project config (.devflow/config.yaml, ``telemetry`` key)
3. Hardcoded defaults in this module
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from devflow.config.settings import RuntimeSettings, get_settings
from devflow.telemetry.constants import (
    DEFAULT_EDIT_INACTIVITY_SECONDS,
    DEFAULT_LOG_BACKUP_COUNT,
    DEFAULT_LOG_MAX_SIZE_MB,
    DEFAULT_LOG_ROTATION_ENABLED,
    DEFAULT_MIN_FOCUS_SESSION_SECONDS,
    LOG_LEVEL_INFO,
    MAX_EDIT_INACTIVITY_SECONDS,
    MAX_FOCUS_SESSION_SECONDS,
    MAX_LOG_BACKUP_COUNT,
    MAX_LOG_MAX_SIZE_MB,
    MIN_EDIT_INACTIVITY_SECONDS,
    MIN_FOCUS_SESSION_SECONDS,
    MIN_LOG_MAX_SIZE_MB,
    TELEMETRY_CONFIG_KEY,
    VALID_LOG_LEVELS,
)
from devflow.telemetry.exceptions import ValidationError

logger = logging.getLogger(__name__)


def _require_mapping(name: str, value: Any) -> dict[str, Any]:
    """Return ``value`` as a config section; None means an empty section."""
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValidationError(
            f"{name} must be a mapping",
            field=name,
            value=value,
            expected="mapping",
        )
    return value


def _check_range(
    name: str, value: Any, low: float, high: float, integer: bool = False
) -> None:
    # bool is an int subclass but never a valid threshold
    allowed = int if integer else (int, float)
    if isinstance(value, bool) or not isinstance(value, allowed):
        raise ValidationError(
            f"{name} must be {'an integer' if integer else 'a number'}",
            field=name,
            value=value,
            expected="integer" if integer else "number",
        )
    if value < low:
        raise ValidationError(
            f"{name} must be at least {low}",
            field=name,
            value=value,
            expected=f">= {low}",
        )
    if value > high:
        raise ValidationError(
            f"{name} must be at most {high}",
            field=name,
            value=value,
            expected=f"<= {high}",
        )


@dataclass
class FocusConfig:
    """Focus session settings.

    Attributes:
        min_session_seconds: Sessions shorter than this are discarded.
    """

    min_session_seconds: float = DEFAULT_MIN_FOCUS_SESSION_SECONDS

    def __post_init__(self) -> None:
        _check_range(
            "min_session_seconds",
            self.min_session_seconds,
            MIN_FOCUS_SESSION_SECONDS,
            MAX_FOCUS_SESSION_SECONDS,
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "FocusConfig":
        data = _require_mapping("focus", data)
        return cls(
            min_session_seconds=data.get("min_session_seconds", DEFAULT_MIN_FOCUS_SESSION_SECONDS)
        )

    def to_dict(self) -> dict[str, Any]:
        return {"min_session_seconds": self.min_session_seconds}


@dataclass
class EditConfig:
    """Edit debouncing settings.

    Attributes:
        inactivity_seconds: Quiet period after which edit counters reset.
    """

    inactivity_seconds: float = DEFAULT_EDIT_INACTIVITY_SECONDS

    def __post_init__(self) -> None:
        _check_range(
            "inactivity_seconds",
            self.inactivity_seconds,
            MIN_EDIT_INACTIVITY_SECONDS,
            MAX_EDIT_INACTIVITY_SECONDS,
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "EditConfig":
        data = _require_mapping("edits", data)
        return cls(
            inactivity_seconds=data.get("inactivity_seconds", DEFAULT_EDIT_INACTIVITY_SECONDS)
        )

    def to_dict(self) -> dict[str, Any]:
        return {"inactivity_seconds": self.inactivity_seconds}


@dataclass
class LogRotationConfig:
    """Size-based rollover for the telemetry log file.

    Only applies when the engine logs to a file; ``enabled=False`` keeps a
    single growing file.
    """

    enabled: bool = DEFAULT_LOG_ROTATION_ENABLED
    max_size_mb: int = DEFAULT_LOG_MAX_SIZE_MB
    backup_count: int = DEFAULT_LOG_BACKUP_COUNT

    def __post_init__(self) -> None:
        if not isinstance(self.enabled, bool):
            raise ValidationError(
                "enabled must be true or false",
                field="enabled",
                value=self.enabled,
                expected="boolean",
            )
        _check_range(
            "max_size_mb", self.max_size_mb, MIN_LOG_MAX_SIZE_MB, MAX_LOG_MAX_SIZE_MB, integer=True
        )
        _check_range("backup_count", self.backup_count, 0, MAX_LOG_BACKUP_COUNT, integer=True)

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "LogRotationConfig":
        data = _require_mapping("log_rotation", data)
        return cls(
            enabled=data.get("enabled", DEFAULT_LOG_ROTATION_ENABLED),
            max_size_mb=data.get("max_size_mb", DEFAULT_LOG_MAX_SIZE_MB),
            backup_count=data.get("backup_count", DEFAULT_LOG_BACKUP_COUNT),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "enabled": self.enabled,
            "max_size_mb": self.max_size_mb,
            "backup_count": self.backup_count,
        }

    def get_max_bytes(self) -> int:
        """Maximum log file size in bytes."""
        return self.max_size_mb * 1024 * 1024


@dataclass
class TelemetryConfig:
    """Telemetry engine configuration.

    Attributes:
        focus: Focus session settings.
        edits: Edit debouncing settings.
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR).
        log_rotation: Log file rotation configuration.
    """

    focus: FocusConfig = field(default_factory=FocusConfig)
    edits: EditConfig = field(default_factory=EditConfig)
    log_level: str = LOG_LEVEL_INFO
    log_rotation: LogRotationConfig = field(default_factory=LogRotationConfig)

    def __post_init__(self) -> None:
        if not isinstance(self.log_level, str) or self.log_level.upper() not in VALID_LOG_LEVELS:
            raise ValidationError(
                f"Invalid log level: {self.log_level}",
                field="log_level",
                value=self.log_level,
                expected=f"one of {VALID_LOG_LEVELS}",
            )

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "TelemetryConfig":
        """Create config from dictionary.

        Raises:
            ValidationError: If configuration values are invalid.
        """
        data = _require_mapping(TELEMETRY_CONFIG_KEY, data)
        return cls(
            focus=FocusConfig.from_dict(data.get("focus")),
            edits=EditConfig.from_dict(data.get("edits")),
            log_level=data.get("log_level", LOG_LEVEL_INFO),
            log_rotation=LogRotationConfig.from_dict(data.get("log_rotation")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "focus": self.focus.to_dict(),
            "edits": self.edits.to_dict(),
            "log_level": self.log_level,
            "log_rotation": self.log_rotation.to_dict(),
        }


def _read_yaml(path: Path) -> dict[str, Any]:
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise yaml.YAMLError(f"expected a mapping at top level, got {type(data).__name__}")
    return data


def load_telemetry_config(
    project_root: Path,
    settings: RuntimeSettings | None = None,
) -> TelemetryConfig:
    """Load telemetry configuration from a project.

    Reads the ``telemetry`` key of .devflow/config.yaml.

    Note:
        Returns defaults on error rather than raising, so a broken config
        file never stops telemetry from starting.
    """
    config_file = (settings or get_settings()).config_path(project_root)

    if not config_file.exists():
        logger.debug(f"No config file at {config_file}, using defaults")
        return TelemetryConfig()

    try:
        data = _read_yaml(config_file)
        config = TelemetryConfig.from_dict(data.get(TELEMETRY_CONFIG_KEY))
        logger.debug(
            f"Loaded telemetry config: focus floor={config.focus.min_session_seconds}s, "
            f"edit window={config.edits.inactivity_seconds}s"
        )
        return config

    except ValidationError as e:
        logger.warning(f"Invalid telemetry config in {config_file}: {e}")
        logger.info("Using default configuration")
        return TelemetryConfig()

    except yaml.YAMLError as e:
        logger.warning(f"Failed to parse config YAML from {config_file}: {e}")
        return TelemetryConfig()

    except OSError as e:
        logger.warning(f"Failed to read config from {config_file}: {e}")
        return TelemetryConfig()


def save_telemetry_config(
    project_root: Path,
    config: TelemetryConfig,
    settings: RuntimeSettings | None = None,
) -> Path:
    """Write telemetry configuration, preserving other top-level keys.

    Returns:
        Path of the written config file.
    """
    config_file = (settings or get_settings()).config_path(project_root)
    config_file.parent.mkdir(parents=True, exist_ok=True)

    existing: dict[str, Any] = {}
    if config_file.exists():
        try:
            existing = _read_yaml(config_file)
        except (yaml.YAMLError, OSError) as e:
            logger.warning(f"Overwriting unreadable config {config_file}: {e}")

    existing[TELEMETRY_CONFIG_KEY] = config.to_dict()
    with open(config_file, "w", encoding="utf-8") as f:
        yaml.safe_dump(existing, f, default_flow_style=False, sort_keys=False)

    logger.debug(f"Saved telemetry config to {config_file}")
    return config_file
