"""Custom exceptions for the telemetry engine.

All exceptions inherit from TelemetryError so callers can catch every
engine error with a single except clause.

Exception hierarchy:
    TelemetryError (base)
    ├── ConfigurationError
    │   └── ValidationError
    ├── HostError
    └── ReplayError
"""

from pathlib import Path
from typing import Any


class TelemetryError(Exception):
    """Base exception for all telemetry engine errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional context.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return string representation."""
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({detail_str})"
        return self.message


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(TelemetryError):
    """Raised when configuration is invalid or cannot be loaded.

    Examples:
        - Invalid YAML syntax in config file
        - Unreadable privacy consent file
    """

    def __init__(
        self,
        message: str,
        config_file: Path | None = None,
        key: str | None = None,
    ):
        """Initialize configuration error.

        Args:
            message: Error description.
            config_file: Path to the problematic config file.
            key: The configuration key that caused the error.
        """
        details = {}
        if config_file:
            details["config_file"] = str(config_file)
        if key:
            details["key"] = key
        super().__init__(message, details)
        self.config_file = config_file
        self.key = key


class ValidationError(ConfigurationError):
    """Raised when configuration values fail validation.

    Examples:
        - Negative inactivity window
        - Unknown log level
        - Unknown consent data type
    """

    def __init__(
        self,
        message: str,
        field: str,
        value: Any = None,
        expected: str | None = None,
    ):
        """Initialize validation error.

        Args:
            message: Error description.
            field: The field that failed validation.
            value: The invalid value (truncated if too long).
            expected: Description of expected value format.
        """
        super().__init__(message)
        self.details["field"] = field
        if value is not None:
            value_str = str(value)
            self.details["value"] = value_str[:100] + "..." if len(value_str) > 100 else value_str
        if expected:
            self.details["expected"] = expected
        self.field = field
        self.value = value
        self.expected = expected


# =============================================================================
# Host / Replay Errors
# =============================================================================


class HostError(TelemetryError):
    """Raised when the host event source is used incorrectly.

    Example: starting an engine twice on the same host.
    """


class ReplayError(TelemetryError):
    """Raised when a recorded event log cannot be replayed."""

    def __init__(
        self,
        message: str,
        line_number: int | None = None,
        event: str | None = None,
    ):
        """Initialize replay error.

        Args:
            message: Error description.
            line_number: 1-based line of the offending entry.
            event: Event name of the offending entry, if known.
        """
        details: dict[str, Any] = {}
        if line_number is not None:
            details["line"] = line_number
        if event:
            details["event"] = event
        super().__init__(message, details)
        self.line_number = line_number
        self.event = event
