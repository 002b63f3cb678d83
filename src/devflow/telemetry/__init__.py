"""Activity telemetry engine for DevFlow.

Correlates editor activity (window focus, edits, tasks, diagnostics,
debug sessions) into telemetry records delivered to a sink.

Key Components:
- TelemetryEngine: Subscribes to a host and dispatches records
- SessionTracker, ActivityDebouncer: Focus sessions and edit debouncing
- classify_task, aggregate_diagnostics: Pure build/test classification
- TelemetryConfig, PrivacyConsent: Configuration and consent
- TelemetryError and subclasses: Custom exception hierarchy
"""

# Configuration
from devflow.telemetry.config import (
    EditConfig,
    FocusConfig,
    LogRotationConfig,
    TelemetryConfig,
    load_telemetry_config,
    save_telemetry_config,
)
from devflow.telemetry.debouncer import ActivityDebouncer
from devflow.telemetry.diagnostics import aggregate_diagnostics, count_diagnostics

# Engine
from devflow.telemetry.engine import TelemetryEngine

# Exceptions
from devflow.telemetry.exceptions import (
    ConfigurationError,
    HostError,
    ReplayError,
    TelemetryError,
    ValidationError,
)
from devflow.telemetry.host import CallbackHost, HostEventSource
from devflow.telemetry.privacy import PrivacyConsent, load_consent, save_consent
from devflow.telemetry.session_tracker import SessionTracker

# Sinks
from devflow.telemetry.sinks import (
    ConsentFilteringSink,
    FanOutSink,
    JsonlSink,
    LoggingSink,
    MemorySink,
    SafeSink,
    TelemetrySink,
)
from devflow.telemetry.task_classifier import classify_task, derive_result, parse_test_summary

__all__ = [
    # Engine
    "TelemetryEngine",
    "SessionTracker",
    "ActivityDebouncer",
    "classify_task",
    "derive_result",
    "parse_test_summary",
    "aggregate_diagnostics",
    "count_diagnostics",
    # Host
    "HostEventSource",
    "CallbackHost",
    # Sinks
    "TelemetrySink",
    "MemorySink",
    "LoggingSink",
    "JsonlSink",
    "FanOutSink",
    "SafeSink",
    "ConsentFilteringSink",
    # Configuration
    "TelemetryConfig",
    "FocusConfig",
    "EditConfig",
    "LogRotationConfig",
    "load_telemetry_config",
    "save_telemetry_config",
    "PrivacyConsent",
    "load_consent",
    "save_consent",
    # Exceptions
    "TelemetryError",
    "ConfigurationError",
    "ValidationError",
    "HostError",
    "ReplayError",
]
