"""Data models for the telemetry engine.

Host-side inputs (TaskDescriptor, TextChange, Diagnostic), engine state
(FocusSession, KeystrokeBurst) and the immutable records handed to sinks.
"""

from dataclasses import dataclass, field
from typing import Any

from devflow.models.enums import (
    DebugPhase,
    DiagnosticSeverity,
    TaskGroup,
    TaskKind,
    TaskResult,
)
from devflow.telemetry.constants import (
    RECORD_BUILD_EVENT,
    RECORD_DEBUG_SESSION,
    RECORD_FOCUS_TIME,
    RECORD_KEYSTROKE,
    RECORD_TEST_RUN,
)

# =============================================================================
# Host inputs
# =============================================================================


@dataclass(frozen=True)
class TaskDescriptor:
    """A host task as reported on task start/end.

    Attributes:
        name: Task label shown by the host (e.g. "npm: build").
        group: Host task group, if any.
        task_id: Stable identifier used to pair start and end events.
    """

    name: str
    group: TaskGroup | None = None
    task_id: str | None = None

    @property
    def key(self) -> str:
        """Key used to correlate start/end events for the same task."""
        return self.task_id or self.name


@dataclass(frozen=True)
class TextChange:
    """One content change inside a text-document-changed notification."""

    text_length: int


@dataclass(frozen=True)
class Diagnostic:
    """One entry of a file's current diagnostic list."""

    severity: DiagnosticSeverity


# =============================================================================
# Engine state
# =============================================================================


@dataclass
class FocusSession:
    """One continuous interval during which the host window holds focus.

    Times are monotonic seconds from the engine clock.
    """

    start_time: float
    interruption_count: int = 0
    end_time: float | None = None

    @property
    def is_open(self) -> bool:
        return self.end_time is None

    def duration_ms(self) -> int:
        """Closed duration in milliseconds (0 while open)."""
        if self.end_time is None:
            return 0
        return int(round((self.end_time - self.start_time) * 1000))


@dataclass
class KeystrokeBurst:
    """Accumulated edit volume for one file since the last reset."""

    file_id: str
    window_start: float
    changed_character_count: int = 0


# =============================================================================
# Telemetry records
# =============================================================================


@dataclass(frozen=True)
class BuildEvent:
    """Classified outcome of a finished task or a failing diagnostic batch."""

    kind: TaskKind
    result: TaskResult
    error_count: int | None = None
    warning_count: int | None = None


@dataclass(frozen=True)
class TestRunResult:
    """Counts extracted from a test runner's summary output."""

    __test__ = False  # not a pytest test class

    passed: int
    failed: int
    skipped: int

    @property
    def total(self) -> int:
        return self.passed + self.failed + self.skipped


@dataclass(frozen=True)
class DebugSessionEvent:
    """Pass-through debug session lifecycle record."""

    session_id: str
    phase: DebugPhase


@dataclass(frozen=True)
class TelemetryRecord:
    """A record as delivered to a sink, in serializable form.

    Attributes:
        type: One of the RECORD_* constants.
        fields: Keyword arguments of the sink call.
    """

    type: str
    fields: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Flatten into a JSON-friendly dictionary."""
        data: dict[str, Any] = {"type": self.type}
        for key, value in self.fields.items():
            data[key] = value.value if isinstance(value, TaskResult | DebugPhase) else value
        return data

    @classmethod
    def focus_time(cls, duration_ms: int, interruption_count: int) -> "TelemetryRecord":
        return cls(
            RECORD_FOCUS_TIME,
            {"duration_ms": duration_ms, "interruption_count": interruption_count},
        )

    @classmethod
    def keystroke(cls, file_id: str, changed_character_count: int) -> "TelemetryRecord":
        return cls(
            RECORD_KEYSTROKE,
            {"file_id": file_id, "changed_character_count": changed_character_count},
        )

    @classmethod
    def build_event(
        cls,
        result: TaskResult,
        error_count: int | None = None,
        warning_count: int | None = None,
    ) -> "TelemetryRecord":
        return cls(
            RECORD_BUILD_EVENT,
            {"result": result, "error_count": error_count, "warning_count": warning_count},
        )

    @classmethod
    def test_run(cls, passed: int, failed: int, skipped: int) -> "TelemetryRecord":
        return cls(RECORD_TEST_RUN, {"passed": passed, "failed": failed, "skipped": skipped})

    @classmethod
    def debug_session(cls, session_id: str, phase: DebugPhase) -> "TelemetryRecord":
        return cls(RECORD_DEBUG_SESSION, {"session_id": session_id, "phase": phase})
