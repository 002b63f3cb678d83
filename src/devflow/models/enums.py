"""Enum types for DevFlow.

Type-safe enumerations for the values that flow through the telemetry
engine and out to the sink. All are str enums so they serialize as their
value.
"""

from enum import Enum


class TaskKind(str, Enum):
    """Classification of a finished host task."""

    BUILD = "build"
    TEST = "test"
    OTHER = "other"

    @classmethod
    def values(cls) -> list[str]:
        """Return list of all task kinds."""
        return [k.value for k in cls]


class TaskResult(str, Enum):
    """Outcome of a build or test."""

    SUCCESS = "success"
    FAILURE = "failure"

    @classmethod
    def values(cls) -> list[str]:
        """Return list of all results."""
        return [r.value for r in cls]


class TaskGroup(str, Enum):
    """Task group reported by the host (mirrors editor task groups)."""

    BUILD = "build"
    TEST = "test"
    CLEAN = "clean"
    REBUILD = "rebuild"

    @classmethod
    def parse(cls, value: "str | TaskGroup | None") -> "TaskGroup | None":
        """Parse a host-reported group, returning None when unknown."""
        if value is None or isinstance(value, TaskGroup):
            return value
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


class DebugPhase(str, Enum):
    """Debug session lifecycle phase."""

    START = "start"
    STOP = "stop"
    BREAKPOINT = "breakpoint"

    @classmethod
    def values(cls) -> list[str]:
        """Return list of all phases."""
        return [p.value for p in cls]


class DiagnosticSeverity(str, Enum):
    """Severity of a single editor diagnostic."""

    ERROR = "error"
    WARNING = "warning"
    INFORMATION = "information"
    HINT = "hint"
