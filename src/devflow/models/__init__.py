"""Shared models for DevFlow."""

from devflow.models.enums import (
    DebugPhase,
    DiagnosticSeverity,
    TaskGroup,
    TaskKind,
    TaskResult,
)

__all__ = [
    "DebugPhase",
    "DiagnosticSeverity",
    "TaskGroup",
    "TaskKind",
    "TaskResult",
]
