"""Replay of recorded editor event logs.

An event log is JSON Lines, one host event per line, with a millisecond
timestamp ``t`` relative to the start of the recording:

    {"t": 0,     "event": "window_focus", "focused": true}
    {"t": 1200,  "event": "text_change", "file": "src/app.py", "changes": [1, 1, 4]}
    {"t": 3000,  "event": "active_editor", "file": "README.md"}
    {"t": 9000,  "event": "task_start", "task": {"name": "npm: test", "group": "test"}}
    {"t": 15000, "event": "task_end", "task": {"name": "npm: test"}, "exit_code": 1,
     "output": "Tests: 1 failed, 4 passed, 5 total"}
    {"t": 16000, "event": "diagnostics", "files": {"src/app.py": ["error", "warning"]}}
    {"t": 20000, "event": "debug_session", "session_id": "dbg-1", "phase": "start"}
    {"t": 45000, "event": "window_focus", "focused": false}

Replay runs the real engine against a virtual clock, so debounce timers
fire at their recorded times and focus durations match the log exactly.
Blank lines and lines starting with ``#`` are skipped.
"""

import json
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from devflow.models.enums import DebugPhase, DiagnosticSeverity, TaskGroup
from devflow.telemetry.config import TelemetryConfig
from devflow.telemetry.constants import (
    EVENT_ACTIVE_EDITOR,
    EVENT_DEBUG_SESSION,
    EVENT_DIAGNOSTICS,
    EVENT_TASK_END,
    EVENT_TASK_START,
    EVENT_TEXT_CHANGE,
    EVENT_WINDOW_FOCUS,
)
from devflow.telemetry.engine import TelemetryEngine
from devflow.telemetry.exceptions import ReplayError
from devflow.telemetry.host import CallbackHost
from devflow.telemetry.models import Diagnostic, TaskDescriptor, TextChange
from devflow.telemetry.scheduling import VirtualClock, VirtualScheduler
from devflow.telemetry.sinks import TelemetrySink

logger = logging.getLogger(__name__)

# =============================================================================
# Event log models
# =============================================================================


class _Event(BaseModel):
    t: int = Field(..., ge=0, description="Milliseconds since the start of the recording")


class TaskPayload(BaseModel):
    """Task descriptor as written in an event log."""

    name: str = Field(..., min_length=1)
    group: str | None = Field(default=None, description="build, test, clean, rebuild")
    id: str | None = Field(default=None, description="Pairs task_start with task_end")

    def to_descriptor(self) -> TaskDescriptor:
        return TaskDescriptor(name=self.name, group=TaskGroup.parse(self.group), task_id=self.id)


class WindowFocusEvent(_Event):
    event: Literal["window_focus"]
    focused: bool


class ActiveEditorEvent(_Event):
    event: Literal["active_editor"]
    file: str | None = None


class TextChangeEvent(_Event):
    event: Literal["text_change"]
    file: str = Field(..., min_length=1)
    changes: list[Annotated[int, Field(ge=0)]] = Field(
        default_factory=list, description="Inserted text length of each content change"
    )


class TaskStartEvent(_Event):
    event: Literal["task_start"]
    task: TaskPayload


class TaskEndEvent(_Event):
    event: Literal["task_end"]
    task: TaskPayload
    exit_code: int | None = None
    output: str | None = None


class DiagnosticsEvent(_Event):
    event: Literal["diagnostics"]
    files: dict[str, list[DiagnosticSeverity]] = Field(
        ..., description="Full current diagnostic severities per touched file"
    )


class DebugSessionChangeEvent(_Event):
    event: Literal["debug_session"]
    session_id: str = Field(..., min_length=1)
    phase: DebugPhase


ReplayEvent = Annotated[
    WindowFocusEvent
    | ActiveEditorEvent
    | TextChangeEvent
    | TaskStartEvent
    | TaskEndEvent
    | DiagnosticsEvent
    | DebugSessionChangeEvent,
    Field(discriminator="event"),
]

_event_adapter: TypeAdapter[Any] = TypeAdapter(ReplayEvent)


def parse_event_line(line: str, line_number: int) -> Any:
    """Parse and validate one event log line.

    Raises:
        ReplayError: If the line is not valid JSON or not a known event.
    """
    try:
        raw = json.loads(line)
    except json.JSONDecodeError as e:
        raise ReplayError(f"Invalid JSON: {e.msg}", line_number=line_number) from e

    event_name = raw.get("event") if isinstance(raw, dict) else None
    try:
        return _event_adapter.validate_python(raw)
    except PydanticValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(p) for p in first["loc"]) or "event"
        raise ReplayError(
            f"Invalid event: {location}: {first['msg']}",
            line_number=line_number,
            event=event_name if isinstance(event_name, str) else None,
        ) from e


def iter_events(lines: Iterable[str]) -> Iterable[tuple[int, Any]]:
    """Yield ``(line_number, event)`` for each non-blank, non-comment line."""
    for line_number, line in enumerate(lines, start=1):
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        yield line_number, parse_event_line(stripped, line_number)


# =============================================================================
# Replay host
# =============================================================================


class ReplayHost(CallbackHost):
    """CallbackHost that applies parsed event log entries."""

    def apply(self, event: Any) -> None:
        """Fire the host event described by one parsed log entry."""
        name = event.event
        if name == EVENT_WINDOW_FOCUS:
            self.set_focus(event.focused)
        elif name == EVENT_ACTIVE_EDITOR:
            self.switch_editor(event.file)
        elif name == EVENT_TEXT_CHANGE:
            self.change_text(event.file, [TextChange(n) for n in event.changes])
        elif name == EVENT_TASK_START:
            self.start_task(event.task.to_descriptor())
        elif name == EVENT_TASK_END:
            self.end_task(event.task.to_descriptor(), event.exit_code, event.output)
        elif name == EVENT_DIAGNOSTICS:
            self.publish_diagnostics(
                {
                    file_id: [Diagnostic(severity) for severity in severities]
                    for file_id, severities in event.files.items()
                }
            )
        elif name == EVENT_DEBUG_SESSION:
            self.change_debug_session(event.session_id, event.phase)


@dataclass
class ReplaySummary:
    """Outcome of a replay run."""

    events: int
    duration_ms: int
    sink_failures: int


def replay_events(
    lines: Iterable[str],
    sink: TelemetrySink,
    config: TelemetryConfig | None = None,
    initially_focused: bool = False,
) -> ReplaySummary:
    """Replay an event log through a fresh engine.

    The engine is disposed at the end of the log (closing any open focus
    session at the last event's time) or when a line fails to parse.

    Args:
        lines: Event log lines.
        sink: Receiver of emitted telemetry records.
        config: Engine configuration.
        initially_focused: Whether the window is focused before the first event.

    Returns:
        ReplaySummary with event count and recording duration.

    Raises:
        ReplayError: On malformed lines or timestamps that go backwards.
    """
    clock = VirtualClock()
    scheduler = VirtualScheduler(clock)
    host = ReplayHost(focused=initially_focused)
    engine = TelemetryEngine(host, sink, config, clock=clock, scheduler=scheduler)
    engine.start()

    count = 0
    last_t = 0
    try:
        for line_number, event in iter_events(lines):
            if event.t < last_t:
                raise ReplayError(
                    f"Timestamp {event.t} is earlier than previous {last_t}",
                    line_number=line_number,
                    event=event.event,
                )
            last_t = event.t
            scheduler.advance_to(event.t / 1000)
            host.apply(event)
            count += 1
    finally:
        engine.dispose()

    logger.info(f"Replayed {count} event(s) covering {last_t}ms")
    return ReplaySummary(events=count, duration_ms=last_t, sink_failures=engine.sink_failures)
