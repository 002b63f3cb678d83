"""Tests for event log parsing and replay."""

import json

import pytest

from devflow.models.enums import DebugPhase, DiagnosticSeverity, TaskGroup, TaskResult
from devflow.telemetry.config import FocusConfig, TelemetryConfig
from devflow.telemetry.constants import (
    RECORD_BUILD_EVENT,
    RECORD_DEBUG_SESSION,
    RECORD_FOCUS_TIME,
    RECORD_KEYSTROKE,
    RECORD_TEST_RUN,
)
from devflow.telemetry.exceptions import ReplayError
from devflow.telemetry.replay import (
    DiagnosticsEvent,
    TaskEndEvent,
    WindowFocusEvent,
    iter_events,
    parse_event_line,
    replay_events,
)
from devflow.telemetry.sinks import MemorySink, RecordSink

SAMPLE_LOG = [
    '{"t": 0, "event": "window_focus", "focused": true}',
    '{"t": 1200, "event": "text_change", "file": "src/app.py", "changes": [1, 1, 4]}',
    '{"t": 3000, "event": "active_editor", "file": "README.md"}',
    '{"t": 9000, "event": "task_start", "task": {"name": "npm: test", "group": "test"}}',
    (
        '{"t": 15000, "event": "task_end", "task": {"name": "npm: test", "group": "test"}, '
        '"exit_code": 1, "output": "Tests: 1 failed, 4 passed, 5 total"}'
    ),
    '{"t": 16000, "event": "diagnostics", "files": {"src/app.py": ["error", "warning"]}}',
    '{"t": 20000, "event": "debug_session", "session_id": "dbg-1", "phase": "start"}',
    '{"t": 45000, "event": "window_focus", "focused": false}',
]


def _line(**fields: object) -> str:
    return json.dumps(fields)


class TestParseEventLine:
    def test_window_focus(self) -> None:
        event = parse_event_line('{"t": 5, "event": "window_focus", "focused": true}', 1)
        assert isinstance(event, WindowFocusEvent)
        assert event.focused is True

    def test_task_end_payload(self) -> None:
        event = parse_event_line(SAMPLE_LOG[4], 5)
        assert isinstance(event, TaskEndEvent)
        descriptor = event.task.to_descriptor()
        assert descriptor.group == TaskGroup.TEST
        assert event.exit_code == 1

    def test_unknown_task_group_is_dropped(self) -> None:
        event = parse_event_line(
            _line(t=0, event="task_start", task={"name": "x", "group": "deploy"}), 1
        )
        assert event.task.to_descriptor().group is None

    def test_diagnostics_severities(self) -> None:
        event = parse_event_line(SAMPLE_LOG[5], 6)
        assert isinstance(event, DiagnosticsEvent)
        assert event.files["src/app.py"] == [DiagnosticSeverity.ERROR, DiagnosticSeverity.WARNING]

    def test_invalid_json(self) -> None:
        with pytest.raises(ReplayError) as exc_info:
            parse_event_line("{not json", 3)
        assert exc_info.value.line_number == 3

    def test_unknown_event(self) -> None:
        with pytest.raises(ReplayError) as exc_info:
            parse_event_line(_line(t=0, event="window_resize"), 2)
        assert exc_info.value.event == "window_resize"

    def test_missing_field(self) -> None:
        with pytest.raises(ReplayError) as exc_info:
            parse_event_line(_line(t=0, event="window_focus"), 4)
        assert "focused" in str(exc_info.value)

    def test_negative_timestamp(self) -> None:
        with pytest.raises(ReplayError):
            parse_event_line(_line(t=-1, event="window_focus", focused=True), 1)

    def test_negative_change_length(self) -> None:
        with pytest.raises(ReplayError):
            parse_event_line(_line(t=0, event="text_change", file="a.py", changes=[-1]), 1)

    def test_invalid_debug_phase(self) -> None:
        with pytest.raises(ReplayError):
            parse_event_line(_line(t=0, event="debug_session", session_id="d", phase="pause"), 1)


class TestIterEvents:
    def test_skips_blank_and_comment_lines(self) -> None:
        lines = ["# recorded session", "", SAMPLE_LOG[0], "   ", SAMPLE_LOG[7]]
        numbered = list(iter_events(lines))
        assert [n for n, _ in numbered] == [3, 5]


class TestReplayEvents:
    def test_sample_session(self) -> None:
        sink = MemorySink()
        summary = replay_events(SAMPLE_LOG, sink)

        assert summary.events == 8
        assert summary.duration_ms == 45000
        assert summary.sink_failures == 0
        assert [r.type for r in sink.records] == [
            RECORD_KEYSTROKE,
            RECORD_BUILD_EVENT,
            RECORD_TEST_RUN,
            RECORD_BUILD_EVENT,
            RECORD_DEBUG_SESSION,
            RECORD_FOCUS_TIME,
        ]
        assert sink.records[0].fields["changed_character_count"] == 6
        assert sink.records[1].fields["result"] == TaskResult.FAILURE
        assert sink.records[2].fields == {"passed": 4, "failed": 1, "skipped": 0}
        assert sink.records[3].fields["error_count"] == 1
        assert sink.records[4].fields["phase"] == DebugPhase.START
        assert sink.records[5].fields == {"duration_ms": 45000, "interruption_count": 1}

    def test_open_session_closed_at_end_of_log(self) -> None:
        sink = MemorySink()
        replay_events(
            [
                _line(t=0, event="window_focus", focused=True),
                _line(t=40000, event="active_editor", file="a.py"),
            ],
            sink,
        )
        assert sink.of_type(RECORD_FOCUS_TIME)[0].fields["duration_ms"] == 40000

    def test_initially_focused(self) -> None:
        sink = MemorySink()
        replay_events(
            [_line(t=31000, event="window_focus", focused=False)], sink, initially_focused=True
        )
        assert sink.of_type(RECORD_FOCUS_TIME)[0].fields["duration_ms"] == 31000

    def test_config_thresholds_apply(self) -> None:
        sink = MemorySink()
        config = TelemetryConfig(focus=FocusConfig(min_session_seconds=60))
        replay_events(SAMPLE_LOG, sink, config)
        assert sink.of_type(RECORD_FOCUS_TIME) == []

    def test_timestamps_must_not_go_backwards(self) -> None:
        with pytest.raises(ReplayError) as exc_info:
            replay_events(
                [
                    _line(t=5000, event="window_focus", focused=True),
                    _line(t=1000, event="window_focus", focused=False),
                ],
                MemorySink(),
            )
        assert exc_info.value.line_number == 2

    def test_bad_line_still_disposes_engine(self) -> None:
        """Records produced before the error, including the closing session, are kept."""
        sink = MemorySink()
        with pytest.raises(ReplayError):
            replay_events(
                [_line(t=0, event="window_focus", focused=True), "{broken", ""],
                sink,
                initially_focused=False,
            )
        # Session closed at t=0 is below the floor, so nothing is emitted
        assert sink.records == []

    def test_failing_sink_counts_failures(self) -> None:
        class BrokenSink(RecordSink):
            def emit(self, record) -> None:
                raise OSError("disk full")

        summary = replay_events(SAMPLE_LOG, BrokenSink())
        assert summary.sink_failures == 6

    def test_empty_log(self) -> None:
        summary = replay_events([], MemorySink())
        assert summary.events == 0
        assert summary.duration_ms == 0
