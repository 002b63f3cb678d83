"""Tests for telemetry sinks and sink wrappers."""

import io
import json
import logging
from unittest.mock import MagicMock

import pytest

from devflow.models.enums import DebugPhase, TaskResult
from devflow.telemetry.constants import (
    DATA_TYPE_FOCUS_TIME,
    DATA_TYPES,
    RECORD_BUILD_EVENT,
    RECORD_FOCUS_TIME,
    RECORD_KEYSTROKE,
)
from devflow.telemetry.models import TelemetryRecord
from devflow.telemetry.privacy import PrivacyConsent, declined_consent, default_consent
from devflow.telemetry.sinks import (
    ConsentFilteringSink,
    FanOutSink,
    JsonlSink,
    LoggingSink,
    MemorySink,
    SafeSink,
    TelemetrySink,
)


class TestTelemetryRecord:
    def test_to_dict_flattens_enums(self) -> None:
        record = TelemetryRecord.build_event(TaskResult.FAILURE, 2, 1)
        assert record.to_dict() == {
            "type": RECORD_BUILD_EVENT,
            "result": "failure",
            "error_count": 2,
            "warning_count": 1,
        }

    def test_debug_session_phase_flattened(self) -> None:
        record = TelemetryRecord.debug_session("dbg", DebugPhase.BREAKPOINT)
        assert record.to_dict()["phase"] == "breakpoint"


class TestMemorySink:
    def test_records_in_order(self) -> None:
        sink = MemorySink()
        sink.record_keystroke("a.py", 1)
        sink.record_focus_time(31000, 2)
        sink.record_test_run(1, 0, 0)

        assert [r.type for r in sink.records] == [RECORD_KEYSTROKE, RECORD_FOCUS_TIME, "test_run"]
        assert sink.of_type(RECORD_FOCUS_TIME)[0].fields == {
            "duration_ms": 31000,
            "interruption_count": 2,
        }

    def test_satisfies_protocol(self) -> None:
        assert isinstance(MemorySink(), TelemetrySink)
        assert isinstance(SafeSink(MemorySink()), TelemetrySink)


class TestJsonlSink:
    def test_one_json_object_per_line(self) -> None:
        stream = io.StringIO()
        sink = JsonlSink(stream)
        sink.record_build_event(TaskResult.SUCCESS)
        sink.record_debug_session("dbg-1", DebugPhase.START)

        lines = stream.getvalue().splitlines()
        assert [json.loads(line) for line in lines] == [
            {"type": "build_event", "result": "success", "error_count": None, "warning_count": None},
            {"type": "debug_session", "session_id": "dbg-1", "phase": "start"},
        ]


class TestLoggingSink:
    def test_logs_record(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.INFO, logger="devflow"):
            LoggingSink().record_keystroke("a.py", 3)
        assert "[RECORD]" in caplog.text
        assert '"file_id": "a.py"' in caplog.text


class TestFanOutSink:
    def test_delivers_to_every_sink(self) -> None:
        first, second = MemorySink(), MemorySink()
        FanOutSink(first, second).record_test_run(3, 1, 0)
        assert first.records == second.records
        assert len(first.records) == 1

    def test_failing_sink_does_not_starve_later_sinks(self) -> None:
        broken = MemorySink()
        broken.emit = MagicMock(side_effect=OSError("disk full"))  # type: ignore[method-assign]
        healthy = MemorySink()

        with pytest.raises(OSError, match="disk full"):
            FanOutSink(broken, healthy).record_keystroke("a.py", 2)

        assert [r.type for r in healthy.records] == [RECORD_KEYSTROKE]


class TestSafeSink:
    def test_passes_calls_through(self) -> None:
        inner = MagicMock()
        safe = SafeSink(inner)
        safe.record_build_event(TaskResult.FAILURE, 2, 1)
        safe.record_keystroke("a.py", 4)

        inner.record_build_event.assert_called_once_with(TaskResult.FAILURE, 2, 1)
        inner.record_keystroke.assert_called_once_with("a.py", 4)
        assert safe.failures == 0

    def test_swallows_and_counts_failures(self, caplog: pytest.LogCaptureFixture) -> None:
        inner = MagicMock()
        inner.record_focus_time.side_effect = ConnectionError("backend down")
        safe = SafeSink(inner)

        with caplog.at_level(logging.WARNING, logger="devflow"):
            safe.record_focus_time(40000, 0)
            safe.record_focus_time(50000, 1)

        assert safe.failures == 2
        assert "backend down" in caplog.text


class TestConsentFilteringSink:
    def test_no_consent_drops_everything(self) -> None:
        inner = MemorySink()
        sink = ConsentFilteringSink(inner, None)
        sink.record_keystroke("a.py", 1)
        sink.record_focus_time(40000, 0)

        assert inner.records == []
        assert sink.dropped == 2

    def test_declined_consent_drops_everything(self) -> None:
        inner = MemorySink()
        sink = ConsentFilteringSink(inner, declined_consent("user_x"))
        sink.record_build_event(TaskResult.SUCCESS)
        assert inner.records == []

    def test_default_consent_allows_everything(self) -> None:
        inner = MemorySink()
        sink = ConsentFilteringSink(inner, default_consent("user_x"))
        sink.record_keystroke("a.py", 1)
        sink.record_build_event(TaskResult.FAILURE, 1, 0)
        sink.record_test_run(1, 1, 1)
        sink.record_debug_session("dbg", DebugPhase.STOP)
        sink.record_focus_time(40000, 0)

        assert len(inner.records) == 5
        assert sink.dropped == 0
        assert inner.records[1].fields == {
            "result": TaskResult.FAILURE,
            "error_count": 1,
            "warning_count": 0,
        }

    def test_per_data_type_consent(self) -> None:
        consent = PrivacyConsent(
            user_id="user_x",
            consent_given=True,
            data_types={t: t == DATA_TYPE_FOCUS_TIME for t in DATA_TYPES},
        )
        inner = MemorySink()
        sink = ConsentFilteringSink(inner, consent)
        sink.record_keystroke("a.py", 1)
        sink.record_focus_time(40000, 0)

        assert [r.type for r in inner.records] == [RECORD_FOCUS_TIME]
        assert sink.allows(RECORD_FOCUS_TIME)
        assert not sink.allows(RECORD_KEYSTROKE)

    def test_inner_sink_needs_only_the_protocol(self) -> None:
        inner = MagicMock()
        sink = ConsentFilteringSink(inner, default_consent("user_x"))
        sink.record_test_run(4, 1, 0)
        inner.record_test_run.assert_called_once_with(passed=4, failed=1, skipped=0)
