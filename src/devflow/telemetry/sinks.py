"""Telemetry sinks.

The engine talks to a narrow, write-only sink interface. Return values
are never read. Concrete sinks here cover the local cases: logging,
JSON Lines output and in-memory capture. SafeSink and
ConsentFilteringSink wrap any sink.
"""

import json
import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Protocol, TextIO, runtime_checkable

from devflow.models.enums import DebugPhase, TaskResult
from devflow.telemetry.constants import RECORD_DATA_TYPES
from devflow.telemetry.models import TelemetryRecord

if TYPE_CHECKING:
    from devflow.telemetry.privacy import PrivacyConsent

logger = logging.getLogger(__name__)


@runtime_checkable
class TelemetrySink(Protocol):
    """Write-only interface accepting telemetry records."""

    def record_debug_session(self, session_id: str, phase: DebugPhase) -> None: ...

    def record_build_event(
        self,
        result: TaskResult,
        error_count: int | None = None,
        warning_count: int | None = None,
    ) -> None: ...

    def record_test_run(self, passed: int, failed: int, skipped: int) -> None: ...

    def record_keystroke(self, file_id: str, changed_character_count: int) -> None: ...

    def record_focus_time(self, duration_ms: int, interruption_count: int) -> None: ...


class RecordSink:
    """Base for sinks that handle every call as a TelemetryRecord.

    Subclasses implement ``emit``.
    """

    def emit(self, record: TelemetryRecord) -> None:
        raise NotImplementedError

    def record_debug_session(self, session_id: str, phase: DebugPhase) -> None:
        self.emit(TelemetryRecord.debug_session(session_id, phase))

    def record_build_event(
        self,
        result: TaskResult,
        error_count: int | None = None,
        warning_count: int | None = None,
    ) -> None:
        self.emit(TelemetryRecord.build_event(result, error_count, warning_count))

    def record_test_run(self, passed: int, failed: int, skipped: int) -> None:
        self.emit(TelemetryRecord.test_run(passed, failed, skipped))

    def record_keystroke(self, file_id: str, changed_character_count: int) -> None:
        self.emit(TelemetryRecord.keystroke(file_id, changed_character_count))

    def record_focus_time(self, duration_ms: int, interruption_count: int) -> None:
        self.emit(TelemetryRecord.focus_time(duration_ms, interruption_count))


class MemorySink(RecordSink):
    """Keeps every record in a list, in delivery order."""

    def __init__(self) -> None:
        self.records: list[TelemetryRecord] = []

    def emit(self, record: TelemetryRecord) -> None:
        self.records.append(record)

    def of_type(self, record_type: str) -> list[TelemetryRecord]:
        """Records of one RECORD_* type."""
        return [r for r in self.records if r.type == record_type]


class LoggingSink(RecordSink):
    """Logs each record at INFO on the ``devflow.telemetry.sinks`` logger."""

    def emit(self, record: TelemetryRecord) -> None:
        logger.info("[RECORD] %s", json.dumps(record.to_dict(), sort_keys=True))


class JsonlSink(RecordSink):
    """Writes one JSON object per record to a text stream."""

    def __init__(self, stream: TextIO):
        self._stream = stream

    def emit(self, record: TelemetryRecord) -> None:
        self._stream.write(json.dumps(record.to_dict()) + "\n")
        self._stream.flush()


class FanOutSink(RecordSink):
    """Delivers each record to several sinks in order.

    A failing sink does not stop delivery to the rest; the first error is
    re-raised once every sink has been tried.
    """

    def __init__(self, *sinks: RecordSink):
        self._sinks = sinks

    def emit(self, record: TelemetryRecord) -> None:
        first_error: Exception | None = None
        for sink in self._sinks:
            try:
                sink.emit(record)
            except Exception as e:
                logger.warning(f"{type(sink).__name__} failed to emit {record.type}: {e}")
                if first_error is None:
                    first_error = e
        if first_error is not None:
            raise first_error


class SafeSink:
    """Wrap a sink so that no sink failure reaches the event-dispatch context.

    Delivery is best-effort: a failing call is logged and dropped, never
    retried.
    """

    def __init__(self, inner: TelemetrySink):
        self._inner = inner
        self.failures = 0

    def _deliver(self, kind: str, call: Callable[..., object], *args: Any) -> None:
        try:
            call(*args)
        except Exception as e:
            self.failures += 1
            logger.warning(f"Telemetry sink failed to record {kind}: {e}")

    def record_debug_session(self, session_id: str, phase: DebugPhase) -> None:
        self._deliver("debug_session", self._inner.record_debug_session, session_id, phase)

    def record_build_event(
        self,
        result: TaskResult,
        error_count: int | None = None,
        warning_count: int | None = None,
    ) -> None:
        self._deliver(
            "build_event", self._inner.record_build_event, result, error_count, warning_count
        )

    def record_test_run(self, passed: int, failed: int, skipped: int) -> None:
        self._deliver("test_run", self._inner.record_test_run, passed, failed, skipped)

    def record_keystroke(self, file_id: str, changed_character_count: int) -> None:
        self._deliver(
            "keystroke", self._inner.record_keystroke, file_id, changed_character_count
        )

    def record_focus_time(self, duration_ms: int, interruption_count: int) -> None:
        self._deliver(
            "focus_time", self._inner.record_focus_time, duration_ms, interruption_count
        )


class ConsentFilteringSink(RecordSink):
    """Drops records whose data type the user has not consented to.

    Records pass through to ``inner`` as sink calls, so the inner sink
    need not be a RecordSink.
    """

    def __init__(self, inner: TelemetrySink, consent: "PrivacyConsent | None"):
        self._inner = inner
        self._consent = consent
        self.dropped = 0

    def allows(self, record_type: str) -> bool:
        if self._consent is None:
            return False
        return self._consent.allows(RECORD_DATA_TYPES[record_type])

    def emit(self, record: TelemetryRecord) -> None:
        if not self.allows(record.type):
            self.dropped += 1
            logger.debug(f"Dropped {record.type} record: no consent")
            return
        getattr(self._inner, f"record_{record.type}")(**record.fields)
