"""Telemetry dispatch.

TelemetryEngine subscribes to a host event source, routes each event to
the component that owns it and forwards the resulting records to the
sink. All sink calls go through SafeSink, so a failing sink never raises
into the host's event-dispatch context.

Lifecycle:
    engine = TelemetryEngine(host, sink, config)
    engine.start()      # subscribe; open a session if already focused
    ...
    engine.dispose()    # cancel timer, close session, unsubscribe
"""

import logging
from collections.abc import Sequence

from devflow.models.enums import DebugPhase, TaskKind
from devflow.telemetry.config import TelemetryConfig
from devflow.telemetry.debouncer import ActivityDebouncer
from devflow.telemetry.diagnostics import aggregate_diagnostics
from devflow.telemetry.exceptions import HostError
from devflow.telemetry.host import Disposable, HostEventSource
from devflow.telemetry.models import (
    BuildEvent,
    DebugSessionEvent,
    TaskDescriptor,
    TextChange,
)
from devflow.telemetry.scheduling import Clock, Scheduler, monotonic_clock
from devflow.telemetry.session_tracker import SessionTracker
from devflow.telemetry.sinks import SafeSink, TelemetrySink
from devflow.telemetry.task_classifier import (
    classify_descriptor,
    derive_result,
    parse_test_summary,
)

logger = logging.getLogger(__name__)


class TelemetryEngine:
    """Composes the session tracker, debouncer, classifier and aggregator."""

    def __init__(
        self,
        host: HostEventSource,
        sink: TelemetrySink,
        config: TelemetryConfig | None = None,
        clock: Clock = monotonic_clock,
        scheduler: Scheduler | None = None,
    ):
        """Initialize engine. Nothing is subscribed until ``start``.

        Args:
            host: Event source to subscribe to.
            sink: Receiver of telemetry records; wrapped in SafeSink.
            config: Engine thresholds (defaults when omitted).
            clock: Monotonic clock in seconds.
            scheduler: Timer source for the edit debouncer.
        """
        self.config = config or TelemetryConfig()
        self._host = host
        self._sink = SafeSink(sink)
        self._clock = clock

        self.sessions = SessionTracker(
            self._sink,
            clock=clock,
            min_session_seconds=self.config.focus.min_session_seconds,
        )
        self.debouncer = ActivityDebouncer(
            self._sink,
            scheduler=scheduler,
            clock=clock,
            inactivity_seconds=self.config.edits.inactivity_seconds,
        )

        self._subscriptions: list[Disposable] = []
        self._task_starts: dict[str, float] = {}
        self._started = False
        self._disposed = False

    @property
    def sink_failures(self) -> int:
        """Sink calls that raised and were dropped."""
        return self._sink.failures

    @property
    def is_running(self) -> bool:
        return self._started and not self._disposed

    def start(self) -> None:
        """Subscribe to all host events.

        Raises:
            HostError: If the engine was already started or disposed.
        """
        if self._started or self._disposed:
            raise HostError(
                "Telemetry engine cannot be started twice",
                {"started": self._started, "disposed": self._disposed},
            )

        self._started = True
        host = self._host
        self._subscriptions = [
            host.on_window_focus_changed(self.on_window_focus_changed),
            host.on_active_editor_changed(self.on_active_editor_changed),
            host.on_text_document_changed(self.on_text_document_changed),
            host.on_task_started(self.on_task_started),
            host.on_task_ended(self.on_task_ended),
            host.on_diagnostics_changed(self.on_diagnostics_changed),
            host.on_debug_session_changed(self.on_debug_session_changed),
        ]

        if host.is_window_focused():
            self.sessions.on_window_focus_changed(True)
        logger.info("Telemetry engine started")

    def dispose(self) -> None:
        """Tear down: cancel the debounce timer, close the session, unsubscribe.

        Safe to call more than once.
        """
        if self._disposed:
            return
        self._disposed = True

        self.debouncer.cancel()
        self.sessions.close()
        for subscription in self._subscriptions:
            subscription.dispose()
        self._subscriptions.clear()
        self._task_starts.clear()
        logger.info("Telemetry engine disposed")

    # =========================================================================
    # Host event handlers
    # =========================================================================

    def on_window_focus_changed(self, focused: bool) -> None:
        if self._disposed:
            return
        self.sessions.on_window_focus_changed(focused)

    def on_active_editor_changed(self, file_id: str | None) -> None:
        if self._disposed:
            return
        self.sessions.on_active_editor_changed(file_id)

    def on_text_document_changed(self, file_id: str, changes: Sequence[TextChange]) -> None:
        if self._disposed:
            return
        changed = sum(change.text_length for change in changes)
        self.debouncer.on_edit_event(file_id, changed)

    def on_task_started(self, task: TaskDescriptor) -> None:
        if self._disposed:
            return
        self._task_starts[task.key] = self._clock()
        logger.debug(f"Task started: {task.name}")

    def on_task_ended(
        self,
        task: TaskDescriptor,
        exit_code: int | None = None,
        output: str | None = None,
    ) -> None:
        if self._disposed:
            return

        started = self._task_starts.pop(task.key, None)
        kind = classify_descriptor(task)
        result = derive_result(exit_code)
        if started is not None:
            elapsed_ms = int((self._clock() - started) * 1000)
            logger.debug(f"Task ended: {task.name} ({kind.value}, {result.value}, {elapsed_ms}ms)")
        else:
            logger.debug(f"Task ended: {task.name} ({kind.value}, {result.value})")

        if kind == TaskKind.OTHER:
            return

        event = BuildEvent(kind=kind, result=result)
        self._sink.record_build_event(event.result)

        if event.kind == TaskKind.TEST:
            summary = parse_test_summary(output)
            if summary is not None:
                self._sink.record_test_run(summary.passed, summary.failed, summary.skipped)

    def on_diagnostics_changed(self, file_ids: Sequence[str]) -> None:
        if self._disposed:
            return
        event = aggregate_diagnostics(file_ids, self._host.get_diagnostics)
        if event is None:
            return
        self._sink.record_build_event(event.result, event.error_count, event.warning_count)

    def on_debug_session_changed(self, session_id: str, phase: DebugPhase) -> None:
        if self._disposed:
            return
        event = DebugSessionEvent(session_id=session_id, phase=DebugPhase(phase))
        self._sink.record_debug_session(event.session_id, event.phase)
