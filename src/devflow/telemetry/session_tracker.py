"""Focus session tracking.

The tracker is an explicit two-state machine:

    Inactive --focus gained--> Active(start, interruptions=0)
    Active   --editor switch--> Active(interruptions + 1)
    Active   --focus lost----> Inactive   (emit if duration >= floor)

It reacts only to a *change* of focus, so duplicate focus events are
harmless. Teardown goes through the same close path as a focus loss.
"""

import logging

from devflow.telemetry.constants import DEFAULT_MIN_FOCUS_SESSION_SECONDS
from devflow.telemetry.models import FocusSession
from devflow.telemetry.scheduling import Clock, monotonic_clock
from devflow.telemetry.sinks import TelemetrySink

logger = logging.getLogger(__name__)


class SessionTracker:
    """Maintains the focus state machine and reports eligible sessions."""

    def __init__(
        self,
        sink: TelemetrySink,
        clock: Clock = monotonic_clock,
        min_session_seconds: float = DEFAULT_MIN_FOCUS_SESSION_SECONDS,
    ):
        """Initialize the tracker in the Inactive state.

        Args:
            sink: Receives ``record_focus_time`` for eligible sessions.
            clock: Monotonic clock in seconds.
            min_session_seconds: Sessions shorter than this are discarded.
        """
        self._sink = sink
        self._clock = clock
        self._min_session_seconds = min_session_seconds
        self._focused = False
        self._session: FocusSession | None = None

    @property
    def session(self) -> FocusSession | None:
        """The open session, or None while Inactive."""
        return self._session

    @property
    def is_active(self) -> bool:
        return self._session is not None

    def on_window_focus_changed(self, focused: bool) -> None:
        """Handle a window focus notification.

        Args:
            focused: New focus value reported by the host.
        """
        if focused == self._focused:
            return
        self._focused = focused
        if focused:
            self._open()
        else:
            self._close()

    def on_active_editor_changed(self, file_id: str | None = None) -> None:
        """Count an editor switch as an interruption of the open session."""
        if self._session is None:
            return
        self._session.interruption_count += 1
        logger.debug(
            f"Editor switch to {file_id or '<none>'}: "
            f"{self._session.interruption_count} interruption(s) this session"
        )

    def close(self) -> None:
        """Close any open session exactly as a focus loss would."""
        if self._focused:
            self.on_window_focus_changed(False)

    def _open(self) -> None:
        self._session = FocusSession(start_time=self._clock())
        logger.debug("Focus session opened")

    def _close(self) -> None:
        session = self._session
        if session is None:
            return
        self._session = None
        session.end_time = self._clock()
        # Floor applies to the unrounded duration
        elapsed = session.end_time - session.start_time
        if elapsed < self._min_session_seconds:
            logger.debug(
                f"Discarding focus session of {elapsed:.3f}s "
                f"(below {self._min_session_seconds}s floor)"
            )
            return

        duration_ms = session.duration_ms()
        logger.info(
            f"Focus session closed: {duration_ms}ms, "
            f"{session.interruption_count} interruption(s)"
        )
        self._sink.record_focus_time(duration_ms, session.interruption_count)
