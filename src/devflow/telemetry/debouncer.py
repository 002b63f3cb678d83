"""Edit activity debouncing.

Every edit is forwarded to the sink immediately. Alongside, the debouncer
keeps a running character count (globally and per file) that resets once
the edit stream has been quiet for the inactivity window. The counters
are reserved for a future batched-emission feature; nothing reads them
today.
"""

import logging
import threading

from devflow.telemetry.constants import DEFAULT_EDIT_INACTIVITY_SECONDS
from devflow.telemetry.models import KeystrokeBurst
from devflow.telemetry.scheduling import (
    Clock,
    Scheduler,
    ThreadingScheduler,
    TimerHandle,
    monotonic_clock,
)
from devflow.telemetry.sinks import TelemetrySink

logger = logging.getLogger(__name__)


class ActivityDebouncer:
    """Forwards edits and maintains an inactivity-reset edit counter."""

    def __init__(
        self,
        sink: TelemetrySink,
        scheduler: Scheduler | None = None,
        clock: Clock = monotonic_clock,
        inactivity_seconds: float = DEFAULT_EDIT_INACTIVITY_SECONDS,
    ):
        """Initialize debouncer.

        Args:
            sink: Receives ``record_keystroke`` for every edit.
            scheduler: Timer source; threading timers when omitted.
            clock: Clock used to stamp burst windows.
            inactivity_seconds: Quiet period after which counters reset.
        """
        self._sink = sink
        self._scheduler = scheduler or ThreadingScheduler()
        self._clock = clock
        self.inactivity_seconds = inactivity_seconds

        self._lock = threading.Lock()
        self._timer: TimerHandle | None = None
        self._generation = 0
        self._total_characters = 0
        self._bursts: dict[str, KeystrokeBurst] = {}

    @property
    def total_characters(self) -> int:
        """Characters changed across all files since the last reset (reserved)."""
        with self._lock:
            return self._total_characters

    def burst(self, file_id: str) -> KeystrokeBurst | None:
        """Current burst for a file, or None if it has no edits since the last reset."""
        with self._lock:
            return self._bursts.get(file_id)

    @property
    def has_pending_reset(self) -> bool:
        with self._lock:
            return self._timer is not None

    def on_edit_event(self, file_id: str, changed_character_count: int) -> None:
        """Forward one edit and restart the inactivity timer.

        Args:
            file_id: Identifier of the edited document.
            changed_character_count: Characters inserted by the edit.
        """
        self._sink.record_keystroke(file_id, changed_character_count)

        with self._lock:
            self._total_characters += changed_character_count
            burst = self._bursts.get(file_id)
            if burst is None:
                burst = KeystrokeBurst(file_id=file_id, window_start=self._clock())
                self._bursts[file_id] = burst
            burst.changed_character_count += changed_character_count
            self._schedule_reset()

    def cancel(self) -> None:
        """Cancel the pending reset without firing it."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            self._generation += 1

    def _schedule_reset(self) -> None:
        # Caller holds the lock
        if self._timer is not None:
            self._timer.cancel()
        self._generation += 1
        generation = self._generation
        self._timer = self._scheduler.call_later(
            self.inactivity_seconds,
            lambda: self._reset(generation),
        )

    def _reset(self, generation: int) -> None:
        with self._lock:
            # A timer that lost the race with a newer edit or a cancel is stale
            if generation != self._generation:
                return
            discarded = self._total_characters
            self._total_characters = 0
            self._bursts.clear()
            self._timer = None

        logger.debug(f"Edit stream idle; reset counter ({discarded} characters)")
