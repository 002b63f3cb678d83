"""Host event source interface.

The engine does not know which editor it runs in. The host exposes a
callback-registration surface: each ``on_*`` method registers a listener
and returns a Disposable that unregisters it. ``get_diagnostics`` and
``is_window_focused`` are synchronous side channels.

``EventEmitter`` and ``CallbackHost`` are the in-process building blocks
used by the replay host and by embedders that bridge another editor.
"""

from collections.abc import Callable, Sequence
from typing import Any, Generic, Protocol, TypeVar, runtime_checkable

from devflow.models.enums import DebugPhase
from devflow.telemetry.models import Diagnostic, TaskDescriptor, TextChange

Listener = TypeVar("Listener", bound=Callable[..., Any])

FocusListener = Callable[[bool], None]
EditorListener = Callable[[str | None], None]
TextChangeListener = Callable[[str, Sequence[TextChange]], None]
TaskStartListener = Callable[[TaskDescriptor], None]
TaskEndListener = Callable[[TaskDescriptor, int | None, str | None], None]
DiagnosticsListener = Callable[[Sequence[str]], None]
DebugSessionListener = Callable[[str, DebugPhase], None]


@runtime_checkable
class Disposable(Protocol):
    """Handle that releases a subscription."""

    def dispose(self) -> None: ...


@runtime_checkable
class HostEventSource(Protocol):
    """Capability interface the engine subscribes to."""

    def on_window_focus_changed(self, listener: FocusListener) -> Disposable: ...

    def on_active_editor_changed(self, listener: EditorListener) -> Disposable: ...

    def on_text_document_changed(self, listener: TextChangeListener) -> Disposable: ...

    def on_task_started(self, listener: TaskStartListener) -> Disposable: ...

    def on_task_ended(self, listener: TaskEndListener) -> Disposable: ...

    def on_diagnostics_changed(self, listener: DiagnosticsListener) -> Disposable: ...

    def on_debug_session_changed(self, listener: DebugSessionListener) -> Disposable: ...

    def get_diagnostics(self, file_id: str) -> Sequence[Diagnostic]: ...

    def is_window_focused(self) -> bool: ...


class _Subscription:
    def __init__(self, emitter: "EventEmitter[Any]", listener: Callable[..., Any]):
        self._emitter = emitter
        self._listener = listener

    def dispose(self) -> None:
        self._emitter.remove(self._listener)


class EventEmitter(Generic[Listener]):
    """Ordered list of listeners for one event."""

    def __init__(self) -> None:
        self._listeners: list[Listener] = []

    def __len__(self) -> int:
        return len(self._listeners)

    def subscribe(self, listener: Listener) -> Disposable:
        self._listeners.append(listener)
        return _Subscription(self, listener)

    def remove(self, listener: Callable[..., Any]) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def fire(self, *args: Any) -> None:
        # Copy so a listener may dispose itself while being notified
        for listener in list(self._listeners):
            listener(*args)


class CallbackHost:
    """In-process HostEventSource whose events are fired by the owner.

    Keeps the focus flag and a per-file diagnostics table so that the
    side channels answer consistently with the events fired.
    """

    def __init__(self, focused: bool = False):
        self.focused = focused
        self.diagnostics: dict[str, list[Diagnostic]] = {}
        self.focus_changed: EventEmitter[FocusListener] = EventEmitter()
        self.active_editor_changed: EventEmitter[EditorListener] = EventEmitter()
        self.text_document_changed: EventEmitter[TextChangeListener] = EventEmitter()
        self.task_started: EventEmitter[TaskStartListener] = EventEmitter()
        self.task_ended: EventEmitter[TaskEndListener] = EventEmitter()
        self.diagnostics_changed: EventEmitter[DiagnosticsListener] = EventEmitter()
        self.debug_session_changed: EventEmitter[DebugSessionListener] = EventEmitter()

    # -- HostEventSource ----------------------------------------------------

    def on_window_focus_changed(self, listener: FocusListener) -> Disposable:
        return self.focus_changed.subscribe(listener)

    def on_active_editor_changed(self, listener: EditorListener) -> Disposable:
        return self.active_editor_changed.subscribe(listener)

    def on_text_document_changed(self, listener: TextChangeListener) -> Disposable:
        return self.text_document_changed.subscribe(listener)

    def on_task_started(self, listener: TaskStartListener) -> Disposable:
        return self.task_started.subscribe(listener)

    def on_task_ended(self, listener: TaskEndListener) -> Disposable:
        return self.task_ended.subscribe(listener)

    def on_diagnostics_changed(self, listener: DiagnosticsListener) -> Disposable:
        return self.diagnostics_changed.subscribe(listener)

    def on_debug_session_changed(self, listener: DebugSessionListener) -> Disposable:
        return self.debug_session_changed.subscribe(listener)

    def get_diagnostics(self, file_id: str) -> Sequence[Diagnostic]:
        return list(self.diagnostics.get(file_id, ()))

    def is_window_focused(self) -> bool:
        return self.focused

    @property
    def listener_count(self) -> int:
        """Total registered listeners across all events."""
        return sum(
            len(e)
            for e in (
                self.focus_changed,
                self.active_editor_changed,
                self.text_document_changed,
                self.task_started,
                self.task_ended,
                self.diagnostics_changed,
                self.debug_session_changed,
            )
        )

    # -- Firing helpers ----------------------------------------------------

    def set_focus(self, focused: bool) -> None:
        self.focused = focused
        self.focus_changed.fire(focused)

    def switch_editor(self, file_id: str | None) -> None:
        self.active_editor_changed.fire(file_id)

    def change_text(self, file_id: str, changes: Sequence[TextChange]) -> None:
        self.text_document_changed.fire(file_id, changes)

    def start_task(self, task: TaskDescriptor) -> None:
        self.task_started.fire(task)

    def end_task(
        self, task: TaskDescriptor, exit_code: int | None = None, output: str | None = None
    ) -> None:
        self.task_ended.fire(task, exit_code, output)

    def publish_diagnostics(self, updates: dict[str, list[Diagnostic]]) -> None:
        """Replace the diagnostics of the given files and notify listeners."""
        for file_id, entries in updates.items():
            if entries:
                self.diagnostics[file_id] = list(entries)
            else:
                self.diagnostics.pop(file_id, None)
        self.diagnostics_changed.fire(list(updates))

    def change_debug_session(self, session_id: str, phase: DebugPhase) -> None:
        self.debug_session_changed.fire(session_id, phase)
