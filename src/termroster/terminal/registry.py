"""Ordered in-memory registry of terminal session metadata."""

from __future__ import annotations

import logging as py_logging
import threading
from collections.abc import Iterator
from itertools import islice
from types import TracebackType
from typing import Protocol

from termroster.errors import ErrorCode, TermRosterError
from termroster.terminal.catalog import (
    any_has_child_processes,
    handle_for_caption,
    is_caption_available,
    next_sequence,
)
from termroster.terminal.events import (
    EventBus,
    Subscription,
    TerminalBusyEvent,
    TerminalCwdEvent,
    TerminalSubprocessEvent,
)
from termroster.terminal.models import (
    DEFAULT_AUTO_CLOSE,
    SEQUENCE_NO_TERMINAL,
    AutoCloseMode,
    SessionMetadata,
    ShellType,
)

logger = py_logging.getLogger(__name__)

NOT_FOUND = -1


class TerminalSession(Protocol):
    handle: str
    caption: str
    title: str
    sequence: int
    has_child_processes: bool
    columns: int
    rows: int
    shell_type: ShellType | str
    alt_buffer_active: bool
    working_directory: str
    auto_close: AutoCloseMode | str
    zombie: bool
    track_environment: bool

    def connect(self) -> None: ...


class SessionFactory(Protocol):
    def create_session(
        self,
        metadata: SessionMetadata,
        *,
        blinking_cursor: bool,
        focus: bool,
    ) -> TerminalSession: ...

    def interrupt_and_reap(self, handle: str) -> None: ...


class PreferencesProvider(Protocol):
    track_environment: bool
    blinking_cursor: bool


class SessionRegistry:
    """Tracks terminal sessions in the order they were added.

    Every mutation that can change the busy state is followed by a
    ``TerminalBusyEvent`` on the event bus. Lookups report misses with
    ``None``/``NOT_FOUND`` rather than raising.
    """

    def __init__(
        self,
        *,
        session_factory: SessionFactory,
        preferences: PreferencesProvider,
        events: EventBus | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._preferences = preferences
        self._events = events
        self._lock = threading.RLock()
        self._terminals: dict[str, SessionMetadata] = {}
        self._highest_sequence = SEQUENCE_NO_TERMINAL
        self._subscriptions: list[Subscription] = []
        if events is not None:
            self._subscriptions = [
                events.subscribe(TerminalSubprocessEvent, self.on_subprocesses),
                events.subscribe(TerminalCwdEvent, self.on_working_directory),
            ]

    def close(self) -> None:
        with self._lock:
            subscriptions, self._subscriptions = self._subscriptions, []
        for subscription in subscriptions:
            subscription.cancel()

    def __enter__(self) -> SessionRegistry:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()

    def __iter__(self) -> Iterator[str]:
        with self._lock:
            handles = list(self._terminals)
        return iter(handles)

    def __len__(self) -> int:
        return self.count()

    def __contains__(self, handle: object) -> bool:
        with self._lock:
            return handle in self._terminals

    def add(self, metadata: SessionMetadata) -> None:
        if not metadata.handle:
            logger.warning("Ignoring terminal metadata without a handle caption=%s", metadata.caption)
            return
        with self._lock:
            replaced = metadata.handle in self._terminals
            self._terminals[metadata.handle] = metadata.snapshot()
            self._highest_sequence = max(self._highest_sequence, metadata.sequence)
            self._record(metadata.handle, "replace" if replaced else "add", f"Tracking terminal '{metadata.caption}'.")
            self._publish_busy()

    def add_session(self, session: TerminalSession) -> None:
        self.add(SessionMetadata.from_session(session))

    def remove(self, handle: str) -> None:
        with self._lock:
            if self._terminals.pop(handle, None) is not None:
                self._record(handle, "remove", "Terminal removed.")
            self._publish_busy()

    def terminate_all(self) -> None:
        with self._lock:
            handles = [item.handle for item in self._terminals.values()]
            for handle in handles:
                try:
                    self._session_factory.interrupt_and_reap(handle)
                except Exception:
                    logger.warning("Failed to reap terminal process handle=%s", handle, exc_info=True)
            self._terminals.clear()
            self._record("*", "terminate-all", f"Terminated {len(handles)} terminal(s).")
            self._publish_busy()

    def retitle(self, handle: str, title: str) -> bool:
        with self._lock:
            current = self._terminals.get(handle)
            if current is None or current.title == title:
                return False
            current.title = title
            self._record(handle, "retitle", f"Title changed to '{title}'.")
            return True

    def count(self) -> int:
        with self._lock:
            return len(self._terminals)

    def index_of(self, handle: str) -> int:
        with self._lock:
            for index, known in enumerate(self._terminals):
                if known == handle:
                    return index
        return NOT_FOUND

    def handle_at(self, index: int) -> str | None:
        with self._lock:
            if index < 0 or index >= len(self._terminals):
                return None
            return next(islice(self._terminals, index, None))

    def is_caption_available(self, caption: str) -> bool:
        with self._lock:
            return is_caption_available(self._terminals.values(), caption)

    def handle_for_caption(self, caption: str) -> str | None:
        with self._lock:
            return handle_for_caption(self._terminals.values(), caption)

    def auto_close_mode(self, handle: str) -> AutoCloseMode:
        with self._lock:
            current = self._terminals.get(handle)
            return DEFAULT_AUTO_CLOSE if current is None else current.auto_close

    def caption_of(self, handle: str) -> str | None:
        with self._lock:
            current = self._terminals.get(handle)
            return None if current is None else current.caption

    def has_subprocesses(self, handle: str) -> bool:
        # Unknown terminals are treated as busy so callers don't dismiss them.
        with self._lock:
            current = self._terminals.get(handle)
            return True if current is None else current.has_child_processes

    def any_has_subprocesses(self) -> bool:
        with self._lock:
            return any_has_child_processes(self._terminals.values())

    def next_sequence(self) -> int:
        with self._lock:
            return next_sequence(self._terminals.values(), floor=self._highest_sequence)

    def metadata(self, handle: str) -> SessionMetadata | None:
        with self._lock:
            current = self._terminals.get(handle)
            return None if current is None else current.snapshot()

    def snapshots(self) -> list[SessionMetadata]:
        with self._lock:
            return [item.snapshot() for item in self._terminals.values()]

    def create_new(self) -> None:
        with self._lock:
            metadata = SessionMetadata.new_terminal(
                self._allocate_sequence(),
                track_environment=self._preferences.track_environment,
            )
            self._start(metadata, register=True)

    def create_named(self, caption: str | None) -> bool:
        if not caption:
            self.create_new()
            return True
        with self._lock:
            if not self.is_caption_available(caption):
                logger.info("Terminal caption already in use caption=%s", caption)
                return False
            metadata = SessionMetadata.named_terminal(
                self._allocate_sequence(),
                caption,
                track_environment=self._preferences.track_environment,
            )
            self._start(metadata, register=True)
            return True

    def reconnect(self, handle: str) -> bool:
        with self._lock:
            existing = self._terminals.get(handle)
            if existing is None:
                logger.debug("Reconnect ignored for unknown terminal handle=%s", handle)
                return False
            existing.handle = handle
            self._record(handle, "reconnect", f"Reconnecting terminal '{existing.caption}'.")
            self._start(existing.snapshot(), register=False)
            return True

    def on_subprocesses(self, event: TerminalSubprocessEvent) -> None:
        with self._lock:
            current = self._terminals.get(event.handle)
            if current is None:
                logger.debug("Subprocess event ignored for unknown terminal handle=%s", event.handle)
            elif current.has_child_processes != event.has_subprocesses:
                current.has_child_processes = event.has_subprocesses
                self._record(event.handle, "subprocesses", f"Child processes: {event.has_subprocesses}.")
            self._publish_busy()

    def on_working_directory(self, event: TerminalCwdEvent) -> None:
        with self._lock:
            current = self._terminals.get(event.handle)
            if current is None:
                logger.debug("Working directory event ignored for unknown terminal handle=%s", event.handle)
                return
            if current.working_directory != event.cwd:
                current.working_directory = event.cwd
                self._record(event.handle, "cwd", f"Working directory is now '{event.cwd}'.")

    def _allocate_sequence(self) -> int:
        # Reserve the number before the backing layer reports the session back.
        sequence = self.next_sequence()
        self._highest_sequence = sequence
        return sequence

    def _start(self, metadata: SessionMetadata, *, register: bool) -> None:
        session = self._session_factory.create_session(
            metadata,
            blinking_cursor=self._preferences.blinking_cursor,
            focus=True,
        )
        if session is None:
            raise TermRosterError(
                "Session factory did not return a terminal session.",
                code=ErrorCode.SESSION_ERROR,
                hint="Check the session factory implementation.",
            )
        try:
            if register and session.handle:
                created = SessionMetadata.from_session(session)
                self._terminals[created.handle] = created
                self._highest_sequence = max(self._highest_sequence, created.sequence)
                self._record(session.handle, "create", f"Created terminal '{session.caption}'.")
            try:
                session.connect()
            except Exception:
                logger.warning("Terminal connect failed handle=%s", session.handle, exc_info=True)
        finally:
            self._publish_busy()

    def _publish_busy(self) -> None:
        busy = any_has_child_processes(self._terminals.values())
        logger.debug("Publishing terminal busy state busy=%s", busy)
        if self._events is not None:
            self._events.publish(TerminalBusyEvent(busy=busy))

    def _record(self, handle: str, step: str, message: str) -> None:
        logger.info("terminal-event handle=%s step=%s message=%s", handle, step, message)
