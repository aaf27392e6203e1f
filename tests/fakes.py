"""Test doubles for the registry's external collaborators."""

from __future__ import annotations

import itertools
import threading
from collections.abc import Callable
from dataclasses import dataclass, field

from termroster.terminal import EventBus, SessionMetadata, TerminalBusyEvent


class FakeSession:
    def __init__(self, metadata: SessionMetadata, handle: str) -> None:
        self.handle = handle
        self.caption = metadata.caption or f"Terminal {metadata.sequence}"
        self.title = metadata.title
        self.sequence = metadata.sequence
        self.has_child_processes = metadata.has_child_processes
        self.columns = metadata.columns
        self.rows = metadata.rows
        self.shell_type = metadata.shell_type
        self.alt_buffer_active = metadata.alt_buffer_active
        self.working_directory = metadata.working_directory
        self.auto_close = metadata.auto_close
        self.zombie = metadata.zombie
        self.track_environment = metadata.track_environment
        self.connect_calls = 0
        self.on_connect: Callable[[FakeSession], None] | None = None

    def connect(self) -> None:
        self.connect_calls += 1
        if self.on_connect is not None:
            self.on_connect(self)


class FakeSessionFactory:
    def __init__(
        self,
        *,
        assign_handles: bool = True,
        failing_handles: tuple[str, ...] = (),
        fail_all_reaps: bool = False,
    ) -> None:
        self.assign_handles = assign_handles
        self.failing_handles = set(failing_handles)
        self.fail_all_reaps = fail_all_reaps
        self.created: list[tuple[SessionMetadata, bool, bool]] = []
        self.sessions: list[FakeSession] = []
        self.reaped: list[str] = []
        self.on_connect: Callable[[FakeSession], None] | None = None
        self._counter = itertools.count(1)
        self._lock = threading.Lock()

    def create_session(self, metadata: SessionMetadata, *, blinking_cursor: bool, focus: bool) -> FakeSession:
        with self._lock:
            handle = metadata.handle
            if not handle and self.assign_handles:
                handle = f"term-{next(self._counter)}"
            session = FakeSession(metadata, handle)
            session.on_connect = self.on_connect
            self.created.append((metadata, blinking_cursor, focus))
            self.sessions.append(session)
        return session

    def interrupt_and_reap(self, handle: str) -> None:
        self.reaped.append(handle)
        if self.fail_all_reaps or handle in self.failing_handles:
            raise RuntimeError(f"reap failed for {handle}")


@dataclass
class FakePreferences:
    track_environment: bool = False
    blinking_cursor: bool = True


@dataclass
class BusyRecorder:
    values: list[bool] = field(default_factory=list)

    def attach(self, bus: EventBus) -> BusyRecorder:
        bus.subscribe(TerminalBusyEvent, lambda event: self.values.append(event.busy))
        return self


def make_metadata(
    handle: str,
    *,
    sequence: int = 1,
    caption: str | None = None,
    busy: bool = False,
    **overrides: object,
) -> SessionMetadata:
    return SessionMetadata(
        handle=handle,
        caption=caption if caption is not None else f"Terminal {sequence}",
        sequence=sequence,
        has_child_processes=busy,
        **overrides,  # type: ignore[arg-type]
    )
