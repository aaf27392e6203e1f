"""Pure derivations over tracked session metadata."""

from __future__ import annotations

from collections.abc import Iterable

from termroster.terminal.models import SEQUENCE_NO_TERMINAL, SessionMetadata


def next_sequence(entries: Iterable[SessionMetadata], *, floor: int = SEQUENCE_NO_TERMINAL) -> int:
    """Return one more than the highest known sequence number.

    ``floor`` lets callers carry numbers already handed out to sessions that
    are no longer tracked, so gaps are never refilled.
    """
    highest = floor
    for entry in entries:
        highest = max(highest, entry.sequence)
    return highest + 1


def is_caption_available(entries: Iterable[SessionMetadata], caption: str) -> bool:
    return all(entry.caption != caption for entry in entries)


def handle_for_caption(entries: Iterable[SessionMetadata], caption: str) -> str | None:
    for entry in entries:
        if entry.caption == caption:
            return entry.handle
    return None


def any_has_child_processes(entries: Iterable[SessionMetadata]) -> bool:
    return any(entry.has_child_processes for entry in entries)
