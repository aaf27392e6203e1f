"""Terminal session metadata models."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any

from typing_extensions import TypedDict

SEQUENCE_NO_TERMINAL = 0
DEFAULT_COLUMNS = 80
DEFAULT_ROWS = 25


class ShellType(str, Enum):
    DEFAULT = "default"
    WIN_GIT_BASH = "win-git-bash"
    WIN_WSL_BASH = "win-wsl-bash"
    WIN_CMD = "win-cmd"
    WIN_POWERSHELL = "win-powershell"
    PS_CORE = "ps-core"
    POSIX_BASH = "posix-bash"
    POSIX_ZSH = "posix-zsh"
    CUSTOM = "custom"
    NONE = "none"


class AutoCloseMode(str, Enum):
    DEFAULT = "default"
    ALWAYS = "always"
    NEVER = "never"


DEFAULT_AUTO_CLOSE = AutoCloseMode.DEFAULT


class SessionMetadataPayload(TypedDict):
    handle: str
    caption: str
    title: str
    sequence: int
    has_child_processes: bool
    columns: int
    rows: int
    shell_type: str
    alt_buffer_active: bool
    working_directory: str
    auto_close: str
    zombie: bool
    track_environment: bool


@dataclass
class SessionMetadata:
    """Everything needed to list a terminal session and reconnect to it.

    Instances are owned by the registry and mutated in place there. Anything
    handed to readers should be a :meth:`snapshot`.
    """

    handle: str = ""
    caption: str = ""
    title: str = ""
    sequence: int = SEQUENCE_NO_TERMINAL
    has_child_processes: bool = False
    columns: int = DEFAULT_COLUMNS
    rows: int = DEFAULT_ROWS
    shell_type: ShellType = ShellType.DEFAULT
    alt_buffer_active: bool = False
    working_directory: str = ""
    auto_close: AutoCloseMode = DEFAULT_AUTO_CLOSE
    zombie: bool = False
    track_environment: bool = False

    @classmethod
    def new_terminal(cls, sequence: int, *, track_environment: bool) -> SessionMetadata:
        return cls(sequence=sequence, track_environment=track_environment)

    @classmethod
    def named_terminal(cls, sequence: int, caption: str, *, track_environment: bool) -> SessionMetadata:
        return cls(sequence=sequence, caption=caption, track_environment=track_environment)

    @classmethod
    def from_session(cls, session: Any) -> SessionMetadata:
        """Copy the current state of a live session object."""
        return cls(
            handle=str(session.handle),
            caption=str(session.caption or ""),
            title=str(session.title or ""),
            sequence=int(session.sequence),
            has_child_processes=bool(session.has_child_processes),
            columns=int(session.columns),
            rows=int(session.rows),
            shell_type=coerce_shell_type(session.shell_type),
            alt_buffer_active=bool(session.alt_buffer_active),
            working_directory=str(session.working_directory or ""),
            auto_close=coerce_auto_close(session.auto_close),
            zombie=bool(session.zombie),
            track_environment=bool(session.track_environment),
        )

    def snapshot(self) -> SessionMetadata:
        return replace(self)

    def to_dict(self) -> SessionMetadataPayload:
        return SessionMetadataPayload(
            handle=self.handle,
            caption=self.caption,
            title=self.title,
            sequence=self.sequence,
            has_child_processes=self.has_child_processes,
            columns=self.columns,
            rows=self.rows,
            shell_type=self.shell_type.value,
            alt_buffer_active=self.alt_buffer_active,
            working_directory=self.working_directory,
            auto_close=self.auto_close.value,
            zombie=self.zombie,
            track_environment=self.track_environment,
        )


def coerce_shell_type(value: object) -> ShellType:
    if isinstance(value, ShellType):
        return value
    normalized = str(value).strip().lower()
    for member in ShellType:
        if member.value == normalized:
            return member
    return ShellType.DEFAULT


def coerce_auto_close(value: object) -> AutoCloseMode:
    if isinstance(value, AutoCloseMode):
        return value
    normalized = str(value).strip().lower()
    for member in AutoCloseMode:
        if member.value == normalized:
            return member
    return DEFAULT_AUTO_CLOSE


def _positive_int(value: object, default: int) -> int:
    if isinstance(value, bool):
        return default
    try:
        number = int(value)  # type: ignore[call-overload]
    except (TypeError, ValueError):
        return default
    return number if number > 0 else default


def _flag(value: object) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value) if isinstance(value, int) else False


def parse_session_metadata(raw: Any) -> SessionMetadata | None:
    """Rebuild metadata from a previously known description.

    Returns ``None`` when the payload cannot identify a session.
    Unrecognized optional values fall back to their defaults.
    """
    if not isinstance(raw, dict):
        return None
    handle = str(raw.get("handle", "")).strip()
    if not handle:
        return None

    try:
        sequence = int(raw.get("sequence", SEQUENCE_NO_TERMINAL))
    except (TypeError, ValueError):
        return None
    if sequence < SEQUENCE_NO_TERMINAL:
        return None

    return SessionMetadata(
        handle=handle,
        caption=str(raw.get("caption", "") or ""),
        title=str(raw.get("title", "") or ""),
        sequence=sequence,
        has_child_processes=_flag(raw.get("has_child_processes", False)),
        columns=_positive_int(raw.get("columns"), DEFAULT_COLUMNS),
        rows=_positive_int(raw.get("rows"), DEFAULT_ROWS),
        shell_type=coerce_shell_type(raw.get("shell_type", ShellType.DEFAULT.value)),
        alt_buffer_active=_flag(raw.get("alt_buffer_active", False)),
        working_directory=str(raw.get("working_directory", "") or ""),
        auto_close=coerce_auto_close(raw.get("auto_close", DEFAULT_AUTO_CLOSE.value)),
        zombie=_flag(raw.get("zombie", False)),
        track_environment=_flag(raw.get("track_environment", False)),
    )
