"""Terminal session registry domain package."""

from .events import EventBus, Subscription, TerminalBusyEvent, TerminalCwdEvent, TerminalSubprocessEvent
from .models import (
    DEFAULT_AUTO_CLOSE,
    SEQUENCE_NO_TERMINAL,
    AutoCloseMode,
    SessionMetadata,
    ShellType,
    parse_session_metadata,
)
from .registry import (
    NOT_FOUND,
    PreferencesProvider,
    SessionFactory,
    SessionRegistry,
    TerminalSession,
)

__all__ = [
    "AutoCloseMode",
    "DEFAULT_AUTO_CLOSE",
    "EventBus",
    "NOT_FOUND",
    "parse_session_metadata",
    "PreferencesProvider",
    "SEQUENCE_NO_TERMINAL",
    "SessionFactory",
    "SessionMetadata",
    "SessionRegistry",
    "ShellType",
    "Subscription",
    "TerminalBusyEvent",
    "TerminalCwdEvent",
    "TerminalSession",
    "TerminalSubprocessEvent",
]
