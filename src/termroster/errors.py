"""Deterministic error model for the terminal roster."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum


class ErrorCode(IntEnum):
    CONFIG_ERROR = 3
    RUNTIME_ERROR = 4
    SESSION_ERROR = 5


@dataclass
class TermRosterError(Exception):
    message: str
    code: ErrorCode = ErrorCode.RUNTIME_ERROR
    hint: str = ""

    def __str__(self) -> str:
        if self.hint:
            return f"{self.message} Hint: {self.hint}"
        return self.message
