"""Severity scale shared by environment configs and log entries."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Union


class Severity(str, Enum):
    """Totally ordered log severity: debug < info < warn < error."""

    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"

    @property
    def rank(self) -> int:
        return _RANKS[self]

    @classmethod
    def parse(cls, value: Union["Severity", str]) -> "Severity":
        if isinstance(value, Severity):
            return value
        normalized = value.strip().lower()
        if normalized == "warning":
            normalized = "warn"
        return cls(normalized)

    @classmethod
    def from_logging_level(cls, levelno: int) -> "Severity":
        """Map a stdlib logging level onto the scale (CRITICAL folds into error)."""
        if levelno >= logging.ERROR:
            return cls.ERROR
        if levelno >= logging.WARNING:
            return cls.WARN
        if levelno >= logging.INFO:
            return cls.INFO
        return cls.DEBUG

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank >= other.rank


_RANKS = {
    Severity.DEBUG: 0,
    Severity.INFO: 1,
    Severity.WARN: 2,
    Severity.ERROR: 3,
}

SEVERITY_ORDER = sorted(_RANKS, key=_RANKS.__getitem__)


def severity_rank(severity: Union[Severity, str]) -> int:
    return Severity.parse(severity).rank


__all__ = ["Severity", "SEVERITY_ORDER", "severity_rank"]
