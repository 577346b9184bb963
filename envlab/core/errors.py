"""Shared error codes and exceptions.

Most conditions in envlab are value-level: an unknown flag evaluates to
disabled and an undersized experiment has no leading variant. Those are
reported through ``ErrorCode`` on result objects. Only boundary violations
raise.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional


class ErrorCode(str, Enum):
    FLAG_NOT_FOUND = "FLAG_NOT_FOUND"
    DUPLICATE_FLAG = "DUPLICATE_FLAG"
    INSUFFICIENT_SAMPLE = "INSUFFICIENT_SAMPLE"
    INVALID_ROLLOUT_PERCENTAGE = "INVALID_ROLLOUT_PERCENTAGE"
    EXPERIMENT_NOT_FOUND = "EXPERIMENT_NOT_FOUND"
    INVALID_STATE_TRANSITION = "INVALID_STATE_TRANSITION"
    UNKNOWN_ENVIRONMENT = "UNKNOWN_ENVIRONMENT"
    SECRET_NOT_FOUND = "SECRET_NOT_FOUND"


class EnvlabError(Exception):
    """Base class for envlab errors."""

    code: ErrorCode

    def __init__(self, message: str, code: Optional[ErrorCode] = None) -> None:
        super().__init__(message)
        if code is not None:
            self.code = code

    def __str__(self) -> str:
        return f"{self.code.value}: {super().__str__()}"


class InvalidRolloutPercentageError(EnvlabError, ValueError):
    code = ErrorCode.INVALID_ROLLOUT_PERCENTAGE

    def __init__(self, value: float) -> None:
        super().__init__(f"Rollout percentage must be within [0, 100], got {value}")
        self.value = value


class DuplicateFlagError(EnvlabError, ValueError):
    code = ErrorCode.DUPLICATE_FLAG


class ExperimentNotFoundError(EnvlabError, LookupError):
    code = ErrorCode.EXPERIMENT_NOT_FOUND


class InvalidStateTransitionError(EnvlabError):
    code = ErrorCode.INVALID_STATE_TRANSITION


class UnknownEnvironmentError(EnvlabError, ValueError):
    code = ErrorCode.UNKNOWN_ENVIRONMENT


class SecretNotFoundError(EnvlabError, LookupError):
    code = ErrorCode.SECRET_NOT_FOUND


def validate_rollout_percentage(value: float) -> float:
    """Reject rollout percentages outside [0, 100]."""
    # NaN fails both comparisons, so check containment explicitly
    if not (0 <= value <= 100):
        raise InvalidRolloutPercentageError(value)
    return value


__all__ = [
    "ErrorCode",
    "EnvlabError",
    "InvalidRolloutPercentageError",
    "DuplicateFlagError",
    "ExperimentNotFoundError",
    "InvalidStateTransitionError",
    "UnknownEnvironmentError",
    "SecretNotFoundError",
    "validate_rollout_percentage",
]
