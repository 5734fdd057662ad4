from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class ErrorKind(str, Enum):
    """Why a use case was rejected. Controllers map these to HTTP statuses."""

    INVALID_INPUT = "INVALID_INPUT"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    PRECONDITION_FAILED = "PRECONDITION_FAILED"
    DEPENDENCY_FAILURE = "DEPENDENCY_FAILURE"


@dataclass(frozen=True)
class Result(Generic[T]):
    """Outcome of a use case.

    Expected business rejections (already checked in, wrong OTP, ...) come back
    as a failed Result instead of an exception.
    """

    ok: bool
    message: str = ""
    value: Optional[T] = None
    error: Optional[ErrorKind] = None
    created: bool = False

    @classmethod
    def success(cls, message: str, value: Optional[T] = None, *, created: bool = False) -> "Result[T]":
        return cls(ok=True, message=message, value=value, created=created)

    @classmethod
    def failure(cls, error: ErrorKind, message: str) -> "Result[T]":
        return cls(ok=False, message=message, error=error)
