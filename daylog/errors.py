"""Structured errors raised while reading, editing and saving daily logs.

Every failure a caller can act on carries an ``ErrorCode``. The CLI turns
the error into the ``{"ok": false, "error": {...}}`` envelope, so codes are
part of the command line contract and must stay stable.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping


class ErrorCode(str, Enum):
    # input
    INVALID_DATE = "INVALID_DATE"
    INVALID_TIME = "INVALID_TIME"
    INVALID_RANGE = "INVALID_RANGE"
    INVALID_TYPE = "INVALID_TYPE"
    UNKNOWN_FIELD = "UNKNOWN_FIELD"
    # addressing a line of a day file
    LINE_NOT_FOUND = "LINE_NOT_FOUND"
    NOT_A_TASK = "NOT_A_TASK"
    # log directory and day files
    INVALID_LOG_DIR = "INVALID_LOG_DIR"
    FILE_UNREADABLE = "FILE_UNREADABLE"
    INVALID_ENCODING = "INVALID_ENCODING"
    STATE_UNREADABLE = "STATE_UNREADABLE"
    # write-back side effects; the day file is restored when these fail
    GIT_ERROR = "GIT_ERROR"
    LOG_ERROR = "LOG_ERROR"


@dataclass(frozen=True)
class ErrorResponse:
    """Serializable error payload."""

    code: str
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message, "details": self.details}


class DaylogError(RuntimeError):
    """Exception carrying an ``ErrorResponse`` with a known ``ErrorCode``."""

    def __init__(
        self,
        code: ErrorCode | str,
        message: str,
        details: Mapping[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = ErrorCode(code)
        self.error = ErrorResponse(
            code=self.code.value, message=message, details=dict(details or {})
        )


def success_response(payload: dict[str, Any]) -> dict[str, Any]:
    return {"ok": True, "data": payload}


def error_response(error: ErrorResponse) -> dict[str, Any]:
    return {"ok": False, "error": error.to_dict()}
