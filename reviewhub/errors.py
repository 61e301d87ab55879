"""Domain error kinds raised by the review engagement core.

The API boundary maps each kind onto an HTTP status; the core itself never
knows about transport codes.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    NOT_FOUND = "NOT_FOUND"
    FORBIDDEN = "FORBIDDEN"
    BAD_REQUEST = "BAD_REQUEST"
    CONFLICT = "CONFLICT"
    INTERNAL = "INTERNAL"


class ReviewHubError(Exception):
    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(self, message: str, path: str = "") -> None:
        super().__init__(message)
        self.message = message
        self.path = path


class NotFoundError(ReviewHubError):
    kind = ErrorKind.NOT_FOUND


class ForbiddenError(ReviewHubError):
    kind = ErrorKind.FORBIDDEN


class BadRequestError(ReviewHubError, ValueError):
    kind = ErrorKind.BAD_REQUEST


class ConflictError(ReviewHubError):
    kind = ErrorKind.CONFLICT
