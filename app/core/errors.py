"""
Error kinds surfaced by the assessment core.

Every failure the core reports carries a stable machine-readable kind so
callers can branch on it (e.g. "try again later" for RATE_LIMITED)
without parsing message text.
"""
from __future__ import annotations

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    INVALID_INPUT = "INVALID_INPUT"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    UPSTREAM_FORMAT_ERROR = "UPSTREAM_FORMAT_ERROR"
    MALFORMED_UPSTREAM_RESPONSE = "MALFORMED_UPSTREAM_RESPONSE"
    RATE_LIMITED = "RATE_LIMITED"
    UPSTREAM_UNAVAILABLE = "UPSTREAM_UNAVAILABLE"
    UPSTREAM_TIMEOUT = "UPSTREAM_TIMEOUT"
    STORAGE_FAILURE = "STORAGE_FAILURE"


class AppError(Exception):
    """Base exception for application errors."""
    kind: ErrorKind = ErrorKind.STORAGE_FAILURE
    http_status: int = 500

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        super().__init__(message)
        self.message = message
        self.original_error = original_error

    def to_dict(self) -> dict:
        return {"kind": self.kind.value, "message": self.message}


class InvalidInput(AppError):
    kind = ErrorKind.INVALID_INPUT
    http_status = 400


class NotFound(AppError):
    kind = ErrorKind.NOT_FOUND
    http_status = 404


class Conflict(AppError):
    kind = ErrorKind.CONFLICT
    http_status = 409


class UpstreamFormatError(AppError):
    """Completion service answered, but not with usable question content."""
    kind = ErrorKind.UPSTREAM_FORMAT_ERROR
    http_status = 502


class MalformedUpstreamResponse(UpstreamFormatError):
    """No JSON array could be recovered from the raw completion text."""
    kind = ErrorKind.MALFORMED_UPSTREAM_RESPONSE


class RateLimited(AppError):
    kind = ErrorKind.RATE_LIMITED
    http_status = 429


class UpstreamUnavailable(AppError):
    kind = ErrorKind.UPSTREAM_UNAVAILABLE
    http_status = 503


class UpstreamTimeout(AppError):
    kind = ErrorKind.UPSTREAM_TIMEOUT
    http_status = 504


class StorageFailure(AppError):
    kind = ErrorKind.STORAGE_FAILURE
    http_status = 500
