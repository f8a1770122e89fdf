"""Tidepool client exceptions.

Every failure the client surfaces is a ``TidepoolError``. Callers can catch at the
granularity they need, e.g. ``except ServiceUnavailableError`` for transient
backend overload, or branch on ``error.kind`` without relying on subclass checks.

httpx exceptions never escape the client; the transport translates them and
chains the original via ``__cause__``.
"""

from enum import Enum
from typing import Any, Optional


class ErrorKind(str, Enum):
    """Discriminant shared by all Tidepool errors."""

    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    SERVICE_UNAVAILABLE = "service_unavailable"
    GENERIC = "generic"


# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------


class TidepoolError(Exception):
    """Base exception for all Tidepool client errors.

    Also used directly for the generic kind: unmapped HTTP statuses,
    unexpected response shapes and transport failures.
    """

    kind: ErrorKind = ErrorKind.GENERIC

    def __init__(
        self,
        message: str = "Tidepool request failed",
        status_code: Optional[int] = None,
        response: Any = None,
    ):
        """Create a new TidepoolError instance.

        Args:
            message: Human readable error message.
            status_code: HTTP status code, when the error came from a response.
            response: Raw decoded response body, kept for diagnostics.
        """
        self.message = message
        self.status_code = status_code
        self.response = response
        super().__init__(self.message)

    def __repr__(self) -> str:
        """Show kind and status next to the message."""
        return (
            f"{type(self).__name__}(message={self.message!r}, kind={self.kind.value!r}, "
            f"status_code={self.status_code!r})"
        )


# ---------------------------------------------------------------------------
# Kinds
# ---------------------------------------------------------------------------


class ValidationError(TidepoolError):
    """Bad input; raised before any network call, or mapped from 400/413."""

    kind = ErrorKind.VALIDATION

    def __init__(
        self,
        message: str = "Invalid input",
        status_code: Optional[int] = None,
        response: Any = None,
    ):
        """Initialize with message and optional status/body."""
        super().__init__(message, status_code, response)


class NotFoundError(TidepoolError):
    """Namespace or resource absent (HTTP 404)."""

    kind = ErrorKind.NOT_FOUND

    def __init__(
        self,
        message: str = "Resource not found",
        status_code: Optional[int] = 404,
        response: Any = None,
    ):
        """Initialize with message and optional status/body."""
        super().__init__(message, status_code, response)


class ServiceUnavailableError(TidepoolError):
    """Backend temporarily unavailable (HTTP 503). Safe to retry."""

    kind = ErrorKind.SERVICE_UNAVAILABLE

    def __init__(
        self,
        message: str = "Service unavailable",
        status_code: Optional[int] = 503,
        response: Any = None,
    ):
        """Initialize with message and optional status/body."""
        super().__init__(message, status_code, response)


# ---------------------------------------------------------------------------
# Status mapping
# ---------------------------------------------------------------------------

_STATUS_TO_ERROR: dict[int, type[TidepoolError]] = {
    400: ValidationError,
    413: ValidationError,
    404: NotFoundError,
    503: ServiceUnavailableError,
}


def map_error(status_code: int, message: str, raw_body: Any = None) -> TidepoolError:
    """Translate a non-success HTTP status into a typed error.

    Args:
        status_code: The HTTP status code of the response.
        message: Message already extracted from the response.
        raw_body: Decoded JSON body, or response text for non-JSON responses.

    Returns:
        The error instance (not raised).
    """
    error_cls = _STATUS_TO_ERROR.get(status_code, TidepoolError)
    return error_cls(message, status_code, raw_body)


def extract_error_message(body: Any, text: Optional[str], reason_phrase: str) -> str:
    """Pick the most specific message from an error response.

    Priority: ``error`` field, ``message`` field, textual body, reason phrase.
    The first field that is present decides; an empty one yields the reason phrase.
    """
    if isinstance(body, dict):
        for key in ("error", "message"):
            value = body.get(key)
            if value is not None:
                message = value if isinstance(value, str) else str(value)
                return message or reason_phrase or "Request failed"
    if text:
        return text
    return reason_phrase or "Request failed"
