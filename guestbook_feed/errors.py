"""Structured error types for the guestbook feed.

Every failure the pipeline can surface to the HTTP caller is a subclass of
GuestbookError. Each one knows the HTTP status it maps to and renders itself
into an ErrorPayload, the JSON body the widget receives.

Form absence is deliberately not represented here: a missing guestbook form
is an empty successful result, not an error.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from guestbook_feed.types import ErrorType


@dataclass(frozen=True)
class ErrorPayload:
    """JSON error body returned to the caller.

    Attributes:
        error: Human-readable error description
        details: Optional upstream response body, passed through verbatim

    Examples:
        >>> ErrorPayload(error="Failed to list forms", details="forbidden").to_dict()
        {'error': 'Failed to list forms', 'details': 'forbidden'}
        >>> ErrorPayload(error="boom").to_dict()
        {'error': 'boom'}
    """
    error: str
    details: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization."""
        result: Dict[str, Any] = {"error": self.error}
        if self.details is not None:
            result["details"] = self.details
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ErrorPayload":
        """Create ErrorPayload from dict."""
        return cls(error=data["error"], details=data.get("details"))


class GuestbookError(Exception):
    """Base class for errors the handler turns into HTTP responses.

    Attributes:
        error_type: Category of error
        status_code: HTTP status the error maps to
        message: Human-readable error message
    """

    error_type: ErrorType = ErrorType.UNEXPECTED
    status_code: int = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def to_payload(self) -> ErrorPayload:
        """Render the error as a response body."""
        return ErrorPayload(error=self.message)


class ConfigError(GuestbookError):
    """Raised when required configuration, such as the token, is missing."""

    error_type = ErrorType.CONFIG
    status_code = 500


class UpstreamError(GuestbookError):
    """Raised when the forms backend answers with a non-success status.

    The upstream status code becomes the response status and the raw
    response body is attached as ``details``.

    Attributes:
        status_code: Status code returned by the forms backend
        details: Upstream response body, verbatim
    """

    error_type = ErrorType.UPSTREAM

    def __init__(self, status_code: int, details: str, message: str):
        self.status_code = status_code
        self.details = details
        super().__init__(message)

    def to_payload(self) -> ErrorPayload:
        return ErrorPayload(error=self.message, details=self.details)


class UpstreamPayloadError(GuestbookError):
    """Raised when the forms backend returns a body of the wrong shape.

    Treated as an unexpected failure: HTTP 500 with the message only.
    """

    error_type = ErrorType.UNEXPECTED
    status_code = 500


__all__ = [
    "ErrorPayload",
    "GuestbookError",
    "ConfigError",
    "UpstreamError",
    "UpstreamPayloadError",
]
