"""Exception hierarchy for the atoship client.

Every failed API call is normalized into one of the classified errors below.
Callers can branch on ``error.kind`` or on the class itself without ever
looking at a raw status code.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional


class ErrorKind(Enum):
    """Kinds of failure a call can end with."""
    VALIDATION = "validation"
    AUTHENTICATION = "authentication"
    NOT_FOUND = "not_found"
    RATE_LIMIT = "rate_limit"
    SERVER = "server"
    NETWORK = "network"
    CANCELLED = "cancelled"


# Kinds the retry layer treats as transient
TRANSIENT_KINDS = frozenset({ErrorKind.RATE_LIMIT, ErrorKind.NETWORK, ErrorKind.SERVER})


class AtoshipError(Exception):
    """Base exception for all atoship client errors."""

    def __init__(self, message: str = "An unexpected atoship error occurred", **context):
        self.message = message
        self.context = context
        super().__init__(message)


class ConfigurationError(AtoshipError):
    """Raised when client configuration is invalid."""
    pass


@dataclass(frozen=True)
class FieldError:
    """A single field-level validation problem reported by the API."""

    field: str
    message: str

    def __str__(self) -> str:
        return f"{self.field}: {self.message}"


class APIError(AtoshipError):
    """
    Base class for classified API errors.

    Attributes:
        kind: The classified failure kind
        status_code: HTTP status code, if a response was received
        error_code: Machine-readable code supplied by the server, if any
        request_method: HTTP method of the failed request
        request_url: Path or URL of the failed request
    """

    kind: ErrorKind = ErrorKind.SERVER

    def __init__(
        self,
        message: str = "API request failed",
        status_code: Optional[int] = None,
        error_code: Optional[str] = None,
        request_method: Optional[str] = None,
        request_url: Optional[str] = None,
        original_exception: Optional[BaseException] = None,
        **context,
    ):
        self.status_code = status_code
        self.error_code = error_code
        self.request_method = request_method
        self.request_url = request_url
        self.original_exception = original_exception
        super().__init__(message, **context)

    @property
    def retryable(self) -> bool:
        """Whether the retry layer may try the request again."""
        return self.kind in TRANSIENT_KINDS

    def __str__(self) -> str:
        parts = [self.message]
        if self.status_code is not None:
            parts.append(f"Status: {self.status_code}")
        if self.error_code:
            parts.append(f"Code: {self.error_code}")
        if self.request_method and self.request_url:
            parts.append(f"Request: {self.request_method} {self.request_url}")
        return " | ".join(parts)

    def to_dict(self) -> Dict[str, Any]:
        """Serializable summary of the error for logs and reports."""
        return {
            "error_type": type(self).__name__,
            "kind": self.kind.value,
            "message": self.message,
            "status_code": self.status_code,
            "error_code": self.error_code,
            "request_method": self.request_method,
            "request_url": self.request_url,
        }


class APIValidationError(APIError):
    """Raised when the request was rejected for invalid fields."""

    kind = ErrorKind.VALIDATION

    def __init__(
        self,
        message: str = "Request validation failed",
        field_errors: Optional[List[FieldError]] = None,
        **kwargs,
    ):
        self.field_errors: List[FieldError] = list(field_errors or [])
        kwargs.setdefault("status_code", 422)
        super().__init__(message, **kwargs)

    @property
    def fields(self) -> List[str]:
        return [error.field for error in self.field_errors]

    def __str__(self) -> str:
        base = super().__str__()
        if self.field_errors:
            base += " | Fields: " + "; ".join(str(e) for e in self.field_errors)
        return base

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["field_errors"] = [
            {"field": e.field, "message": e.message} for e in self.field_errors
        ]
        return data


class APIAuthenticationError(APIError):
    """Raised for 401/403 responses."""

    kind = ErrorKind.AUTHENTICATION

    def __init__(self, message: str = "Authentication failed", **kwargs):
        kwargs.setdefault("status_code", 401)
        super().__init__(message, **kwargs)


class NotFoundError(APIError):
    """Raised when the requested resource does not exist."""

    kind = ErrorKind.NOT_FOUND

    def __init__(self, message: str = "Resource not found", **kwargs):
        kwargs.setdefault("status_code", 404)
        super().__init__(message, **kwargs)


class APIRateLimitError(APIError):
    """Raised when the API rate limit is exceeded."""

    kind = ErrorKind.RATE_LIMIT

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        retry_after: Optional[float] = None,
        limit: Optional[int] = None,
        remaining: Optional[int] = None,
        reset_time: Optional[int] = None,
        **kwargs,
    ):
        self.retry_after = retry_after
        self.limit = limit
        self.remaining = remaining
        self.reset_time = reset_time
        kwargs.setdefault("status_code", 429)
        super().__init__(message, **kwargs)

    def __str__(self) -> str:
        base = super().__str__()
        if self.retry_after is not None:
            base += f" | Retry after: {self.retry_after:g}s"
        return base

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update(
            retry_after=self.retry_after,
            limit=self.limit,
            remaining=self.remaining,
            reset_time=self.reset_time,
        )
        return data


class ServerError(APIError):
    """Raised for 5xx responses and any unrecognized non-2xx status."""

    kind = ErrorKind.SERVER

    @property
    def code(self) -> Optional[str]:
        return self.error_code


class NetworkError(APIError):
    """Raised when no response was received at all."""

    kind = ErrorKind.NETWORK

    def __init__(self, message: str = "Network error", cause: Optional[str] = None, **kwargs):
        self.cause = cause
        super().__init__(message, **kwargs)

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["cause"] = self.cause
        return data


class APITimeoutError(NetworkError):
    """Raised when a single attempt exceeded the configured timeout."""

    def __init__(self, message: str = "Request timed out", timeout_type: str = "unknown", **kwargs):
        self.timeout_type = timeout_type
        super().__init__(message, **kwargs)


class RequestCancelledError(APIError):
    """Raised when the caller cancelled the request through its cancellation token."""

    kind = ErrorKind.CANCELLED

    def __init__(self, message: str = "Request cancelled", attempts: int = 0, **kwargs):
        self.attempts = attempts
        super().__init__(message, **kwargs)


_STATUS_ERRORS = {
    401: APIAuthenticationError,
    403: APIAuthenticationError,
    404: NotFoundError,
    422: APIValidationError,
    429: APIRateLimitError,
}


def get_error_from_status_code(status_code: int, message: Optional[str] = None, **kwargs) -> APIError:
    """
    Map an HTTP status code to the matching classified error.

    Args:
        status_code: HTTP status code of the response
        message: Error message; a generic one is built when omitted
        **kwargs: Extra attributes for the error class

    Returns:
        APIError: The classified error for the status code
    """
    error_class = _STATUS_ERRORS.get(status_code, ServerError)
    if error_class is ServerError:
        kwargs.setdefault("error_code", str(status_code))
    if message is None:
        message = f"API request failed with status {status_code}"
    return error_class(message, status_code=status_code, **kwargs)
