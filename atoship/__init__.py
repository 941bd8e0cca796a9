"""Async Python client for the atoship shipping API."""

from .client import AtoshipClient
from .config import AtoshipConfig, DEFAULT_BASE_URL, SDK_VERSION
from .exceptions import (
    AtoshipError,
    ConfigurationError,
    ErrorKind,
    FieldError,
    APIError,
    APIValidationError,
    APIAuthenticationError,
    NotFoundError,
    APIRateLimitError,
    ServerError,
    NetworkError,
    APITimeoutError,
    RequestCancelledError,
    get_error_from_status_code,
)
from .classifier import classify_network_error, classify_response
from .logging_config import setup_logging
from .result import Result
from .retry import NO_RETRY, CancellationToken, RetryConfig, RetryManager, RetryState
from .services.webhooks import SIGNATURE_HEADER, compute_signature, verify_signature
from . import models

__version__ = SDK_VERSION

__all__ = [
    # Client
    "AtoshipClient",
    "AtoshipConfig",
    "DEFAULT_BASE_URL",
    "Result",
    "models",

    # Retry
    "CancellationToken",
    "RetryConfig",
    "RetryManager",
    "RetryState",
    "NO_RETRY",

    # Exceptions
    "AtoshipError",
    "ConfigurationError",
    "ErrorKind",
    "FieldError",
    "APIError",
    "APIValidationError",
    "APIAuthenticationError",
    "NotFoundError",
    "APIRateLimitError",
    "ServerError",
    "NetworkError",
    "APITimeoutError",
    "RequestCancelledError",

    # Utility functions
    "classify_response",
    "classify_network_error",
    "get_error_from_status_code",
    "compute_signature",
    "verify_signature",
    "SIGNATURE_HEADER",
    "setup_logging",
]
