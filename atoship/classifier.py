"""Classification of failed responses and transport failures."""

import json
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any, List, Mapping, Optional

import httpx

from .exceptions import (
    APIError,
    APIRateLimitError,
    APITimeoutError,
    APIValidationError,
    FieldError,
    NetworkError,
    ServerError,
    get_error_from_status_code,
)


def parse_body(content: bytes) -> Any:
    """Decode a JSON body, returning None for empty or malformed payloads."""
    if not content:
        return None
    try:
        return json.loads(content)
    except (ValueError, UnicodeDecodeError):
        return None


def parse_retry_after(headers: Mapping[str, str], body: Any = None) -> Optional[float]:
    """
    Extract a retry-after hint in seconds.

    Supports the ``Retry-After`` header as delta seconds or an HTTP-date, then
    falls back to ``retry_after``/``retryAfter`` in the body.
    """
    header = _header(headers, "retry-after")
    if header:
        try:
            return float(header)
        except ValueError:
            try:
                when = parsedate_to_datetime(header)
            except (TypeError, ValueError):
                when = None
            if when is not None:
                if when.tzinfo is None:
                    when = when.replace(tzinfo=timezone.utc)
                return max(0.0, (when - datetime.now(timezone.utc)).total_seconds())

    if isinstance(body, dict):
        for key in ("retry_after", "retryAfter"):
            value = body.get(key)
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                return float(value)
            if isinstance(value, str):
                try:
                    return float(value)
                except ValueError:
                    pass
    return None


def parse_field_errors(body: Any) -> List[FieldError]:
    """Collect every field/message pair from a validation body."""
    if not isinstance(body, dict):
        return []

    raw = body.get("errors")
    if raw is None:
        raw = body.get("details")
    if raw is None and isinstance(body.get("error"), dict):
        raw = body["error"].get("errors") or body["error"].get("details")

    errors: List[FieldError] = []
    if isinstance(raw, list):
        for item in raw:
            if isinstance(item, dict) and ("field" in item or "message" in item):
                errors.append(FieldError(str(item.get("field", "")), str(item.get("message", ""))))
    elif isinstance(raw, dict):
        for field, messages in raw.items():
            if isinstance(messages, (list, tuple)):
                errors.extend(FieldError(str(field), str(message)) for message in messages)
            else:
                errors.append(FieldError(str(field), str(messages)))
    return errors


def classify_response(
    status_code: int,
    headers: Optional[Mapping[str, str]] = None,
    content: bytes = b"",
    request_method: Optional[str] = None,
    request_url: Optional[str] = None,
) -> APIError:
    """
    Classify a non-2xx response into exactly one API error.

    Never raises for malformed bodies; anything unreadable falls back to a
    ServerError carrying the status code.
    """
    headers = headers or {}
    body = parse_body(content)
    message = _extract_message(body)
    context = {"request_method": request_method, "request_url": request_url}

    if status_code == 429:
        return APIRateLimitError(
            message or "Rate limit exceeded",
            retry_after=parse_retry_after(headers, body),
            limit=_int_header(headers, "x-ratelimit-limit"),
            remaining=_int_header(headers, "x-ratelimit-remaining"),
            reset_time=_int_header(headers, "x-ratelimit-reset"),
            error_code=_extract_code(body),
            **context,
        )

    field_errors = parse_field_errors(body)
    if status_code == 422 or (status_code == 400 and field_errors):
        return APIValidationError(
            message or "Request validation failed",
            field_errors=field_errors,
            status_code=status_code,
            error_code=_extract_code(body),
            **context,
        )

    if status_code >= 500:
        return ServerError(
            message or f"Server error ({status_code})",
            status_code=status_code,
            error_code=_extract_code(body) or str(status_code),
            **context,
        )

    kwargs = dict(context)
    code = _extract_code(body)
    if code:
        kwargs["error_code"] = code
    return get_error_from_status_code(status_code, message, **kwargs)


def classify_network_error(
    exception: BaseException,
    request_method: Optional[str] = None,
    request_url: Optional[str] = None,
) -> NetworkError:
    """Wrap a transport failure (no response received) as a NetworkError."""
    context = {
        "request_method": request_method,
        "request_url": request_url,
        "original_exception": exception,
    }
    cause = str(exception) or type(exception).__name__

    if isinstance(exception, httpx.TimeoutException):
        timeout_type = "unknown"
        if isinstance(exception, httpx.ConnectTimeout):
            timeout_type = "connect"
        elif isinstance(exception, httpx.ReadTimeout):
            timeout_type = "read"
        elif isinstance(exception, httpx.WriteTimeout):
            timeout_type = "write"
        elif isinstance(exception, httpx.PoolTimeout):
            timeout_type = "pool"
        return APITimeoutError(
            f"Request timed out ({timeout_type})",
            timeout_type=timeout_type,
            cause=cause,
            **context,
        )

    lowered = cause.lower()
    if "name or service not known" in lowered or "nodename" in lowered or "getaddrinfo" in lowered:
        message = "Failed to resolve server address"
    elif "refused" in lowered:
        message = "Connection refused by server"
    elif isinstance(exception, httpx.ConnectError):
        message = "Unable to connect to the server"
    else:
        message = f"Network error: {cause}"
    return NetworkError(message, cause=cause, **context)


def _header(headers: Mapping[str, str], name: str) -> Optional[str]:
    # httpx.Headers is case-insensitive; plain dicts are not
    value = headers.get(name)
    if value is None:
        for key, candidate in headers.items():
            if key.lower() == name:
                return candidate
    return value


def _int_header(headers: Mapping[str, str], name: str) -> Optional[int]:
    value = _header(headers, name)
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def _extract_message(body: Any) -> Optional[str]:
    if not isinstance(body, dict):
        return None
    for key in ("message", "error", "detail"):
        value = body.get(key)
        if isinstance(value, str) and value:
            return value
        if isinstance(value, dict) and isinstance(value.get("message"), str):
            return value["message"]
    return None


def _extract_code(body: Any) -> Optional[str]:
    if not isinstance(body, dict):
        return None
    for key in ("code", "error_code", "errorCode"):
        value = body.get(key)
        if value is not None and not isinstance(value, (dict, list)):
            return str(value)
    error = body.get("error")
    if isinstance(error, dict) and error.get("code") is not None:
        return str(error["code"])
    return None
