"""Shared request plumbing for resource services."""

import logging
from typing import Any, Dict, Optional
from urllib.parse import quote

from pydantic import TypeAdapter, ValidationError

from ..classifier import classify_response
from ..exceptions import APIError, APIValidationError, FieldError, ServerError
from ..models import Page
from ..result import Result
from ..retry import CancellationToken, RetryManager
from ..transport import Request, Transport


def segment(value: Any) -> str:
    """Quote a value for use as a single path segment."""
    return quote(str(value), safe="")


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, dict)):
        return not value
    return False


def unwrap_envelope(body: Any, response_type: Any = None) -> Any:
    """
    Strip a ``{"success": ..., "data": ...}`` envelope if present.

    A paginated reply keeps its envelope when ``data`` is the item list, since
    ``total``, ``page`` and ``limit`` sit beside it and Page reads ``data`` itself.
    """
    if not (isinstance(body, dict) and "success" in body and "data" in body):
        return body
    if isinstance(body["data"], list) and _is_page(response_type):
        return body
    return body["data"]


def _is_page(response_type: Any) -> bool:
    return isinstance(response_type, type) and issubclass(response_type, Page)


class BaseService:
    """Base class for all resource services."""

    def __init__(
        self,
        transport: Transport,
        retry_manager: RetryManager,
        logger: Optional[logging.Logger] = None,
    ):
        self._transport = transport
        self._retry_manager = retry_manager
        self._logger = logger

    @staticmethod
    def _require(**fields: Any) -> Optional[APIValidationError]:
        """Local check for fields the API mandates; everything else is left to the server."""
        missing = [FieldError(name, "is required") for name, value in fields.items() if _is_blank(value)]
        if missing:
            return APIValidationError("Missing required fields", field_errors=missing, status_code=None)
        return None

    async def _call(
        self,
        method: str,
        path: str,
        response_type: Any = None,
        json: Optional[Any] = None,
        params: Optional[Dict[str, Any]] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> Result:
        request = Request(method, path, json=json, params=params)

        async def attempt() -> Any:
            response = await self._transport.send(request)
            if not response.is_success:
                raise classify_response(
                    response.status_code,
                    response.headers,
                    response.content,
                    request_method=method,
                    request_url=path,
                )
            return response.json()

        try:
            body = await self._retry_manager.execute(
                attempt, cancel_token=cancel_token, description=request.describe()
            )
        except APIError as e:
            return Result.fail(e)

        if response_type is None:
            return Result.ok(None)

        try:
            value = TypeAdapter(response_type).validate_python(unwrap_envelope(body, response_type))
        except ValidationError as e:
            if self._logger:
                self._logger.error("%s returned an unexpected payload: %s", request.describe(), e)
            return Result.fail(
                ServerError(
                    "Response did not match the expected format",
                    error_code="invalid_response",
                    request_method=method,
                    request_url=path,
                    original_exception=e,
                )
            )
        return Result.ok(value)
