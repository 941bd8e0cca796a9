"""HTTP transport: a single request attempt against the atoship API."""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import httpx

from .auth import BearerAuth, default_headers
from .classifier import classify_network_error, parse_body
from .exceptions import APITimeoutError
from .config import AtoshipConfig


@dataclass(frozen=True)
class Request:
    """Description of one logical API call."""

    method: str
    path: str
    json: Optional[Any] = None
    params: Optional[Dict[str, Any]] = None

    def describe(self) -> str:
        return f"{self.method} {self.path}"


@dataclass
class RawResponse:
    """Status, headers and body of a received response."""

    status_code: int
    headers: httpx.Headers = field(default_factory=httpx.Headers)
    content: bytes = b""

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300

    def json(self) -> Any:
        return parse_body(self.content)


class Transport:
    """Issues authenticated HTTP requests; never retries on its own."""

    def __init__(
        self,
        config: AtoshipConfig,
        http_transport: Optional[httpx.AsyncBaseTransport] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.config = config
        self._http_transport = http_transport
        self._logger = logger
        self._client: Optional[httpx.AsyncClient] = None

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the pooled async HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.config.base_url,
                timeout=httpx.Timeout(self.config.timeout),
                limits=httpx.Limits(max_connections=10, max_keepalive_connections=5),
                headers=default_headers(self.config),
                auth=BearerAuth(self.config.api_key),
                transport=self._http_transport,
            )
        return self._client

    async def send(self, request: Request) -> RawResponse:
        """
        Perform one attempt.

        Returns:
            RawResponse for any received response, whatever its status

        Raises:
            NetworkError: If no response was received
        """
        client = self._get_client()
        params = None
        if request.params:
            params = {k: v for k, v in request.params.items() if v is not None}

        started = time.monotonic()
        try:
            # httpx limits each phase; the whole attempt shares one deadline
            response = await asyncio.wait_for(
                client.request(
                    request.method,
                    request.path,
                    json=request.json,
                    params=params,
                ),
                self.config.timeout,
            )
        except asyncio.TimeoutError as e:
            if self._logger:
                self._logger.debug(
                    "%s exceeded the %.1fs attempt deadline", request.describe(), self.config.timeout
                )
            raise APITimeoutError(
                f"Request timed out after {self.config.timeout:g}s",
                timeout_type="total",
                cause=type(e).__name__,
                request_method=request.method,
                request_url=request.path,
                original_exception=e,
            ) from e
        except httpx.HTTPError as e:
            if self._logger:
                self._logger.debug("%s failed without response: %s", request.describe(), e)
            raise classify_network_error(e, request.method, request.path) from e

        if self._logger:
            self._logger.debug(
                "%s -> %d (%.0f ms)",
                request.describe(),
                response.status_code,
                (time.monotonic() - started) * 1000,
            )
        return RawResponse(response.status_code, response.headers, response.content)

    async def aclose(self):
        """Close the underlying HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
