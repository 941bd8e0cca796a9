"""Main client for the atoship API."""

from typing import Any, Optional

import httpx

from .config import AtoshipConfig
from .exceptions import APIError
from .logging_config import ensure_logging, get_logger
from .retry import NO_RETRY, RetryConfig, RetryManager
from .services import (
    AddressesService,
    AdminService,
    CarriersService,
    OrdersService,
    ShippingService,
    TrackingService,
    UsersService,
    WebhooksService,
)
from .transport import Request, Transport


class AtoshipClient:
    """
    Async client exposing every atoship resource as a service attribute.

    Example:
        async with AtoshipClient("sk_live_...") as client:
            result = await client.orders.get("ord_123")
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        *,
        config: Optional[AtoshipConfig] = None,
        retry_config: Optional[RetryConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        **options: Any,
    ):
        """
        Initialize the client.

        Args:
            api_key: atoship API key. Falls back to ``ATOSHIP_API_KEY`` when neither
                this nor ``config`` is given
            config: A prebuilt, shared configuration. ``api_key`` and ``options``
                override its values for this client only
            retry_config: Replaces the retry settings derived from ``config``
            transport: Custom httpx transport (mainly for tests)
            **options: Other AtoshipConfig fields (base_url, timeout, max_retries, ...)

        Raises:
            ConfigurationError: If the resulting configuration is invalid
        """
        if api_key is not None:
            options["api_key"] = api_key
        if config is None:
            config = AtoshipConfig.create(**options)
        elif options:
            config = config.with_overrides(**options)
        self.config = config

        self._logger = None
        if config.enable_logging:
            ensure_logging()
            self._logger = get_logger("client")

        self._transport = Transport(config, http_transport=transport, logger=self._logger)
        self._retry_manager = RetryManager(
            retry_config
            or RetryConfig(
                max_retries=config.max_retries,
                base_delay=config.retry_base_delay,
                max_delay=config.retry_max_delay,
            ),
            logger=self._logger,
        )

        deps = (self._transport, self._retry_manager, self._logger)
        self.orders = OrdersService(*deps)
        self.addresses = AddressesService(*deps)
        self.shipping = ShippingService(*deps)
        self.tracking = TrackingService(*deps)
        self.users = UsersService(*deps)
        self.carriers = CarriersService(*deps)
        self.webhooks = WebhooksService(*deps)
        self.admin = AdminService(*deps)

    async def test_connection(self) -> bool:
        """Single health check against the API; never retried."""
        request = Request("GET", "/api/health")
        try:
            response = await RetryManager(NO_RETRY, logger=self._logger).execute(
                lambda: self._transport.send(request), description=request.describe()
            )
        except APIError:
            return False
        return response.is_success

    async def aclose(self):
        """Close the HTTP connection pool."""
        await self._transport.aclose()

    async def __aenter__(self) -> "AtoshipClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()

    def __repr__(self) -> str:
        return f"AtoshipClient(base_url={self.config.base_url!r})"
