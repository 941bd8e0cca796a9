"""Order management."""

from typing import Optional

from ..models import CreateOrderRequest, Order, Page, UpdateOrderRequest
from ..result import Result
from ..retry import CancellationToken
from .base import BaseService, segment


class OrdersService(BaseService):
    """Create, read, update and cancel orders."""

    async def create(
        self,
        request: CreateOrderRequest,
        cancel_token: Optional[CancellationToken] = None,
    ) -> Result[Order]:
        """
        Create an order.

        Recipient name, street, city, country and at least one item are checked
        locally; all other validation happens on the server.

        Server errors and timeouts are retried like any other call. The API has
        no idempotency key, so a retry after a lost response can create a
        second order. Pass a unique ``order_number`` and look it up before
        resubmitting, or use a client with ``max_retries=0``.
        """
        error = self._require(
            recipient_name=request.recipient_name,
            recipient_street1=request.recipient_street1,
            recipient_city=request.recipient_city,
            recipient_country=request.recipient_country,
            items=request.items,
        )
        if error:
            return Result.fail(error)
        return await self._call(
            "POST", "/api/orders", Order, json=request.to_payload(), cancel_token=cancel_token
        )

    async def get(self, order_id: str, cancel_token: Optional[CancellationToken] = None) -> Result[Order]:
        error = self._require(order_id=order_id)
        if error:
            return Result.fail(error)
        return await self._call("GET", f"/api/orders/{segment(order_id)}", Order, cancel_token=cancel_token)

    async def list(
        self,
        page: int = 1,
        limit: int = 20,
        status: Optional[str] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> Result[Page[Order]]:
        """List one page of orders, optionally filtered by status."""
        return await self._call(
            "GET",
            "/api/orders",
            Page[Order],
            params={"page": page, "limit": limit, "status": status},
            cancel_token=cancel_token,
        )

    async def update(
        self,
        order_id: str,
        request: UpdateOrderRequest,
        cancel_token: Optional[CancellationToken] = None,
    ) -> Result[Order]:
        error = self._require(order_id=order_id)
        if error:
            return Result.fail(error)
        return await self._call(
            "PUT",
            f"/api/orders/{segment(order_id)}",
            Order,
            json=request.to_payload(),
            cancel_token=cancel_token,
        )

    async def delete(self, order_id: str, cancel_token: Optional[CancellationToken] = None) -> Result[None]:
        error = self._require(order_id=order_id)
        if error:
            return Result.fail(error)
        return await self._call("DELETE", f"/api/orders/{segment(order_id)}", cancel_token=cancel_token)

    async def cancel(self, order_id: str, cancel_token: Optional[CancellationToken] = None) -> Result[Order]:
        error = self._require(order_id=order_id)
        if error:
            return Result.fail(error)
        return await self._call(
            "POST", f"/api/orders/{segment(order_id)}/cancel", Order, cancel_token=cancel_token
        )
