"""Rate quotes and shipping labels."""

from typing import List, Optional

from ..models import Label, Page, PurchaseLabelRequest, Rate, RateComparison, RateRequest
from ..result import Result
from ..retry import CancellationToken
from .base import BaseService, segment


class ShippingService(BaseService):
    """Rate shopping and label lifecycle."""

    async def get_rates(
        self,
        request: RateRequest,
        cancel_token: Optional[CancellationToken] = None,
    ) -> Result[List[Rate]]:
        return await self._call(
            "POST", "/api/shipping/rates", List[Rate], json=request.to_payload(), cancel_token=cancel_token
        )

    async def compare_rates(
        self,
        request: RateRequest,
        cancel_token: Optional[CancellationToken] = None,
    ) -> Result[RateComparison]:
        """Fetch rates and rank them into cheapest, fastest and best value."""
        rates = await self.get_rates(request, cancel_token=cancel_token)
        return rates.map(lambda items: RateComparison(rates=items))

    async def purchase_label(
        self,
        request: PurchaseLabelRequest,
        cancel_token: Optional[CancellationToken] = None,
    ) -> Result[Label]:
        """
        Buy a label for a quoted rate.

        Like every call this is retried on server errors and timeouts. A retry
        after a lost response may buy a second label; void duplicates with
        ``void_label`` or use a client with ``max_retries=0``.
        """
        error = self._require(rate_id=request.rate_id)
        if error:
            return Result.fail(error)
        return await self._call(
            "POST", "/api/labels", Label, json=request.to_payload(), cancel_token=cancel_token
        )

    async def get_label(self, label_id: str, cancel_token: Optional[CancellationToken] = None) -> Result[Label]:
        error = self._require(label_id=label_id)
        if error:
            return Result.fail(error)
        return await self._call("GET", f"/api/labels/{segment(label_id)}", Label, cancel_token=cancel_token)

    async def list_labels(
        self,
        page: int = 1,
        limit: int = 20,
        cancel_token: Optional[CancellationToken] = None,
    ) -> Result[Page[Label]]:
        return await self._call(
            "GET",
            "/api/labels",
            Page[Label],
            params={"page": page, "limit": limit},
            cancel_token=cancel_token,
        )

    async def void_label(self, label_id: str, cancel_token: Optional[CancellationToken] = None) -> Result[Label]:
        error = self._require(label_id=label_id)
        if error:
            return Result.fail(error)
        return await self._call(
            "POST", f"/api/labels/{segment(label_id)}/void", Label, cancel_token=cancel_token
        )
