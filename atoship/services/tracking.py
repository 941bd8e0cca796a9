"""Package tracking."""

from typing import List, Optional

from ..models import TrackingInfo
from ..result import Result
from ..retry import CancellationToken
from .base import BaseService, segment


class TrackingService(BaseService):

    async def track(
        self,
        tracking_number: str,
        carrier: Optional[str] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> Result[TrackingInfo]:
        error = self._require(tracking_number=tracking_number)
        if error:
            return Result.fail(error)
        return await self._call(
            "GET",
            f"/api/tracking/{segment(tracking_number.strip())}",
            TrackingInfo,
            params={"carrier": carrier},
            cancel_token=cancel_token,
        )

    async def track_batch(
        self,
        tracking_numbers: List[str],
        cancel_token: Optional[CancellationToken] = None,
    ) -> Result[List[TrackingInfo]]:
        error = self._require(tracking_numbers=tracking_numbers)
        if error:
            return Result.fail(error)
        return await self._call(
            "POST",
            "/api/tracking/batch",
            List[TrackingInfo],
            json={"tracking_numbers": tracking_numbers},
            cancel_token=cancel_token,
        )
