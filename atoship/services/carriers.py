"""Carriers and carrier accounts."""

from typing import List, Optional

from ..models import Carrier, CarrierAccount, CreateCarrierAccountRequest
from ..result import Result
from ..retry import CancellationToken
from .base import BaseService, segment


class CarriersService(BaseService):

    async def list(self, cancel_token: Optional[CancellationToken] = None) -> Result[List[Carrier]]:
        return await self._call("GET", "/api/carriers", List[Carrier], cancel_token=cancel_token)

    async def get(self, carrier_id: str, cancel_token: Optional[CancellationToken] = None) -> Result[Carrier]:
        error = self._require(carrier_id=carrier_id)
        if error:
            return Result.fail(error)
        return await self._call("GET", f"/api/carriers/{segment(carrier_id)}", Carrier, cancel_token=cancel_token)

    async def create_account(
        self,
        request: CreateCarrierAccountRequest,
        cancel_token: Optional[CancellationToken] = None,
    ) -> Result[CarrierAccount]:
        error = self._require(carrier=request.carrier, account_number=request.account_number)
        if error:
            return Result.fail(error)
        return await self._call(
            "POST",
            "/api/carriers/accounts",
            CarrierAccount,
            json=request.to_payload(),
            cancel_token=cancel_token,
        )

    async def delete_account(
        self,
        account_id: str,
        cancel_token: Optional[CancellationToken] = None,
    ) -> Result[None]:
        error = self._require(account_id=account_id)
        if error:
            return Result.fail(error)
        return await self._call(
            "DELETE", f"/api/carriers/accounts/{segment(account_id)}", cancel_token=cancel_token
        )
