"""Address validation and the saved address book."""

from typing import Optional

from ..models import Address, AddressValidation, Page, SavedAddress
from ..result import Result
from ..retry import CancellationToken
from .base import BaseService, segment


class AddressesService(BaseService):

    async def validate(
        self,
        address: Address,
        cancel_token: Optional[CancellationToken] = None,
    ) -> Result[AddressValidation]:
        """Check an address; an invalid address is a successful result with is_valid False."""
        error = self._require(street1=address.street1, country=address.country)
        if error:
            return Result.fail(error)
        return await self._call(
            "POST",
            "/api/addresses/validate",
            AddressValidation,
            json=address.to_payload(),
            cancel_token=cancel_token,
        )

    async def create(
        self,
        address: Address,
        cancel_token: Optional[CancellationToken] = None,
    ) -> Result[SavedAddress]:
        error = self._require(street1=address.street1, city=address.city, country=address.country)
        if error:
            return Result.fail(error)
        return await self._call(
            "POST", "/api/addresses", SavedAddress, json=address.to_payload(), cancel_token=cancel_token
        )

    async def list(
        self,
        page: int = 1,
        limit: int = 20,
        cancel_token: Optional[CancellationToken] = None,
    ) -> Result[Page[SavedAddress]]:
        return await self._call(
            "GET",
            "/api/addresses",
            Page[SavedAddress],
            params={"page": page, "limit": limit},
            cancel_token=cancel_token,
        )

    async def delete(self, address_id: str, cancel_token: Optional[CancellationToken] = None) -> Result[None]:
        error = self._require(address_id=address_id)
        if error:
            return Result.fail(error)
        return await self._call("DELETE", f"/api/addresses/{segment(address_id)}", cancel_token=cancel_token)
