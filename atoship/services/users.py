"""Current user profile and usage."""

from typing import Optional

from ..models import UpdateProfileRequest, UsageStats, UserProfile
from ..result import Result
from ..retry import CancellationToken
from .base import BaseService


class UsersService(BaseService):

    async def get_profile(self, cancel_token: Optional[CancellationToken] = None) -> Result[UserProfile]:
        return await self._call("GET", "/api/users/profile", UserProfile, cancel_token=cancel_token)

    async def update_profile(
        self,
        request: UpdateProfileRequest,
        cancel_token: Optional[CancellationToken] = None,
    ) -> Result[UserProfile]:
        return await self._call(
            "PUT", "/api/users/profile", UserProfile, json=request.to_payload(), cancel_token=cancel_token
        )

    async def get_usage_stats(self, cancel_token: Optional[CancellationToken] = None) -> Result[UsageStats]:
        return await self._call("GET", "/api/users/usage", UsageStats, cancel_token=cancel_token)
