"""Administrative operations (admin API keys only)."""

from typing import Optional

from ..models import AdminUser, Page, SystemStats
from ..result import Result
from ..retry import CancellationToken
from .base import BaseService, segment


class AdminService(BaseService):

    async def get_system_stats(self, cancel_token: Optional[CancellationToken] = None) -> Result[SystemStats]:
        return await self._call("GET", "/api/admin/stats", SystemStats, cancel_token=cancel_token)

    async def list_users(
        self,
        page: int = 1,
        limit: int = 20,
        status: Optional[str] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> Result[Page[AdminUser]]:
        return await self._call(
            "GET",
            "/api/admin/users",
            Page[AdminUser],
            params={"page": page, "limit": limit, "status": status},
            cancel_token=cancel_token,
        )

    async def update_user_status(
        self,
        user_id: str,
        status: str,
        cancel_token: Optional[CancellationToken] = None,
    ) -> Result[AdminUser]:
        error = self._require(user_id=user_id, status=status)
        if error:
            return Result.fail(error)
        return await self._call(
            "PUT",
            f"/api/admin/users/{segment(user_id)}/status",
            AdminUser,
            json={"status": status},
            cancel_token=cancel_token,
        )
