"""
User service client for the Admin Service.
"""

from typing import Any, Dict, Optional

from shared.errors import RemoteInvocationError

from ..core.transport import ServiceName
from .base import DownstreamClient


class UserServiceClient(DownstreamClient):
    """Admin operations on user-service."""

    service = ServiceName.USER

    async def fetch_all_users(self, token: Optional[str]) -> Any:
        try:
            return await self._call("api/admin/users", token=token)
        except RemoteInvocationError as e:
            self.logger.error("Failed to fetch users from user-service", error=e.message)
            raise

    async def fetch_user_by_id(self, user_id: str, token: Optional[str]) -> Any:
        try:
            return await self._call(f"api/admin/users/{user_id}", token=token)
        except RemoteInvocationError as e:
            self.logger.error("Failed to fetch user from user-service", error=e.message, user_id=user_id)
            raise

    async def update_user_by_id(self, user_id: str, update_data: Dict[str, Any], token: Optional[str]) -> Any:
        try:
            return await self._call(f"api/admin/users/{user_id}", "PATCH", update_data, token=token)
        except RemoteInvocationError as e:
            self.logger.error("Failed to update user in user-service", error=e.message, user_id=user_id)
            raise

    async def remove_user_by_id(self, user_id: str, token: Optional[str]) -> Any:
        try:
            return await self._call(f"api/admin/users/{user_id}", "DELETE", token=token)
        except RemoteInvocationError as e:
            self.logger.error("Failed to delete user from user-service", error=e.message, user_id=user_id)
            raise
