"""
Auth service client for the Admin Service.
"""

from typing import Any, Optional

from shared.errors import RemoteInvocationError

from ..core.transport import ServiceName
from .base import DownstreamClient, required_auth_headers


class AuthServiceClient(DownstreamClient):
    """Client for communicating with auth-service."""

    service = ServiceName.AUTH

    async def trigger_password_reset(self, email: str, token: Optional[str]) -> Any:
        """Ask auth-service to send a password reset to ``email``."""
        # Checked before any network traffic
        headers = required_auth_headers(token)

        self.logger.info("Triggering admin password reset", email=email)
        try:
            return await self.invoker.invoke(
                self.service,
                "api/auth/admin/password/reset",
                "POST",
                {"email": email},
                headers=headers,
            )
        except RemoteInvocationError as e:
            self.logger.error("Failed to trigger admin password reset", email=email, error=e.message)
            raise
