"""
Authentication middleware for the Admin Service.

Bearer JWTs are verified locally (HS256 by default) against the secret,
issuer and audience from configuration. The secret comes from the
environment or, when ``JWT_SECRET_SOURCE=secret-store``, from the sidecar
secret store when the service starts.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Tuple

from fastapi import Request
from jose import JWTError, jwt

from shared.config import AdminConfig
from shared.errors import AuthenticationError, AuthorizationError, ConfigurationError
from shared.logging import get_logger, set_user_context
from shared.secrets import SidecarSecretStore


@dataclass(frozen=True)
class AuthenticatedUser:
    """Caller identity derived from a verified JWT."""

    id: Optional[str]
    email: Optional[str]
    roles: Tuple[str, ...]
    token: str = field(repr=False)


def extract_bearer_token(request: Request) -> str:
    """Raw bearer token from the Authorization header."""
    auth_header = request.headers.get("Authorization")
    if not auth_header:
        raise AuthenticationError("Unauthorized: Missing Authorization header")
    if not auth_header.startswith("Bearer "):
        raise AuthenticationError("Unauthorized: Authorization header must start with Bearer")
    token = auth_header[7:].strip()
    if not token:
        raise AuthenticationError("Unauthorized: Missing token")
    return token


def _claim_roles(value: Any) -> Tuple[str, ...]:
    """Roles claim as a tuple; a single role may be sent as a bare string."""
    if not value:
        return ()
    if isinstance(value, str):
        return (value,)
    return tuple(str(role) for role in value)


class AuthMiddleware:
    """JWT verification and role checks for admin routes."""

    def __init__(self, config: AdminConfig, secret_store: Optional[SidecarSecretStore] = None):
        self.config = config
        self.logger = get_logger("admin.auth_middleware")
        self._secret: Optional[str] = config.jwt_secret if config.jwt_secret_source == "env" else None
        self._secret_lock = asyncio.Lock()

        if config.jwt_secret_source == "env" and not self._secret:
            raise ConfigurationError("JWT_SECRET is required when JWT_SECRET_SOURCE=env")

        if config.jwt_secret_source == "secret-store":
            self.secret_store = secret_store or SidecarSecretStore(
                config.dapr_host,
                config.dapr_http_port,
                config.secret_store_name,
            )
        else:
            self.secret_store = secret_store

    async def load_secret(self) -> str:
        """Resolve the signing secret; raises ConfigurationError when the store cannot supply it."""
        secret = await self._get_secret()
        self.logger.info("JWT secret loaded", source=self.config.jwt_secret_source)
        return secret

    async def _get_secret(self) -> str:
        if self._secret is None:
            async with self._secret_lock:
                if self._secret is None:
                    self._secret = await self.secret_store.get_secret("JWT_SECRET")
        return self._secret

    async def verify_token(self, token: str) -> Dict[str, Any]:
        secret = await self._get_secret()
        try:
            return jwt.decode(
                token,
                secret,
                algorithms=[self.config.jwt_algorithm],
                audience=self.config.jwt_audience,
                issuer=self.config.jwt_issuer,
            )
        except JWTError as e:
            self.logger.warning("JWT verification failed", error=str(e))
            raise AuthenticationError("Unauthorized: Invalid or expired token")

    async def authenticate_request(self, request: Request) -> AuthenticatedUser:
        """Verify the bearer token and attach the user to ``request.state``."""
        token = extract_bearer_token(request)
        claims = await self.verify_token(token)

        user_id = claims.get("id") or claims.get("sub")
        user = AuthenticatedUser(
            id=str(user_id) if user_id is not None else None,
            email=claims.get("email"),
            roles=_claim_roles(claims.get("roles")),
            token=token,
        )
        request.state.user = user
        set_user_context(user.id)
        return user

    def authorize(self, user: AuthenticatedUser, *roles: str) -> None:
        if not any(role in user.roles for role in roles):
            raise AuthorizationError(
                f"Forbidden: Required roles: {' or '.join(roles)}. User has: {', '.join(user.roles)}"
            )

    def require_roles(self, *roles: str) -> Callable:
        """FastAPI dependency authenticating the caller and checking ``roles``."""

        async def dependency(request: Request) -> AuthenticatedUser:
            user = await self.authenticate_request(request)
            self.authorize(user, *roles)
            return user

        return dependency
