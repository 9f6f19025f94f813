"""
Domain utilities for the Admin Service.

Includes the JWT auth middleware and request validators that run before
any downstream call is made.
"""

from .auth_middleware import AuthenticatedUser, AuthMiddleware, extract_bearer_token

__all__ = [
    "AuthenticatedUser",
    "AuthMiddleware",
    "extract_bearer_token",
]
