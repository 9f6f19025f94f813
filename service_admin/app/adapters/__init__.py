"""
Adapters package for the Admin Service.

Contains one thin client per downstream service (user, order, payment,
auth). Each client only names operations on top of the invocation
facade:

- Paths and HTTP methods
- Bearer header construction
- Service-specific soft-failure mapping (payment lookup)

No retries or circuit breakers; failures propagate as
``RemoteInvocationError``.
"""

from .auth_client import AuthServiceClient
from .base import auth_headers, required_auth_headers, with_query
from .order_client import OrderServiceClient
from .payment_client import PaymentServiceClient
from .user_client import UserServiceClient

__all__ = [
    "AuthServiceClient",
    "OrderServiceClient",
    "PaymentServiceClient",
    "UserServiceClient",
    "auth_headers",
    "required_auth_headers",
    "with_query",
]
