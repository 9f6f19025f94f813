"""
Common pieces for downstream service clients.
"""

from typing import Any, Dict, Mapping, Optional
from urllib.parse import urlencode

from shared.errors import MissingCredentialError
from shared.logging import get_logger

from ..core.invocation import ServiceInvoker
from ..core.transport import ServiceName


def auth_headers(token: Optional[str]) -> Dict[str, str]:
    """Bearer header for ``token``; empty when no token is supplied."""
    if not token:
        return {}
    return {"Authorization": f"Bearer {token}"}


def required_auth_headers(token: Optional[str]) -> Dict[str, str]:
    """Bearer header for operations that must not run without a token."""
    if not token:
        raise MissingCredentialError()
    return auth_headers(token)


def with_query(path: str, query: Optional[Mapping[str, Any]] = None) -> str:
    """Append url-encoded ``query`` to ``path``; booleans render as true/false."""
    if not query:
        return path
    params = {
        key: (str(value).lower() if isinstance(value, bool) else value)
        for key, value in query.items()
        if value is not None
    }
    if not params:
        return path
    return f"{path}?{urlencode(params, doseq=True)}"


class DownstreamClient:
    """Base for thin per-service clients built on the invocation facade."""

    service: ServiceName

    def __init__(self, invoker: ServiceInvoker):
        self.invoker = invoker
        self.logger = get_logger(f"admin.{self.service.name.lower()}_client")

    async def _call(self, path: str, method: str = "GET", body: Any = None,
                    token: Optional[str] = None) -> Any:
        return await self.invoker.invoke(
            self.service,
            path,
            method,
            body,
            headers=auth_headers(token),
        )
