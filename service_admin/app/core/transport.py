"""
Address resolution for downstream service invocation.

Two strategies exist: ``DirectTransport`` addresses services by base URL,
``SidecarTransport`` routes through the local Dapr sidecar's service
invocation API. The strategy is chosen once at startup from
``TransportMode`` and never re-evaluated per call.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, Mapping, Optional, Union

from shared.config import AdminConfig, TransportMode


class ServiceName(str, Enum):
    """Logical names of the downstream services."""

    USER = "user-service"
    ORDER = "order-service"
    PAYMENT = "payment-service"
    AUTH = "auth-service"
    PRODUCT = "product-service"
    AUDIT = "audit-service"
    NOTIFICATION = "notification-service"


ServiceRef = Union[ServiceName, str]


def service_key(service: ServiceRef) -> str:
    return service.value if isinstance(service, ServiceName) else str(service)


def normalize_path(path: str) -> str:
    """Strip a single leading slash; everything else passes through untouched."""
    return path[1:] if path.startswith("/") else path


class DirectTransport:
    """Resolve services to ``{base_url}/{path}``."""

    mode = TransportMode.DIRECT

    def __init__(
        self,
        service_urls: Optional[Mapping[str, str]] = None,
        *,
        default_prefix: str = "xshopai",
        default_port: int = 8000,
    ) -> None:
        self._service_urls: Dict[str, str] = dict(service_urls or {})
        self.default_prefix = default_prefix
        self.default_port = default_port

    def base_url(self, service: ServiceRef) -> str:
        name = service_key(service)
        mapped = self._service_urls.get(name)
        if mapped:
            return mapped
        return f"http://{self.default_prefix}-{name}:{self.default_port}"

    def resolve_address(self, service: ServiceRef, path: str) -> str:
        return f"{self.base_url(service)}/{normalize_path(path)}"


class SidecarTransport:
    """Resolve services through the sidecar invoke API."""

    mode = TransportMode.SIDECAR

    def __init__(self, host: str, port: int, app_ids: Optional[Mapping[str, str]] = None) -> None:
        self.host = host
        self.port = port
        self._app_ids: Dict[str, str] = dict(app_ids or {})

    def app_id(self, service: ServiceRef) -> str:
        name = service_key(service)
        return self._app_ids.get(name) or name

    def resolve_address(self, service: ServiceRef, path: str) -> str:
        return (
            f"http://{self.host}:{self.port}/v1.0/invoke/"
            f"{self.app_id(service)}/method/{normalize_path(path)}"
        )


Transport = Union[DirectTransport, SidecarTransport]


def build_transport(config: AdminConfig) -> Transport:
    """Pick the transport strategy for this process."""
    if config.platform_mode == TransportMode.SIDECAR:
        return SidecarTransport(config.dapr_host, config.dapr_http_port, config.service_app_ids())
    return DirectTransport(config.service_urls(), default_prefix=config.service_url_prefix)
