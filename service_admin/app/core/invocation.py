"""
Service invocation facade.

Every downstream client goes through ``ServiceInvoker.invoke``. The facade
resolves the address with the process transport strategy, sends the
request over a shared ``httpx.AsyncClient`` and normalizes the outcome:
a parsed JSON value, ``None`` for non-JSON or empty success bodies, or a
``RemoteInvocationError`` for non-2xx responses and transport faults.
"""

from __future__ import annotations

import json
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

import httpx

from shared.errors import RemoteInvocationError
from shared.logging import get_logger
from shared.metrics import MetricsCollector

from .transport import ServiceRef, Transport, service_key

ALLOWED_METHODS = frozenset({"GET", "POST", "PUT", "PATCH", "DELETE"})


@dataclass(frozen=True)
class InvocationRequest:
    """A single outbound call."""

    service: ServiceRef
    path: str
    method: str = "GET"
    body: Any = None
    headers: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self):
        method = self.method.upper()
        if method not in ALLOWED_METHODS:
            raise ValueError(f"Unsupported HTTP method: {self.method}")
        object.__setattr__(self, "method", method)

    def request_headers(self) -> httpx.Headers:
        # Case-insensitive merge so any spelling of a caller header replaces the default
        headers = httpx.Headers({"Content-Type": "application/json"})
        headers.update(self.headers)
        return headers

    def request_content(self) -> Optional[bytes]:
        if self.method == "GET" or self.body is None:
            return None
        return json.dumps(self.body).encode("utf-8")


class ServiceInvoker:
    """Uniform outbound call contract used by every domain client."""

    def __init__(
        self,
        transport: Transport,
        *,
        timeout: float = 10.0,
        metrics: Optional[MetricsCollector] = None,
        http_transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._transport = transport
        self.timeout = timeout
        self.metrics = metrics
        self._http_transport = http_transport
        self._client: Optional[httpx.AsyncClient] = None
        self._client_lock = threading.Lock()
        self.logger = get_logger("admin.invocation")

    @property
    def transport(self) -> Transport:
        return self._transport

    @property
    def mode(self) -> str:
        return self._transport.mode.value

    def _get_client(self) -> httpx.AsyncClient:
        client = self._client
        if client is None:
            with self._client_lock:
                if self._client is None:
                    self._client = httpx.AsyncClient(
                        timeout=self.timeout,
                        transport=self._http_transport,
                    )
                client = self._client
        return client

    async def aclose(self) -> None:
        """Close the shared HTTP client."""
        with self._client_lock:
            client, self._client = self._client, None
        if client is not None:
            await client.aclose()

    def resolve_address(self, service: ServiceRef, path: str) -> str:
        return self._transport.resolve_address(service, path)

    async def invoke(
        self,
        service: ServiceRef,
        path: str,
        method: str = "GET",
        body: Any = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> Any:
        """Invoke ``method path`` on ``service`` and return the parsed JSON body."""
        return await self.send(
            InvocationRequest(service=service, path=path, method=method, body=body, headers=headers or {})
        )

    async def send(self, request: InvocationRequest) -> Any:
        name = service_key(request.service)
        url = self.resolve_address(request.service, request.path)

        self.logger.debug(
            "Invoking service",
            mode=self.mode,
            target=name,
            url=url,
            method=request.method,
        )

        start = time.time()
        try:
            response = await self._get_client().request(
                request.method,
                url,
                headers=request.request_headers(),
                content=request.request_content(),
            )
        except httpx.HTTPError as e:
            self._record(name, request.method, "transport_error", start)
            self.logger.error(
                "Service invocation failed",
                mode=self.mode,
                target=name,
                path=request.path,
                method=request.method,
                error=str(e) or e.__class__.__name__,
            )
            raise RemoteInvocationError(
                name, request.path, request.method, error_text=str(e) or e.__class__.__name__
            ) from e

        if not response.is_success:
            error_text = response.text
            self._record(name, request.method, str(response.status_code), start)
            self.logger.error(
                "Service invocation failed",
                mode=self.mode,
                target=name,
                path=request.path,
                method=request.method,
                status_code=response.status_code,
                error=error_text,
            )
            raise RemoteInvocationError(
                name, request.path, request.method, status_code=response.status_code, error_text=error_text
            )

        self._record(name, request.method, "success", start)

        content_type = response.headers.get("content-type", "")
        if "application/json" not in content_type or not response.content:
            return None
        return response.json()

    def _record(self, target: str, method: str, outcome: str, start: float) -> None:
        if self.metrics is not None:
            self.metrics.record_invocation(target, method, outcome, time.time() - start)
