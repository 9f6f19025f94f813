"""
Dapr sidecar messaging provider.

Publishes through the sidecar pub/sub API; the sidecar routes to whichever
broker component backs ``pubsub_name`` (RabbitMQ, Service Bus, ...).
"""

from typing import Optional

import httpx

from shared.logging import get_logger

from .envelope import EventEnvelope
from .provider import MessagingProvider


class DaprProvider(MessagingProvider):
    """Sidecar-mediated pub/sub provider."""

    name = "dapr"

    def __init__(
        self,
        pubsub_name: str = "pubsub",
        dapr_host: str = "localhost",
        dapr_port: int = 3500,
        *,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.pubsub_name = pubsub_name
        self.dapr_host = dapr_host
        self.dapr_port = dapr_port
        self.timeout = timeout
        self._transport = transport
        self.client: Optional[httpx.AsyncClient] = None
        self.logger = get_logger("admin.messaging.dapr")

        self.logger.info(
            "Initialized DaprProvider",
            pubsub_name=self.pubsub_name,
            dapr_host=self.dapr_host,
            dapr_port=self.dapr_port,
        )

    def _get_client(self) -> httpx.AsyncClient:
        if self.client is None:
            self.client = httpx.AsyncClient(
                base_url=f"http://{self.dapr_host}:{self.dapr_port}",
                timeout=self.timeout,
                transport=self._transport,
            )
        return self.client

    def publish_url(self, topic: str) -> str:
        return f"/v1.0/publish/{self.pubsub_name}/{topic}"

    async def publish_event(self, topic: str, envelope: EventEnvelope) -> bool:
        correlation_id = envelope.metadata.correlation_id
        try:
            response = await self._get_client().post(
                self.publish_url(topic),
                json=envelope.to_wire(),
            )
            if not response.is_success:
                self.logger.error(
                    "Sidecar rejected event",
                    topic=topic,
                    event_id=envelope.event_id,
                    correlation_id=correlation_id,
                    status_code=response.status_code,
                    error=response.text,
                )
                return False

            self.logger.info(
                "Published event via Dapr",
                topic=topic,
                event_id=envelope.event_id,
                correlation_id=correlation_id,
            )
            return True

        except Exception as e:
            self.logger.error(
                "Failed to publish event via Dapr",
                topic=topic,
                event_id=envelope.event_id,
                correlation_id=correlation_id,
                error=str(e) or e.__class__.__name__,
            )
            return False

    async def close(self) -> None:
        client, self.client = self.client, None
        if client is not None:
            self.logger.info("Closing DaprProvider")
            await client.aclose()
