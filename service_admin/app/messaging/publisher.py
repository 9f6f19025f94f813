"""
Event publishing convenience layer.
"""

from typing import Any, Optional

from shared.errors import EventPublishError
from shared.logging import get_logger
from shared.metrics import MetricsCollector

from .envelope import EventEnvelope, build_envelope
from .factory import MessagingContext


class EventPublisher:
    """Builds envelopes and hands them to the process messaging provider."""

    def __init__(self, context: MessagingContext, metrics: Optional[MetricsCollector] = None):
        self.context = context
        self.metrics = metrics
        self.logger = get_logger("admin.messaging.publisher")

    async def publish(self, topic: str, payload: Any, correlation_id: Optional[str] = None) -> EventEnvelope:
        """
        Publish an event whose delivery the caller depends on.

        Raises ``EventPublishError`` when the provider reports failure or
        raises; callers surface that as a request failure.
        """
        envelope = build_envelope(topic, payload, correlation_id)
        self.logger.debug(
            "Publishing event",
            topic=topic,
            event_id=envelope.event_id,
            trace_id=envelope.metadata.trace_id,
            span_id=envelope.metadata.span_id,
        )

        try:
            delivered = await self.context.get_messaging_provider().publish_event(topic, envelope)
        except Exception as e:
            self._record(topic, "error")
            raise EventPublishError(topic, str(e) or e.__class__.__name__,
                                    details={"event_id": envelope.event_id}) from e

        if not delivered:
            self._record(topic, "rejected")
            raise EventPublishError(topic, "broker handoff was not confirmed",
                                    details={"event_id": envelope.event_id})

        self._record(topic, "success")
        self.logger.info(
            "Event published successfully",
            topic=topic,
            event_id=envelope.event_id,
            correlation_id=envelope.metadata.correlation_id,
        )
        return envelope

    async def publish_event(self, topic: str, payload: Any, correlation_id: Optional[str] = None) -> None:
        """Best-effort publish; failures are logged and never raised."""
        try:
            await self.publish(topic, payload, correlation_id)
        except Exception as e:
            self.logger.warning(
                "Failed to publish event",
                topic=topic,
                error=str(e) or e.__class__.__name__,
                correlation_id=correlation_id,
            )

    def _record(self, topic: str, outcome: str) -> None:
        if self.metrics is not None:
            self.metrics.record_event_publish(topic, outcome)
