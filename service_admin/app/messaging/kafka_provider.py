"""
Kafka messaging provider.
"""

import asyncio
import json
import threading
from typing import Optional

from kafka import KafkaProducer
from kafka.errors import KafkaError

from shared.logging import get_logger

from .envelope import EventEnvelope
from .provider import MessagingProvider


class KafkaProvider(MessagingProvider):
    """Publishes envelopes straight to Kafka topics."""

    name = "kafka"

    def __init__(self, bootstrap_servers: str, client_id: str = "admin-service", send_timeout: float = 10.0):
        self.bootstrap_servers = bootstrap_servers
        self.client_id = client_id
        self.send_timeout = send_timeout
        self.logger = get_logger("admin.messaging.kafka")
        self.producer: Optional[KafkaProducer] = None
        self._producer_lock = threading.Lock()

    def _get_producer(self) -> KafkaProducer:
        # Called from executor threads; only one may build the producer
        producer = self.producer
        if producer is None:
            with self._producer_lock:
                if self.producer is None:
                    self.producer = KafkaProducer(
                        bootstrap_servers=self.bootstrap_servers,
                        client_id=self.client_id,
                        value_serializer=lambda x: json.dumps(x).encode('utf-8'),
                        key_serializer=lambda x: x.encode('utf-8') if x else None,
                        acks='all',
                        linger_ms=10,
                    )
                    self.logger.info("Kafka producer started", bootstrap_servers=self.bootstrap_servers)
                producer = self.producer
        return producer

    def _send(self, topic: str, envelope: EventEnvelope):
        producer = self._get_producer()
        headers = [("eventType", envelope.event_type.encode('utf-8'))]
        if envelope.metadata.correlation_id:
            headers.append(("correlationId", envelope.metadata.correlation_id.encode('utf-8')))

        future = producer.send(
            topic=topic,
            value=envelope.to_wire(),
            key=envelope.metadata.correlation_id,
            headers=headers,
        )
        # Wait for broker acknowledgement
        return future.get(timeout=self.send_timeout)

    async def publish_event(self, topic: str, envelope: EventEnvelope) -> bool:
        loop = asyncio.get_running_loop()
        try:
            record_metadata = await loop.run_in_executor(None, self._send, topic, envelope)

            self.logger.debug(
                "Message sent successfully",
                topic=topic,
                event_id=envelope.event_id,
                partition=record_metadata.partition,
                offset=record_metadata.offset
            )
            return True

        except KafkaError as e:
            self.logger.error("Kafka error sending event", topic=topic, event_id=envelope.event_id, error=str(e))
            return False

        except Exception as e:
            self.logger.error("Error sending event", topic=topic, event_id=envelope.event_id, error=str(e))
            return False

    async def close(self) -> None:
        with self._producer_lock:
            producer, self.producer = self.producer, None
        if producer is not None:
            loop = asyncio.get_running_loop()
            await loop.run_in_executor(None, producer.flush)
            producer.close()
            self.logger.info("Kafka producer stopped")
