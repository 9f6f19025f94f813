"""
Unit tests for messaging providers and the provider context.
"""

import asyncio
import json
import threading
import time
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from kafka.errors import KafkaError

from shared.errors import ConfigurationError
from shared.test_helpers import create_test_config
from service_admin.app.messaging import (
    MessagingContext,
    MessagingProvider,
    ProviderKind,
    build_envelope,
    create_messaging_provider,
    resolve_provider_kind,
)
from service_admin.app.messaging.dapr_provider import DaprProvider
from service_admin.app.messaging.kafka_provider import KafkaProvider


class TestProviderSelection:
    """Test cases for provider kind resolution and the factory."""

    @pytest.mark.parametrize("value,kind", [
        ("dapr", ProviderKind.DAPR),
        ("DAPR", ProviderKind.DAPR),
        (" kafka ", ProviderKind.KAFKA),
    ])
    def test_known_kinds(self, value, kind):
        assert resolve_provider_kind(value) is kind

    @pytest.mark.parametrize("value", ["rabbitmq", "", "servicebus"])
    def test_unknown_kind_is_configuration_error(self, value):
        with pytest.raises(ConfigurationError):
            resolve_provider_kind(value)

    def test_context_rejects_unknown_kind_at_construction(self):
        config = create_test_config(messaging_provider="carrier-pigeon")
        with pytest.raises(ConfigurationError):
            MessagingContext(config)

    def test_factory_builds_dapr_provider_from_config(self):
        config = create_test_config(pubsub_name="events", dapr_host="sidecar", dapr_http_port=3600)
        provider = create_messaging_provider(ProviderKind.DAPR, config)

        assert isinstance(provider, DaprProvider)
        assert provider.pubsub_name == "events"
        assert provider.publish_url("payment.processed") == "/v1.0/publish/events/payment.processed"

    def test_factory_builds_kafka_provider_from_config(self):
        config = create_test_config(messaging_provider="kafka", kafka_bootstrap="broker:9092")
        provider = create_messaging_provider(ProviderKind.KAFKA, config)

        assert isinstance(provider, KafkaProvider)
        assert provider.producer is None


class TestMessagingContext:
    """Test cases for the process-scoped provider holder."""

    @pytest.fixture
    def context(self):
        return MessagingContext(create_test_config())

    def test_same_instance_until_closed(self, context):
        first = context.get_messaging_provider()
        second = context.get_messaging_provider()
        assert first is second

    @pytest.mark.asyncio
    async def test_close_then_get_builds_a_new_instance(self, context):
        first = context.get_messaging_provider()
        await context.close_messaging_provider()
        second = context.get_messaging_provider()
        assert first is not second

    @pytest.mark.asyncio
    async def test_close_calls_provider_close_once(self):
        provider = AsyncMock(spec=MessagingProvider)
        context = MessagingContext(create_test_config(), provider=provider)

        await context.close_messaging_provider()
        await context.close_messaging_provider()

        provider.close.assert_awaited_once()

    def test_concurrent_first_use_has_single_winner(self, context):
        seen = []
        barrier = threading.Barrier(8)

        def worker():
            barrier.wait()
            seen.append(context.get_messaging_provider())

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(seen) == 8
        assert all(p is seen[0] for p in seen)


class TestDaprProvider:
    """Test cases for DaprProvider."""

    @pytest.fixture
    def published(self):
        return []

    def _provider(self, handler):
        return DaprProvider("pubsub", "localhost", 3500, transport=httpx.MockTransport(handler))

    @pytest.mark.asyncio
    async def test_publish_posts_envelope_to_sidecar(self, published):
        def handler(request):
            published.append(request)
            return httpx.Response(204)

        provider = self._provider(handler)
        envelope = build_envelope("payment.processed", {"orderId": "ORD-1"}, correlation_id="c-1")

        assert await provider.publish_event("payment.processed", envelope) is True

        request = published[0]
        assert request.method == "POST"
        assert str(request.url) == "http://localhost:3500/v1.0/publish/pubsub/payment.processed"
        body = json.loads(request.content)
        assert body["eventId"] == envelope.event_id
        assert body["metadata"]["correlationId"] == "c-1"

    @pytest.mark.asyncio
    async def test_client_created_lazily_and_reused(self):
        provider = self._provider(lambda request: httpx.Response(204))
        assert provider.client is None

        envelope = build_envelope("t", {})
        await provider.publish_event("t", envelope)
        client = provider.client
        await provider.publish_event("t", envelope)

        assert client is not None
        assert provider.client is client

    @pytest.mark.asyncio
    async def test_sidecar_error_returns_false(self):
        provider = self._provider(lambda request: httpx.Response(500, text="pubsub not found"))
        assert await provider.publish_event("t", build_envelope("t", {})) is False

    @pytest.mark.asyncio
    async def test_transport_exception_returns_false(self):
        def handler(request):
            raise httpx.ConnectError("sidecar down")

        provider = self._provider(handler)
        assert await provider.publish_event("t", build_envelope("t", {})) is False

    @pytest.mark.asyncio
    async def test_close_is_idempotent(self):
        provider = self._provider(lambda request: httpx.Response(204))
        await provider.publish_event("t", build_envelope("t", {}))

        await provider.close()
        assert provider.client is None
        await provider.close()


class TestKafkaProvider:
    """Test cases for KafkaProvider."""

    @pytest.fixture
    def producer(self):
        producer = MagicMock()
        record = MagicMock(partition=0, offset=42)
        producer.send.return_value.get.return_value = record
        return producer

    @pytest.mark.asyncio
    async def test_publish_success(self, producer):
        with patch("service_admin.app.messaging.kafka_provider.KafkaProducer", return_value=producer) as factory:
            provider = KafkaProvider("broker:9092")
            envelope = build_envelope("payment.failed", {"orderId": "ORD-1"}, correlation_id="c-7")

            assert await provider.publish_event("payment.failed", envelope) is True

        factory.assert_called_once()
        kwargs = producer.send.call_args.kwargs
        assert kwargs["topic"] == "payment.failed"
        assert kwargs["key"] == "c-7"
        assert kwargs["value"]["eventId"] == envelope.event_id

    @pytest.mark.asyncio
    async def test_concurrent_first_publishes_share_one_producer(self):
        created = []

        def slow_factory(**kwargs):
            time.sleep(0.05)
            producer = MagicMock()
            producer.send.return_value.get.return_value = MagicMock(partition=0, offset=1)
            created.append(producer)
            return producer

        with patch("service_admin.app.messaging.kafka_provider.KafkaProducer", side_effect=slow_factory):
            provider = KafkaProvider("broker:9092")
            results = await asyncio.gather(*(
                provider.publish_event("t", build_envelope("t", {})) for _ in range(4)
            ))
            await provider.close()

        assert results == [True, True, True, True]
        assert len(created) == 1
        assert created[0].send.call_count == 4
        created[0].close.assert_called_once()

    @pytest.mark.asyncio
    async def test_kafka_error_returns_false(self, producer):
        producer.send.return_value.get.side_effect = KafkaError("timed out")
        with patch("service_admin.app.messaging.kafka_provider.KafkaProducer", return_value=producer):
            provider = KafkaProvider("broker:9092")
            assert await provider.publish_event("t", build_envelope("t", {})) is False

    @pytest.mark.asyncio
    async def test_close_flushes_and_is_idempotent(self, producer):
        with patch("service_admin.app.messaging.kafka_provider.KafkaProducer", return_value=producer):
            provider = KafkaProvider("broker:9092")
            await provider.publish_event("t", build_envelope("t", {}))

            await provider.close()
            await provider.close()

        producer.flush.assert_called_once()
        producer.close.assert_called_once()
        assert provider.producer is None
