"""
Messaging provider selection and the process-scoped provider holder.
"""

from __future__ import annotations

import threading
from enum import Enum
from typing import Optional

from shared.config import AdminConfig
from shared.errors import ConfigurationError
from shared.logging import get_logger

from .provider import MessagingProvider

logger = get_logger("admin.messaging.factory")


class ProviderKind(str, Enum):
    DAPR = "dapr"
    KAFKA = "kafka"


def resolve_provider_kind(value: str) -> ProviderKind:
    """Map a configured provider name to a kind; unknown names are a startup error."""
    try:
        return ProviderKind((value or "").strip().lower())
    except ValueError:
        raise ConfigurationError(
            f"Unsupported messaging provider '{value}'",
            details={"supported": [kind.value for kind in ProviderKind]},
        ) from None


def create_messaging_provider(kind: ProviderKind, config: AdminConfig) -> MessagingProvider:
    """Build a fresh provider of the given kind."""
    if kind is ProviderKind.DAPR:
        from .dapr_provider import DaprProvider

        return DaprProvider(
            pubsub_name=config.pubsub_name,
            dapr_host=config.dapr_host,
            dapr_port=config.dapr_http_port,
            timeout=config.http_timeout_seconds,
        )
    if kind is ProviderKind.KAFKA:
        from .kafka_provider import KafkaProvider

        return KafkaProvider(config.kafka_bootstrap, client_id=config.service_name)
    raise ConfigurationError(f"Unsupported messaging provider '{kind}'")


class MessagingContext:
    """
    Holds the process's single messaging provider.

    The provider kind is validated when the context is created (at
    bootstrap); the provider itself is built on first use and kept until
    ``close_messaging_provider`` is awaited.
    """

    def __init__(self, config: AdminConfig, provider: Optional[MessagingProvider] = None):
        self.config = config
        self.kind = resolve_provider_kind(config.messaging_provider)
        self._provider = provider
        self._lock = threading.Lock()

    def get_messaging_provider(self) -> MessagingProvider:
        provider = self._provider
        if provider is None:
            with self._lock:
                if self._provider is None:
                    self._provider = create_messaging_provider(self.kind, self.config)
                    logger.info("Messaging provider created", provider=self.kind.value)
                provider = self._provider
        return provider

    async def close_messaging_provider(self) -> None:
        with self._lock:
            provider, self._provider = self._provider, None
        if provider is not None:
            await provider.close()
            logger.info("Messaging provider closed", provider=self.kind.value)
