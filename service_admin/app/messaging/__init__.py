"""
Messaging abstraction for the Admin Service.

Provides a unified interface for publishing domain events regardless of
the broker behind it:

- provider: ``MessagingProvider`` interface (publish_event, close)
- dapr_provider / kafka_provider: concrete providers, loaded on demand
- factory: provider selection and the process-scoped ``MessagingContext``
- envelope: the event wire envelope
- publisher: ``EventPublisher`` convenience layer
"""

from .envelope import EventEnvelope, build_envelope, generate_event_id
from .factory import MessagingContext, ProviderKind, create_messaging_provider, resolve_provider_kind
from .provider import MessagingProvider
from .publisher import EventPublisher

__all__ = [
    "EventEnvelope",
    "EventPublisher",
    "MessagingContext",
    "MessagingProvider",
    "ProviderKind",
    "build_envelope",
    "create_messaging_provider",
    "generate_event_id",
    "resolve_provider_kind",
]
