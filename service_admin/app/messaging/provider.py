"""
Messaging provider interface.
"""

from abc import ABC, abstractmethod

from .envelope import EventEnvelope


class MessagingProvider(ABC):
    """
    Broker-agnostic event publishing.

    ``publish_event`` must never raise: failures are logged and reported
    as ``False`` so callers decide whether delivery matters.
    """

    name: str = "abstract"

    @abstractmethod
    async def publish_event(self, topic: str, envelope: EventEnvelope) -> bool:
        """Hand ``envelope`` to the broker; True only on confirmed handoff."""

    @abstractmethod
    async def close(self) -> None:
        """Release any held client handle. Safe to call more than once."""
