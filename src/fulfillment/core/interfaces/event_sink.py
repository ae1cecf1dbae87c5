"""Notification / activity feed port."""

from abc import ABC, abstractmethod

from fulfillment.core.entities import DomainEvent


class IEventSink(ABC):
    """Receives domain events after the producing transaction committed."""

    @abstractmethod
    async def publish(self, event: DomainEvent) -> None:
        """Deliver one event."""
        pass

    async def recent(self, limit: int = 50) -> list[DomainEvent]:
        """Most recent events, newest first. Sinks without storage return nothing."""
        return []
