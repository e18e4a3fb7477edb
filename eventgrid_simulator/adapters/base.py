"""Base adapter interface for delivery backends."""
from abc import ABC, abstractmethod
from typing import Iterable
from ..event_models import DeliveredEvent, EventGridEvent


class DeliveryAdapter(ABC):
    """Abstract interface for where accepted events end up."""

    @abstractmethod
    async def deliver(self, topic: str, event: EventGridEvent) -> DeliveredEvent:
        """
        Hand one accepted event to the backend.

        Args:
            topic: Name of the topic the event was posted to
            event: The validated event

        Returns:
            The delivery record with assigned ID and receive time
        """
        pass

    @abstractmethod
    async def list_recent(self, topic: str | None = None, limit: int = 50) -> Iterable[DeliveredEvent]:
        """
        Retrieve recently delivered events, newest first.

        Args:
            topic: Only return events for this topic when given
            limit: Maximum number of events to return
        """
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        pass
