"""In-memory delivery adapter."""
from collections import deque
from typing import Iterable
import structlog
from .base import DeliveryAdapter
from ..event_models import DeliveredEvent, EventGridEvent

log = structlog.get_logger()


class InMemoryAdapter(DeliveryAdapter):
    """Keeps the most recent deliveries in a bounded buffer."""

    def __init__(self, max_events: int = 1000):
        self._buffer: deque[DeliveredEvent] = deque(maxlen=max_events)

    async def deliver(self, topic: str, event: EventGridEvent) -> DeliveredEvent:
        delivered = DeliveredEvent(topic=topic, event=event)
        self._buffer.append(delivered)
        log.info(
            "event.delivered",
            delivery_id=delivered.delivery_id,
            topic=topic,
            event_id=event.id,
            event_type=event.event_type,
            adapter="memory",
        )
        return delivered

    async def list_recent(self, topic: str | None = None, limit: int = 50) -> Iterable[DeliveredEvent]:
        recent = [d for d in reversed(self._buffer) if topic is None or d.topic == topic]
        return recent[:limit]

    async def health_check(self) -> bool:
        """In-memory adapter is always healthy."""
        return True
