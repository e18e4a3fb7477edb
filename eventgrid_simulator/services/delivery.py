"""Delivery service: the downstream side of the acceptance gate."""
from typing import Iterable, List, Sequence
import structlog
from ..adapters.base import DeliveryAdapter
from ..adapters.memory import InMemoryAdapter
from ..event_models import DeliveredEvent, EventGridEvent

log = structlog.get_logger()


class DeliveryService:
    """
    Receives validated batches and hands each event to a backend adapter.

    Retries and dead-lettering are not simulated.
    """

    def __init__(self, adapter: DeliveryAdapter | None = None):
        self._adapter = adapter or InMemoryAdapter()

    async def deliver(self, topic: str, events: Sequence[EventGridEvent]) -> List[DeliveredEvent]:
        delivered = [await self._adapter.deliver(topic, event) for event in events]
        log.info("batch.delivered", topic=topic, count=len(delivered))
        return delivered

    async def list_recent(self, topic: str | None = None, limit: int = 50) -> Iterable[DeliveredEvent]:
        return await self._adapter.list_recent(topic=topic, limit=limit)

    async def health_check(self) -> bool:
        return await self._adapter.health_check()
