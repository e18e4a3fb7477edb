"""Tests for the delivery service and its in-memory adapter."""
import pytest
from eventgrid_simulator.adapters.memory import InMemoryAdapter
from eventgrid_simulator.event_models import EventGridEvent
from eventgrid_simulator.services.delivery import DeliveryService
from .factories import make_event


def event(**overrides) -> EventGridEvent:
    return EventGridEvent.model_validate(make_event(**overrides))


def test_event_model_uses_wire_names():
    evt = event(metadataVersion="1", extra_field="kept")
    assert evt.event_type == "orders.created"
    assert evt.event_time == "2026-10-19T04:30:00.1234567Z"
    assert evt.metadata_version == "1"
    dumped = evt.model_dump(by_alias=True)
    assert dumped["eventType"] == "orders.created"
    assert dumped["extra_field"] == "kept"


@pytest.mark.asyncio
async def test_memory_adapter_deliver():
    adapter = InMemoryAdapter()
    delivered = await adapter.deliver("orders", event())

    assert delivered.delivery_id is not None
    assert delivered.received_at is not None
    assert delivered.topic == "orders"
    assert delivered.event.id == "evt-1"


@pytest.mark.asyncio
async def test_memory_adapter_list_recent():
    adapter = InMemoryAdapter()
    for i in range(5):
        await adapter.deliver("orders", event(id=f"evt-{i}"))

    recent = list(await adapter.list_recent(limit=3))
    # Newest first
    assert [d.event.id for d in recent] == ["evt-4", "evt-3", "evt-2"]


@pytest.mark.asyncio
async def test_memory_adapter_filters_by_topic():
    adapter = InMemoryAdapter()
    await adapter.deliver("orders", event(id="a"))
    await adapter.deliver("audit", event(id="b"))

    assert [d.event.id for d in await adapter.list_recent(topic="audit")] == ["b"]


@pytest.mark.asyncio
async def test_memory_adapter_is_bounded():
    adapter = InMemoryAdapter(max_events=2)
    for i in range(3):
        await adapter.deliver("orders", event(id=f"evt-{i}"))

    assert [d.event.id for d in await adapter.list_recent()] == ["evt-2", "evt-1"]


@pytest.mark.asyncio
async def test_memory_adapter_health_check():
    assert await InMemoryAdapter().health_check() is True


@pytest.mark.asyncio
async def test_delivery_service_delivers_batch_in_order():
    service = DeliveryService()
    delivered = await service.deliver("orders", [event(id="a"), event(id="b")])

    assert [d.event.id for d in delivered] == ["a", "b"]
    assert await service.health_check() is True
