from pydantic import BaseModel, ConfigDict, Field
from typing import Any
import uuid, time


class EventGridEvent(BaseModel):
    """One event from a notification batch, in Event Grid wire names."""

    # Fields populate only from wire names; snake_case keys stay as extras.
    model_config = ConfigDict(extra="allow")

    id: str
    event_type: str = Field(..., alias="eventType")
    subject: str
    event_time: str = Field(..., alias="eventTime")
    data: Any = None
    data_version: str | None = Field(default=None, alias="dataVersion")
    metadata_version: str | None = Field(default=None, alias="metadataVersion")
    topic: str | None = None


class DeliveredEvent(BaseModel):
    """An accepted event as recorded by the delivery sink."""

    topic: str
    event: EventGridEvent
    delivery_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    received_at: float = Field(default_factory=lambda: time.time())
