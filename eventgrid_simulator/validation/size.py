"""Payload and per-event size limits."""
from typing import Any, Mapping, Sequence
import orjson
import structlog
from .outcome import EVENT_TOO_LARGE, PAYLOAD_TOO_LARGE, FailureKind, ValidationOutcome

log = structlog.get_logger()

MAX_PAYLOAD_BYTES = 1536000
MAX_EVENT_BYTES = 66560


def canonical_size(event: Mapping[str, Any]) -> int:
    """Byte length of the event serialized as compact JSON."""
    return len(orjson.dumps(event))


class SizeValidator:
    """Enforces the overall body limit and the per-event limit."""

    def __init__(self, max_payload_bytes: int = MAX_PAYLOAD_BYTES, max_event_bytes: int = MAX_EVENT_BYTES):
        self.max_payload_bytes = max_payload_bytes
        self.max_event_bytes = max_event_bytes

    def check_payload(self, body: bytes) -> ValidationOutcome:
        log.debug("payload.size", bytes=len(body), max_bytes=self.max_payload_bytes)
        if len(body) > self.max_payload_bytes:
            log.error("payload.too_large", bytes=len(body), max_bytes=self.max_payload_bytes)
            return ValidationOutcome.failure(FailureKind.PAYLOAD_TOO_LARGE, PAYLOAD_TOO_LARGE)
        return ValidationOutcome.SUCCESS

    def check_events(self, events: Sequence[Mapping[str, Any]]) -> ValidationOutcome:
        # Stops at the first oversized event; later events are not measured.
        for index, event in enumerate(events):
            size = canonical_size(event)
            log.debug("event.size", index=index, bytes=size)
            if size > self.max_event_bytes:
                log.error("event.too_large", index=index, bytes=size, max_bytes=self.max_event_bytes)
                return ValidationOutcome.failure(FailureKind.EVENT_TOO_LARGE, EVENT_TOO_LARGE)
        return ValidationOutcome.SUCCESS
