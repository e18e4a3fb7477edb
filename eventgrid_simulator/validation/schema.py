"""Batch decoding and per-event schema validation."""
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Sequence

import orjson
import structlog

from .outcome import BODY_NOT_DECODABLE, FailureKind, ValidationOutcome

log = structlog.get_logger()

RawEvent = Dict[str, Any]

# wire name, in the order they are checked
REQUIRED_STRINGS = ("id", "eventType", "subject")
OPTIONAL_STRINGS = ("dataVersion", "metadataVersion")
SUPPORTED_METADATA_VERSION = "1"

_FRACTION = re.compile(r"(\.\d{6})\d+")


@dataclass(frozen=True)
class DecodedBatch:
    outcome: ValidationOutcome
    events: List[RawEvent] = field(default_factory=list)


def decode_batch(body: bytes) -> DecodedBatch:
    """Decode a request body that must be a JSON array of JSON objects."""
    try:
        payload = orjson.loads(body)
    except orjson.JSONDecodeError as e:
        log.warning("batch.invalid_json", error=str(e))
        return DecodedBatch(ValidationOutcome.failure(FailureKind.DECODE_FAILURE, BODY_NOT_DECODABLE))

    if not isinstance(payload, list) or not all(isinstance(e, dict) for e in payload):
        log.warning("batch.not_an_event_array", payload_type=type(payload).__name__)
        return DecodedBatch(ValidationOutcome.failure(FailureKind.DECODE_FAILURE, BODY_NOT_DECODABLE))

    return DecodedBatch(ValidationOutcome.SUCCESS, payload)


def parse_event_time(value: str) -> datetime | None:
    """Parse an ISO 8601 timestamp; fractions beyond microseconds are truncated."""
    text = value.strip()
    if not text:
        return None
    if text[-1] in "zZ":
        text = text[:-1] + "+00:00"
    text = _FRACTION.sub(r"\1", text)
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def _describe(event: RawEvent, index: int) -> str:
    event_id = event.get("id")
    if isinstance(event_id, str) and event_id.strip():
        return f"event '{event_id}' (index {index})"
    return f"the event at index {index}"


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def validate_event(event: RawEvent, index: int) -> ValidationOutcome:
    """Check one event; the message names the offending property and event."""
    where = _describe(event, index)

    def invalid(message: str) -> ValidationOutcome:
        return ValidationOutcome.failure(FailureKind.SCHEMA_INVALID, message)

    for name in REQUIRED_STRINGS:
        value = event.get(name)
        if _is_blank(value):
            return invalid(f"Required property '{name}' was not set on {where}.")
        if not isinstance(value, str):
            return invalid(f"Property '{name}' must be a string on {where}.")

    event_time = event.get("eventTime")
    if _is_blank(event_time):
        return invalid(f"Required property 'eventTime' was not set on {where}.")
    if not isinstance(event_time, str) or parse_event_time(event_time) is None:
        return invalid(f"The eventTime property was not a valid date/time on {where}.")

    for name in OPTIONAL_STRINGS:
        value = event.get(name)
        if value is not None and not isinstance(value, str):
            return invalid(f"Property '{name}' must be a string on {where}.")

    metadata_version = event.get("metadataVersion")
    if metadata_version is not None and metadata_version != SUPPORTED_METADATA_VERSION:
        return invalid(
            f"Property 'metadataVersion' was found to be set to '{metadata_version}', "
            f"but was expected to either be null or be set to {SUPPORTED_METADATA_VERSION} on {where}."
        )

    topic = event.get("topic")
    if not _is_blank(topic):
        return invalid(
            f"Property 'topic' was found to be set to '{topic}', "
            f"but was expected to either be null/empty on {where}."
        )

    return ValidationOutcome.SUCCESS


def validate_events(events: Sequence[RawEvent]) -> ValidationOutcome:
    """Validate events in batch order, stopping at the first invalid one."""
    for index, event in enumerate(events):
        outcome = validate_event(event, index)
        if not outcome.ok:
            log.error("event.invalid", index=index, reason=outcome.message)
            return outcome
    return ValidationOutcome.SUCCESS
