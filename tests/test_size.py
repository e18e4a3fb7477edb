"""Tests for payload and per-event size limits."""
from eventgrid_simulator.validation import size as size_checks
from eventgrid_simulator.validation.outcome import EVENT_TOO_LARGE, PAYLOAD_TOO_LARGE, FailureKind
from eventgrid_simulator.validation.size import (
    MAX_EVENT_BYTES,
    MAX_PAYLOAD_BYTES,
    SizeValidator,
    canonical_size,
)
from .factories import make_event


def event_of_size(size: int, **overrides) -> dict:
    event = make_event(data="", **overrides)
    event["data"] = "x" * (size - canonical_size(event))
    assert canonical_size(event) == size
    return event


def test_default_limits():
    assert MAX_PAYLOAD_BYTES == 1536000
    assert MAX_EVENT_BYTES == 66560


def test_canonical_size_is_compact_json():
    assert canonical_size({"a": 1, "b": [1, 2]}) == len(b'{"a":1,"b":[1,2]}')


def test_canonical_size_counts_bytes_not_characters():
    assert canonical_size({"a": "é"}) == len('{"a":"é"}'.encode("utf-8"))


def test_payload_at_limit_passes():
    assert SizeValidator().check_payload(b" " * MAX_PAYLOAD_BYTES).ok


def test_payload_over_limit_fails():
    outcome = SizeValidator().check_payload(b" " * (MAX_PAYLOAD_BYTES + 1))
    assert outcome.kind is FailureKind.PAYLOAD_TOO_LARGE
    assert outcome.status_code == 413
    assert outcome.message == PAYLOAD_TOO_LARGE


def test_event_at_limit_passes():
    assert SizeValidator().check_events([event_of_size(MAX_EVENT_BYTES)]).ok


def test_event_over_limit_fails():
    events = [make_event(id="small"), event_of_size(MAX_EVENT_BYTES + 1, id="big")]
    outcome = SizeValidator().check_events(events)
    assert outcome.kind is FailureKind.EVENT_TOO_LARGE
    assert outcome.status_code == 413
    assert outcome.message == EVENT_TOO_LARGE


def test_first_oversized_event_decides_outcome():
    # The second event cannot be serialized; measuring it would raise.
    events = [event_of_size(MAX_EVENT_BYTES + 1, id="first"), {"id": "second", "data": object()}]
    outcome = SizeValidator().check_events(events)
    assert outcome.kind is FailureKind.EVENT_TOO_LARGE
    assert outcome.message == EVENT_TOO_LARGE


def test_events_after_first_offender_are_not_measured(monkeypatch):
    measured = []

    def recording_size(event):
        measured.append(event["id"])
        return canonical_size(event)

    monkeypatch.setattr(size_checks, "canonical_size", recording_size)
    events = [
        make_event(id="ok"),
        event_of_size(MAX_EVENT_BYTES + 1, id="first"),
        event_of_size(MAX_EVENT_BYTES + 2, id="second"),
    ]
    assert SizeValidator().check_events(events).kind is FailureKind.EVENT_TOO_LARGE
    assert measured == ["ok", "first"]


def test_custom_limits():
    validator = SizeValidator(max_payload_bytes=10, max_event_bytes=10)
    assert not validator.check_payload(b"x" * 11).ok
    assert not validator.check_events([{"key": "long value"}]).ok
    assert validator.check_events([{"k": 1}]).ok
