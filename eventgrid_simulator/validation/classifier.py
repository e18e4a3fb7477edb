"""Decides what kind of Event Grid request an inbound HTTP request is."""
import re
from enum import Enum
from typing import Iterable, Tuple
from starlette.datastructures import Headers

QueryItems = Iterable[Tuple[str, str]]

NOTIFICATION_PATHS = ("/api/events", "/")
VALIDATION_PATH = "/validate"
JSON_MEDIA_TYPE = "application/json"

_HEX = "[0-9a-fA-F]"
_DASHED = f"{_HEX}{{8}}-{_HEX}{{4}}-{_HEX}{{4}}-{_HEX}{{4}}-{_HEX}{{12}}"
_UUID_FORMS = re.compile(
    rf"^(?:{_HEX}{{32}}|{_DASHED}|\{{{_DASHED}\}}|\({_DASHED}\))$"
)


class RequestKind(str, Enum):
    NOTIFICATION = "notification"
    VALIDATION_HANDSHAKE = "validation_handshake"
    UNSUPPORTED = "unsupported"


def query_value(query: QueryItems, name: str) -> str | None:
    """First value of a query parameter, matching the key case-insensitively."""
    wanted = name.lower()
    for key, value in query:
        if key.lower() == wanted:
            return value
    return None


def is_uuid(value: str | None) -> bool:
    """
    Accepts 32 hex digits, the dashed 8-4-4-4-12 form, and the dashed form
    wrapped in braces or parentheses.
    """
    if value is None:
        return False
    return _UUID_FORMS.match(value.strip()) is not None


def _has_json_content_type(headers: Headers) -> bool:
    return any(
        value.strip() and JSON_MEDIA_TYPE in value.lower()
        for value in headers.getlist("content-type")
    )


def is_notification(method: str, path: str, headers: Headers) -> bool:
    return (
        method.upper() == "POST"
        and _has_json_content_type(headers)
        and path.lower() in NOTIFICATION_PATHS
    )


def is_validation_handshake(method: str, path: str, query: QueryItems) -> bool:
    return (
        method.upper() == "GET"
        and path.lower() == VALIDATION_PATH
        and is_uuid(query_value(query, "id"))
    )


def classify(method: str, path: str, query: QueryItems, headers: Headers) -> RequestKind:
    query = tuple(query)
    if is_notification(method, path, headers):
        return RequestKind.NOTIFICATION
    if is_validation_handshake(method, path, query):
        return RequestKind.VALIDATION_HANDSHAKE
    return RequestKind.UNSUPPORTED
