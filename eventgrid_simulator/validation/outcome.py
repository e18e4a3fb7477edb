"""Result values shared by every validation stage."""
from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar


class FailureKind(str, Enum):
    UNSUPPORTED = "unsupported"
    HANDSHAKE_MISSING = "handshake_missing"
    TOPIC_NOT_FOUND = "topic_not_found"
    CREDENTIAL_INVALID = "credential_invalid"
    PAYLOAD_TOO_LARGE = "payload_too_large"
    EVENT_TOO_LARGE = "event_too_large"
    DECODE_FAILURE = "decode_failure"
    SCHEMA_INVALID = "schema_invalid"


# status code and error envelope code per kind
_STATUS = {
    FailureKind.UNSUPPORTED: (400, "BadRequest"),
    FailureKind.HANDSHAKE_MISSING: (400, "BadRequest"),
    FailureKind.TOPIC_NOT_FOUND: (404, "NotFound"),
    FailureKind.CREDENTIAL_INVALID: (401, "Unauthorized"),
    FailureKind.PAYLOAD_TOO_LARGE: (413, "RequestEntityTooLarge"),
    FailureKind.EVENT_TOO_LARGE: (413, "RequestEntityTooLarge"),
    FailureKind.DECODE_FAILURE: (400, "BadRequest"),
    FailureKind.SCHEMA_INVALID: (400, "BadRequest"),
}

REQUEST_NOT_SUPPORTED = "Request not supported."
VALIDATION_CODE_MISSING = "The request did not contain a validation code."
CREDENTIAL_INVALID = "The request did not contain a valid aeg-sas-key or aeg-sas-token."
PAYLOAD_TOO_LARGE = "Payload is larger than the allowed maximum."
EVENT_TOO_LARGE = "Event is larger than the allowed maximum."
BODY_NOT_DECODABLE = "The request body could not be decoded as an array of events."


@dataclass(frozen=True)
class ValidationOutcome:
    """Either success, or a failure carrying its kind and response message."""

    kind: FailureKind | None = None
    message: str = ""

    SUCCESS: ClassVar["ValidationOutcome"]

    @classmethod
    def failure(cls, kind: FailureKind, message: str) -> "ValidationOutcome":
        return cls(kind=kind, message=message)

    @property
    def ok(self) -> bool:
        return self.kind is None

    @property
    def status_code(self) -> int:
        return 200 if self.kind is None else _STATUS[self.kind][0]

    @property
    def error_code(self) -> str | None:
        return None if self.kind is None else _STATUS[self.kind][1]

    def to_error_body(self) -> dict[str, Any]:
        return {"error": {"code": self.error_code, "message": self.message}}


ValidationOutcome.SUCCESS = ValidationOutcome()
