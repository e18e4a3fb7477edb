"""
Inbound acceptance gate for Event Grid requests.

A request is classified first. Validation handshakes only need a
validation code; notifications go through credential, size and schema
checks in that order. The first failing check decides the rejection and
nothing after it runs. Only a fully accepted request is forwarded, and it
is forwarded exactly once.
"""
from dataclasses import dataclass, field
from typing import Awaitable, Callable, List, Tuple, TypeVar

import structlog
from starlette.datastructures import Headers

from ..event_models import EventGridEvent
from ..topics import Topic
from .classifier import RequestKind, classify, query_value
from .credentials import CredentialValidator
from .outcome import (
    REQUEST_NOT_SUPPORTED,
    VALIDATION_CODE_MISSING,
    FailureKind,
    ValidationOutcome,
)
from .schema import decode_batch, validate_events
from .size import SizeValidator

log = structlog.get_logger()

T = TypeVar("T")


@dataclass(frozen=True)
class RequestDescriptor:
    """Everything the gate needs from one HTTP request, captured once."""

    method: str
    path: str
    query: Tuple[Tuple[str, str], ...] = ()
    headers: Headers = field(default_factory=lambda: Headers(raw=[]))
    body: bytes = b""
    port: int | None = None
    topic: Topic | None = None


@dataclass(frozen=True)
class PipelineResult:
    outcome: ValidationOutcome
    kind: RequestKind
    events: List[EventGridEvent] = field(default_factory=list)
    validation_id: str | None = None

    @property
    def ok(self) -> bool:
        return self.outcome.ok


def check_handshake(query) -> Tuple[ValidationOutcome, str | None]:
    """The validation code must be present and non-blank."""
    code = query_value(query, "id")
    if code is None or not code.strip():
        return ValidationOutcome.failure(FailureKind.HANDSHAKE_MISSING, VALIDATION_CODE_MISSING), None
    return ValidationOutcome.SUCCESS, code


class ValidationPipeline:
    """
    Sequences the validators for one request.

    Holds no per-request state, so one instance serves all requests
    concurrently and evaluating the same request twice gives the same result.
    """

    def __init__(
        self,
        credentials: CredentialValidator | None = None,
        sizes: SizeValidator | None = None,
    ):
        self.credentials = credentials or CredentialValidator()
        self.sizes = sizes or SizeValidator()

    def evaluate(self, request: RequestDescriptor) -> PipelineResult:
        kind = classify(request.method, request.path, request.query, request.headers)
        log.debug("request.classified", kind=kind.value, method=request.method, path=request.path)

        if kind is RequestKind.VALIDATION_HANDSHAKE:
            return self._evaluate_handshake(request)
        if kind is RequestKind.NOTIFICATION:
            return self._evaluate_notification(request)
        return PipelineResult(
            ValidationOutcome.failure(FailureKind.UNSUPPORTED, REQUEST_NOT_SUPPORTED),
            kind,
        )

    def _evaluate_handshake(self, request: RequestDescriptor) -> PipelineResult:
        outcome, code = check_handshake(request.query)
        return PipelineResult(outcome, RequestKind.VALIDATION_HANDSHAKE, validation_id=code)

    def _evaluate_notification(self, request: RequestDescriptor) -> PipelineResult:
        kind = RequestKind.NOTIFICATION

        topic = request.topic
        if topic is None:
            return PipelineResult(
                ValidationOutcome.failure(
                    FailureKind.TOPIC_NOT_FOUND,
                    f"No topic is configured for port {request.port}.",
                ),
                kind,
            )

        outcome = self.credentials.validate(topic, request.headers)
        if not outcome.ok:
            return PipelineResult(outcome, kind)

        outcome = self.sizes.check_payload(request.body)
        if not outcome.ok:
            return PipelineResult(outcome, kind)

        batch = decode_batch(request.body)
        if not batch.outcome.ok:
            return PipelineResult(batch.outcome, kind)

        outcome = self.sizes.check_events(batch.events)
        if not outcome.ok:
            return PipelineResult(outcome, kind)

        outcome = validate_events(batch.events)
        if not outcome.ok:
            return PipelineResult(outcome, kind)

        events = [EventGridEvent.model_validate(raw) for raw in batch.events]
        return PipelineResult(ValidationOutcome.SUCCESS, kind, events=events)

    async def run(
        self,
        request: RequestDescriptor,
        forward: Callable[[RequestDescriptor, PipelineResult], Awaitable[T]],
        reject: Callable[[RequestDescriptor, PipelineResult], Awaitable[T]],
    ) -> T:
        """Evaluate the request, then call exactly one of forward or reject."""
        result = self.evaluate(request)
        if result.ok:
            log.info(
                "request.accepted",
                kind=result.kind.value,
                topic=request.topic.name if request.topic else None,
                events=len(result.events),
            )
            return await forward(request, result)

        log.warning(
            "request.rejected",
            kind=result.kind.value,
            reason=result.outcome.kind.value,
            status_code=result.outcome.status_code,
            message=result.outcome.message,
        )
        return await reject(request, result)
