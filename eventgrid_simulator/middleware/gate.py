"""Event Grid acceptance gate: every request passes the validation pipeline first."""
from fastapi import Request
from starlette.datastructures import Headers
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse, Response
import structlog

from ..metrics import Metrics
from ..topics import TopicRegistry
from ..validation import PipelineResult, RequestDescriptor, RequestKind, ValidationPipeline

log = structlog.get_logger()

# Operational endpoints served on every port without Event Grid validation
EXEMPT_PATHS = ("/health", "/health/ready", "/metrics")

NOTIFICATION_ROUTE = "/api/events"
HANDSHAKE_ROUTE = "/validate"
UNSUPPORTED_ROUTE = "unsupported"


def route_label(kind: RequestKind) -> str:
    """Fixed metrics label per request kind, so arbitrary URLs never become new series."""
    if kind is RequestKind.NOTIFICATION:
        return NOTIFICATION_ROUTE
    if kind is RequestKind.VALIDATION_HANDSHAKE:
        return HANDSHAKE_ROUTE
    return UNSUPPORTED_ROUTE


def destination_port(request: Request) -> int | None:
    """Port the request arrived on, falling back to the Host header."""
    server = request.scope.get("server")
    if server and server[1] is not None:
        return int(server[1])
    return request.url.port


def error_response(result: PipelineResult) -> JSONResponse:
    return JSONResponse(status_code=result.outcome.status_code, content=result.outcome.to_error_body())


class EventGridMiddleware(BaseHTTPMiddleware):
    """Runs the validation pipeline and only lets accepted requests reach the routes."""

    def __init__(self, app, topics: TopicRegistry, pipeline: ValidationPipeline, metrics: Metrics | None = None):
        super().__init__(app)
        self.topics = topics
        self.pipeline = pipeline
        self.metrics = metrics

    async def describe(self, request: Request) -> RequestDescriptor:
        port = destination_port(request)
        return RequestDescriptor(
            method=request.method,
            path=request.url.path,
            query=tuple(request.query_params.multi_items()),
            headers=Headers(raw=request.scope["headers"]),
            body=await request.body(),
            port=port,
            topic=self.topics.for_port(port),
        )

    async def dispatch(self, request: Request, call_next):
        if request.url.path in EXEMPT_PATHS or request.url.path.startswith("/metrics/"):
            return await call_next(request)

        descriptor = await self.describe(request)

        async def forward(descriptor: RequestDescriptor, result: PipelineResult) -> Response:
            request.state.eventgrid = result
            request.state.route_label = route_label(result.kind)
            request.state.topic = descriptor.topic
            # Routes match case-sensitively; the gate does not.
            if result.kind is RequestKind.NOTIFICATION:
                request.scope["path"] = NOTIFICATION_ROUTE
            else:
                request.scope["path"] = HANDSHAKE_ROUTE
            if self.metrics is not None and result.kind is RequestKind.NOTIFICATION:
                self.metrics.record_payload(descriptor.topic.name, len(descriptor.body))
                for event in result.events:
                    self.metrics.record_event_accepted(descriptor.topic.name, event.event_type)
            return await call_next(request)

        async def reject(descriptor: RequestDescriptor, result: PipelineResult) -> Response:
            request.state.route_label = route_label(result.kind)
            if self.metrics is not None:
                self.metrics.record_rejection(result.outcome.kind.value)
            return error_response(result)

        return await self.pipeline.run(descriptor, forward, reject)
