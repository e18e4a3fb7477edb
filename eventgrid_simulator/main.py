"""
Event Grid Simulator - local stand-in for an Event Grid topic endpoint.

Features:
- Per-port topics with optional aeg-sas-key / aeg-sas-token auth
- Payload, event size and event schema validation with Event Grid errors
- Subscription validation handshake
- Structured logging with correlation IDs
- Prometheus metrics
- Health checks (liveness and readiness)
"""
from fastapi import FastAPI
from fastapi.responses import JSONResponse
from prometheus_client import make_asgi_app
from .config import Settings, get_settings
from .logging import SERVICE_NAME, setup_logging, get_logger
from .api.router import router
from .health import HealthChecker
from .metrics import Metrics
from .middleware import (
    CorrelationIdMiddleware,
    ErrorHandlerMiddleware,
    EventGridMiddleware,
    MetricsMiddleware,
)
from .services.delivery import DeliveryService
from .topics import TopicRegistry
from .validation import CredentialValidator, SizeValidator, ValidationPipeline

VERSION = "0.1.0"

logger = get_logger()


def create_app(settings: Settings | None = None, delivery: DeliveryService | None = None) -> FastAPI:
    """Build the ASGI app serving every configured topic port."""
    settings = settings or get_settings()
    setup_logging(json_output=settings.LOG_JSON, level=settings.LOG_LEVEL)

    topics = TopicRegistry.from_settings(settings.TOPICS)
    pipeline = ValidationPipeline(
        credentials=CredentialValidator(),
        sizes=SizeValidator(
            max_payload_bytes=settings.MAX_PAYLOAD_BYTES,
            max_event_bytes=settings.MAX_EVENT_BYTES,
        ),
    )
    metrics = Metrics(service_name=SERVICE_NAME, version=VERSION)
    delivery = delivery or DeliveryService()
    health_checker = HealthChecker(topics, delivery, service_name=SERVICE_NAME, version=VERSION)

    app = FastAPI(
        title="Event Grid Simulator",
        version=VERSION,
        description="Validates and accepts Event Grid notifications on per-topic ports",
    )
    app.state.settings = settings
    app.state.topics = topics
    app.state.pipeline = pipeline
    app.state.metrics = metrics
    app.state.delivery = delivery

    # Last added runs first: correlation -> errors -> metrics -> gate
    app.add_middleware(EventGridMiddleware, topics=topics, pipeline=pipeline, metrics=metrics)
    app.add_middleware(MetricsMiddleware, metrics=metrics)
    app.add_middleware(ErrorHandlerMiddleware)
    app.add_middleware(CorrelationIdMiddleware)

    app.include_router(router)
    app.mount("/metrics", make_asgi_app(registry=metrics.registry))

    @app.get("/health")
    async def health():
        """Liveness probe."""
        logger.debug("health_check_liveness")
        return health_checker.liveness()

    @app.get("/health/ready")
    async def health_ready():
        """
        Readiness probe.

        Returns:
            200: Service is ready to handle traffic
            503: Service is not ready
        """
        logger.debug("health_check_readiness")
        result = await health_checker.readiness()
        status_code = 200 if result["status"] == "ready" else 503
        return JSONResponse(result, status_code=status_code)

    @app.on_event("startup")
    async def startup_event():
        logger.info(
            "service_starting",
            version=VERSION,
            env=settings.ENV,
            ports=topics.ports,
        )

    @app.on_event("shutdown")
    async def shutdown_event():
        logger.info("service_stopping")
        metrics.app_up.labels(service=SERVICE_NAME, version=VERSION).set(0)

    return app


app = create_app()
