"""
Prometheus metrics for the Event Grid simulator.
"""
from prometheus_client import Counter, Histogram, Gauge, Info, CollectorRegistry


class Metrics:
    """
    Centralized metrics for the simulator.

    Each instance owns its registry so several apps can live in one process.
    """

    def __init__(self, service_name: str = "eventgrid-simulator", version: str = "0.1.0", registry=None):
        self.service_name = service_name
        self.version = version
        self.registry = registry or CollectorRegistry()

        # HTTP Metrics
        self.http_requests_total = Counter(
            "http_requests_total",
            "Total HTTP requests",
            ["service", "method", "path", "status"],
            registry=self.registry,
        )

        self.http_request_duration = Histogram(
            "http_request_duration_seconds",
            "HTTP request duration in seconds",
            ["service", "method", "path"],
            registry=self.registry,
        )

        self.http_requests_active = Gauge(
            "http_requests_active",
            "Number of active HTTP requests",
            ["service"],
            registry=self.registry,
        )
        self.http_requests_active.labels(service=service_name).set(0)

        # Application Info
        self.app_info = Info(
            "app",
            "Application information",
            registry=self.registry,
        )
        self.app_info.info({"service": service_name, "version": version})

        self.app_up = Gauge(
            "app_up",
            "Application up status (1=up, 0=down)",
            ["service", "version"],
            registry=self.registry,
        )
        self.app_up.labels(service=service_name, version=version).set(1)

        # Gate metrics
        self.requests_rejected_total = Counter(
            "eventgrid_requests_rejected_total",
            "Requests rejected by the validation gate",
            ["reason"],
            registry=self.registry,
        )

        self.events_accepted_total = Counter(
            "eventgrid_events_accepted_total",
            "Events accepted for delivery",
            ["topic", "event_type"],
            registry=self.registry,
        )

        self.payload_size_bytes = Histogram(
            "eventgrid_payload_size_bytes",
            "Accepted notification payload size in bytes",
            ["topic"],
            buckets=(1024, 16384, 65536, 262144, 1048576, 1536000),
            registry=self.registry,
        )

    def record_rejection(self, reason: str):
        """Record a request rejected by the gate."""
        self.requests_rejected_total.labels(reason=reason).inc()

    def record_event_accepted(self, topic: str, event_type: str):
        """Record one accepted event."""
        self.events_accepted_total.labels(topic=topic, event_type=event_type).inc()

    def record_payload(self, topic: str, size_bytes: int):
        """Record the size of an accepted notification body."""
        self.payload_size_bytes.labels(topic=topic).observe(size_bytes)
