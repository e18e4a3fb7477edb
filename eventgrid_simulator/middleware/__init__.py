from .correlation import CorrelationIdMiddleware, get_correlation_id
from .error_handler import ErrorHandlerMiddleware
from .gate import EventGridMiddleware
from .metrics import MetricsMiddleware

__all__ = [
    "CorrelationIdMiddleware",
    "ErrorHandlerMiddleware",
    "EventGridMiddleware",
    "MetricsMiddleware",
    "get_correlation_id",
]
