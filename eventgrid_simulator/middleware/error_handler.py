"""Turns unhandled exceptions into Event Grid style error responses."""
from fastapi import Request, HTTPException
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
import structlog
from .correlation import get_correlation_id

log = structlog.get_logger()


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Last line of defence: nothing escapes as a bare 500 without a body."""

    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except HTTPException as exc:
            log.warning(
                "http.exception",
                status_code=exc.status_code,
                detail=exc.detail,
                path=request.url.path,
            )
            return JSONResponse(
                status_code=exc.status_code,
                content={"error": {"code": exc.__class__.__name__, "message": str(exc.detail)}},
            )
        except Exception as exc:
            correlation_id = get_correlation_id()
            log.error(
                "unhandled.exception",
                error=str(exc),
                error_type=exc.__class__.__name__,
                path=request.url.path,
                exc_info=True,
            )
            return JSONResponse(
                status_code=500,
                content={
                    "error": {
                        "code": "InternalServerError",
                        "message": "An unexpected error occurred.",
                        "correlationId": correlation_id,
                    }
                },
            )
