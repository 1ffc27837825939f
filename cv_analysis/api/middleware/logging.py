"""
Request/response logging middleware
"""
import time
import uuid

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from cv_analysis.utils.logger import bind_request_id, get_logger, reset_request_id

logger = get_logger(__name__)

# Probes are polled constantly; log them at debug only
QUIET_PATH_SUFFIXES = ("/health", "/ready")


class LoggingMiddleware(BaseHTTPMiddleware):
    """Log every request with a correlation id and its duration"""

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        request.state.request_id = request_id
        token = bind_request_id(request_id)

        path = request.url.path
        log = logger.debug if path.endswith(QUIET_PATH_SUFFIXES) else logger.info

        start_time = time.perf_counter()
        try:
            log(f"Request: {request.method} {path}", extra={
                "method": request.method,
                "path": path,
                "client_host": request.client.host if request.client else None
            })

            response = await call_next(request)

            duration = time.perf_counter() - start_time
            log(f"Response: {response.status_code} in {duration:.3f}s", extra={
                "method": request.method,
                "path": path,
                "status_code": response.status_code,
                "duration_seconds": round(duration, 4)
            })
        finally:
            reset_request_id(token)

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Process-Time"] = f"{duration:.4f}"
        return response
