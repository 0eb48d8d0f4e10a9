"""Request logging middleware."""
import time
import uuid
from collections.abc import Awaitable, Callable

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

logger = structlog.get_logger()

REQUEST_ID_HEADER = "X-Request-ID"

QUIET_PATHS = frozenset({
    "/api/v1/health/live",
    "/api/v1/health/ready",
})


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Binds a request id and logs one structured line per request.

    The id is taken from the incoming ``X-Request-ID`` header when present,
    bound into structlog context for every event logged while the request
    runs (including sync and enrichment events), and echoed on the response.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        with structlog.contextvars.bound_contextvars(request_id=request_id):
            if request.url.path in QUIET_PATHS:
                response = await call_next(request)
                response.headers[REQUEST_ID_HEADER] = request_id
                return response

            start = time.perf_counter()
            try:
                response = await call_next(request)
            except Exception:
                logger.exception(
                    "http_request_failed",
                    method=request.method,
                    path=request.url.path,
                    duration_ms=round((time.perf_counter() - start) * 1000, 2),
                )
                raise

            logger.info(
                "http_request",
                method=request.method,
                path=request.url.path,
                query=request.url.query or None,
                status=response.status_code,
                duration_ms=round((time.perf_counter() - start) * 1000, 2),
            )
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
