"""
Request logging middleware.
"""

import time
import uuid
from collections.abc import Awaitable, Callable

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from stockmaster.config import get_logger, get_settings

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Log each request with its timing.

    The request id (taken from X-Request-ID when the gateway sends one) and
    the acting user are bound to structlog contextvars for the duration of
    the request, so lifecycle and ledger log lines can be traced back to it.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:12]
        request.state.request_id = request_id
        user_id = request.headers.get(get_settings().api.user_header)

        with structlog.contextvars.bound_contextvars(request_id=request_id, user_id=user_id):
            start = time.perf_counter()
            try:
                response = await call_next(request)
            except Exception as e:
                logger.error(
                    "request_failed",
                    method=request.method,
                    path=request.url.path,
                    error=str(e),
                    duration_ms=round((time.perf_counter() - start) * 1000, 2),
                )
                raise

            duration_ms = (time.perf_counter() - start) * 1000
            log = logger.warning if response.status_code >= 500 else logger.info
            log(
                "request_completed",
                method=request.method,
                path=request.url.path,
                status=response.status_code,
                duration_ms=round(duration_ms, 2),
            )

        response.headers[REQUEST_ID_HEADER] = request_id
        response.headers["X-Response-Time"] = f"{duration_ms:.2f}ms"
        return response
