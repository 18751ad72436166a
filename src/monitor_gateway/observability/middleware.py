"""
monitor_gateway.observability.middleware

Request-scoped logging context for the gateway's HTTP surface.

Responsibilities:
- Accept or mint an `x-request-id` and echo it on the response.
- Bind request metadata into structlog contextvars for the request's lifetime.
- Emit one completion (or failure) event per request with its latency.
"""

from __future__ import annotations

import time
import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

log = structlog.get_logger(__name__)

REQUEST_ID_HEADER = "x-request-id"


class RequestContextMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        request.state.request_id = request_id

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id, method=request.method, path=request.url.path
        )
        started = time.perf_counter()

        def elapsed_ms() -> float:
            return round((time.perf_counter() - started) * 1000, 2)

        try:
            response: Response = await call_next(request)
        except Exception:
            log.exception("request_crashed", duration_ms=elapsed_ms())
            raise
        else:
            log.info("request_complete", status=response.status_code, duration_ms=elapsed_ms())
        finally:
            # Queries run concurrently on one loop; fields must not outlive their request.
            structlog.contextvars.clear_contextvars()

        response.headers[REQUEST_ID_HEADER] = request_id
        return response


# --- Module Notes -----------------------------------------------------------
# `auth.deps.get_user` binds `customer_id` / `user_id` into the same context once the
# caller is authenticated, so backend-call logs carry the customer.
