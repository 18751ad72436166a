"""
monitor_gateway.api.app

FastAPI app factory for the monitoring query gateway.

Responsibilities:
- Build the FastAPI application and register routers/middleware.
- Create and dispose the shared backend clients.
- Translate typed gateway failures into HTTP responses.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_500_INTERNAL_SERVER_ERROR,
    HTTP_502_BAD_GATEWAY,
    HTTP_503_SERVICE_UNAVAILABLE,
)

from monitor_gateway.api.container import Gateway, build_gateway
from monitor_gateway.api.routers.checks import router as checks_router
from monitor_gateway.api.routers.dev_auth import router as dev_auth_router
from monitor_gateway.api.routers.health import router as health_router
from monitor_gateway.api.routers.query import router as query_router
from monitor_gateway.errors import (
    BackendError,
    GatewayError,
    NoWorkersFoundError,
    PayloadDecodeError,
    QueryInputError,
    WorkerError,
)
from monitor_gateway.observability.logging import configure_logging, get_logger
from monitor_gateway.observability.middleware import RequestContextMiddleware
from monitor_gateway.settings import Settings

log = get_logger(__name__)

_STATUS_BY_ERROR: tuple[tuple[type[GatewayError], int], ...] = (
    (QueryInputError, HTTP_400_BAD_REQUEST),
    (NoWorkersFoundError, HTTP_503_SERVICE_UNAVAILABLE),
    (BackendError, HTTP_502_BAD_GATEWAY),
    (PayloadDecodeError, HTTP_502_BAD_GATEWAY),
    (WorkerError, HTTP_502_BAD_GATEWAY),
)


def create_app(*, settings: Settings, gateway: Gateway | None = None) -> FastAPI:
    configure_logging(service_name=settings.service_name, env=settings.env, level=settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        log.info("startup", env=settings.env)
        owned = gateway is None
        app.state.gateway = build_gateway(settings) if owned else gateway
        try:
            yield
        finally:
            if owned:
                await app.state.gateway.aclose()
            log.info("shutdown")

    app = FastAPI(
        title="Monitoring Query Gateway",
        version="0.1.0",
        docs_url="/docs",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.add_middleware(RequestContextMiddleware)
    app.include_router(health_router, tags=["health"])
    app.include_router(dev_auth_router)
    app.include_router(query_router)
    app.include_router(checks_router)
    app.add_exception_handler(GatewayError, _gateway_error_handler)

    return app


async def _gateway_error_handler(request: Request, exc: Exception) -> JSONResponse:
    status = HTTP_500_INTERNAL_SERVER_ERROR
    for error_type, code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            status = code
            break
    log.warning("request_failed", status=status, error=str(exc), kind=type(exc).__name__)
    return JSONResponse(status_code=status, content={"detail": str(exc)})


# --- Module Notes -----------------------------------------------------------
# App composition stays here; aggregation logic stays in services/query layers.
