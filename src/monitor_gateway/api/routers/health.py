"""
monitor_gateway.api.routers.health

Health and readiness endpoints.

Responsibilities:
- Provide liveness probe (`/healthz`).
- Provide readiness probe (`/readyz`) gated on the service directory.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from starlette.status import HTTP_503_SERVICE_UNAVAILABLE

from monitor_gateway.api.container import Gateway
from monitor_gateway.api.deps import gateway_dep

router = APIRouter()


@router.get("/healthz")
async def healthz() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/readyz", response_model=None)
async def readyz(gateway: Gateway = Depends(gateway_dep)) -> dict[str, str] | JSONResponse:
    # Checks and results degrade per call; without the directory no test check can run.
    if not await gateway.directory.ping():
        return JSONResponse(
            status_code=HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "unavailable", "dependency": "service-directory"},
        )
    return {"status": "ready"}
