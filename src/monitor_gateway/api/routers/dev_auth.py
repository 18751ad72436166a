from __future__ import annotations

from datetime import timedelta

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from starlette.status import HTTP_404_NOT_FOUND

from monitor_gateway.auth.jwt import JwtConfig, issue_token
from monitor_gateway.auth.models import User
from monitor_gateway.settings import Settings, get_settings

router = APIRouter(prefix="/v1/dev", tags=["dev"])


class DevTokenRequest(BaseModel):
    customer_id: str = Field(min_length=1, max_length=128)
    # Defaults to a per-customer dev user.
    subject: str | None = Field(default=None, max_length=256)
    email: str = ""
    admin: bool = False
    ttl_minutes: int = Field(default=60, ge=1, le=24 * 60)


class DevTokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    customer_id: str
    expires_in: int


@router.post("/token", response_model=DevTokenResponse)
async def mint_dev_token(
    body: DevTokenRequest,
    settings: Settings = Depends(get_settings),
) -> DevTokenResponse:
    """
    Local convenience only: hands out a gateway token for any customer.
    """

    if settings.env == "prod":
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Not found")

    user = User(
        id=body.subject or f"dev-{body.customer_id}",
        customer_id=body.customer_id,
        email=body.email,
        admin=body.admin,
    )
    ttl = timedelta(minutes=body.ttl_minutes)
    return DevTokenResponse(
        access_token=issue_token(cfg=JwtConfig.from_settings(settings), user=user, ttl=ttl),
        customer_id=user.customer_id,
        expires_in=int(ttl.total_seconds()),
    )
