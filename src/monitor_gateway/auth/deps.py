"""
monitor_gateway.auth.deps

FastAPI dependency functions for authentication.

Responsibilities:
- Convert a bearer token into a typed `User`.
- Bind the caller's customer id into the logging context.
"""

from __future__ import annotations

import structlog
from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from starlette.status import HTTP_401_UNAUTHORIZED

from monitor_gateway.auth.jwt import (
    JwtConfig,
    JwtValidationError,
    decode_and_validate,
    user_from_claims,
)
from monitor_gateway.auth.models import User
from monitor_gateway.settings import Settings, get_settings

_bearer = HTTPBearer(auto_error=False)


def get_user(
    creds: HTTPAuthorizationCredentials | None = Depends(_bearer),
    settings: Settings = Depends(get_settings),
) -> User:
    if creds is None or not creds.credentials:
        raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail="Missing bearer token")

    try:
        claims = decode_and_validate(cfg=JwtConfig.from_settings(settings), token=creds.credentials)
        user = user_from_claims(claims)
    except JwtValidationError as e:
        raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail=f"Invalid token: {e}") from e

    structlog.contextvars.bind_contextvars(customer_id=user.customer_id, user_id=user.id)
    return user


# --- Module Notes -----------------------------------------------------------
# Every gateway route requires a user: all backends are customer scoped.
