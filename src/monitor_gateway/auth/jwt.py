"""
monitor_gateway.auth.jwt

JWT issuing and validation helpers.

Responsibilities:
- Issue short-lived user tokens (dev convenience and backend calls).
- Decode and validate JWTs with strict claim requirements.
- Map validated claims onto a `User`.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt
from jwt import InvalidTokenError

from monitor_gateway.auth.models import User
from monitor_gateway.settings import Settings


@dataclass(frozen=True, slots=True)
class JwtConfig:
    alg: str
    issuer: str
    audience: str
    secret: str

    @classmethod
    def from_settings(cls, settings: Settings) -> JwtConfig:
        return cls(
            alg=settings.jwt_alg,
            issuer=settings.jwt_issuer,
            audience=settings.jwt_audience,
            secret=settings.jwt_secret,
        )


class JwtValidationError(Exception):
    pass


def issue_token(
    *,
    cfg: JwtConfig,
    user: User,
    ttl: timedelta = timedelta(hours=1),
) -> str:
    now = datetime.now(tz=UTC)
    payload: dict[str, Any] = {
        "iss": cfg.issuer,
        "aud": cfg.audience,
        **user.claims(),
        "iat": int(now.timestamp()),
        "exp": int((now + ttl).timestamp()),
    }
    return jwt.encode(payload, cfg.secret, algorithm=cfg.alg)


def decode_and_validate(*, cfg: JwtConfig, token: str) -> dict[str, Any]:
    try:
        return jwt.decode(
            token,
            cfg.secret,
            algorithms=[cfg.alg],
            issuer=cfg.issuer,
            audience=cfg.audience,
            options={
                "require": ["exp", "iat", "iss", "aud", "sub", "customer_id"],
            },
        )
    except InvalidTokenError as e:
        raise JwtValidationError(str(e)) from e


def user_from_claims(claims: dict[str, Any]) -> User:
    subject = str(claims.get("sub", "")).strip()
    customer_id = str(claims.get("customer_id", "")).strip()
    if not subject:
        raise JwtValidationError("token subject is empty")
    if not customer_id:
        raise JwtValidationError("token customer_id is empty")
    return User(
        id=subject,
        customer_id=customer_id,
        email=str(claims.get("email", "") or ""),
        admin=bool(claims.get("admin", False)),
    )


# --- Module Notes -----------------------------------------------------------
# Token issuing is used by:
# - `api/routers/dev_auth.py` (dev convenience)
# - `backends/http.py` (per-user tokens forwarded to check/notification/history services)
