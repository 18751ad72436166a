"""
monitor_gateway.backends.http

Shared HTTP client boundary for the JSON backends.

Responsibilities:
- Attach a short-lived per-user bearer token to every backend call.
- Translate transport/status/decoding failures into `BackendError`.
- Percent-encode ids placed into request paths.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Any
from urllib.parse import quote

import httpx

from monitor_gateway.auth.jwt import JwtConfig, issue_token
from monitor_gateway.auth.models import User
from monitor_gateway.errors import BackendError, CheckInputError


def path_segment(value: str) -> str:
    """
    Encode `value` as exactly one path segment.
    Reserved characters (including `/`) are escaped, and dot segments are refused
    because the URL parser would collapse them into the parent path.
    """

    if value in ("", ".", ".."):
        raise CheckInputError(f"invalid id {value!r}")
    return quote(value, safe="")


class ServiceClient:
    """
    Base for check-management, notification and state-history clients.
    The `httpx.AsyncClient` is long-lived and owned by the app, not by this object.
    """

    service = "backend"

    def __init__(
        self,
        *,
        http: httpx.AsyncClient,
        jwt: JwtConfig,
        token_ttl: timedelta = timedelta(minutes=5),
    ) -> None:
        self._http = http
        self._jwt = jwt
        self._token_ttl = token_ttl

    def _authz(self, user: User) -> dict[str, str]:
        token = issue_token(cfg=self._jwt, user=user, ttl=self._token_ttl)
        return {"Authorization": f"Bearer {token}"}

    async def _call(self, method: str, path: str, *, user: User, **kwargs: Any) -> Any:
        try:
            r = await self._http.request(method, path, headers=self._authz(user), **kwargs)
            r.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise BackendError(
                self.service, f"{method} {path} returned {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise BackendError(self.service, f"{method} {path} failed: {e!r}") from e
        except httpx.InvalidURL as e:
            raise BackendError(self.service, f"{method} has an invalid url: {e}") from e

        if not r.content:
            return None
        try:
            return r.json()
        except ValueError as e:
            raise BackendError(self.service, f"{method} {path} returned invalid JSON") from e


def build_http_client(*, base_url: str, timeout: float) -> httpx.AsyncClient:
    return httpx.AsyncClient(base_url=base_url, timeout=httpx.Timeout(timeout))


# --- Module Notes -----------------------------------------------------------
# Retries are deliberately absent: callers decide whether a failure is fatal or degradable.
