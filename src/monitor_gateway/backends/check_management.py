"""
monitor_gateway.backends.check_management

Client for the check-management service (the owner of check definitions).

Responsibilities:
- List, fetch, create, update and delete checks for a user.
"""

from __future__ import annotations

from typing import Any

from monitor_gateway.auth.models import User
from monitor_gateway.backends.http import ServiceClient, path_segment
from monitor_gateway.errors import BackendError
from monitor_gateway.schema.checks import Check


class CheckManagementClient(ServiceClient):
    service = "check-management"

    async def list_checks(self, user: User) -> list[Check]:
        body = await self._call("GET", "/checks", user=user)
        return [self._check(item) for item in _items(body, "checks")]

    async def get_check(self, user: User, check_id: str) -> Check:
        body = await self._call("GET", f"/checks/{path_segment(check_id)}", user=user)
        return self._check(body)

    async def create_check(self, user: User, check: Check) -> Check:
        body = await self._call("POST", "/checks", user=user, json=check.backend_payload())
        return self._check(body)

    async def update_check(self, user: User, check: Check) -> Check:
        body = await self._call(
            "PUT", f"/checks/{path_segment(check.id)}", user=user, json=check.backend_payload()
        )
        return self._check(body)

    async def delete_check(self, user: User, check_id: str) -> None:
        await self._call("DELETE", f"/checks/{path_segment(check_id)}", user=user)

    def _check(self, raw: Any) -> Check:
        if not isinstance(raw, dict):
            raise BackendError(self.service, "expected a check object")
        try:
            return Check.model_validate(raw)
        except ValueError as e:
            raise BackendError(self.service, f"undecodable check: {e}") from e


def _items(body: Any, key: str) -> list[Any]:
    # The service answers with either a bare list or {"<key>": [...]}.
    if isinstance(body, dict):
        body = body.get(key, [])
    if body is None:
        return []
    if not isinstance(body, list):
        raise BackendError("check-management", f"expected a list of {key}")
    return body
