from __future__ import annotations

from datetime import datetime

from monitor_gateway.auth.models import User
from monitor_gateway.backends.http import ServiceClient, path_segment
from monitor_gateway.errors import BackendError
from monitor_gateway.schema.checks import StateTransition


class StateHistoryClient(ServiceClient):
    """
    Reads check state transitions (OK -> FAIL_WAIT -> FAIL ...) for a time window.
    """

    service = "state-history"

    async def get_state_transitions(
        self,
        user: User,
        *,
        check_id: str,
        start: datetime,
        end: datetime,
    ) -> list[StateTransition]:
        body = await self._call(
            "GET",
            f"/checks/{path_segment(check_id)}/state-transitions",
            user=user,
            params={
                "customer_id": user.customer_id,
                "start": start.isoformat(),
                "end": end.isoformat(),
            },
        )
        if isinstance(body, dict):
            body = body.get("transitions", [])
        if body is None:
            return []
        try:
            return [StateTransition.model_validate(item) for item in body]
        except (TypeError, ValueError) as e:
            raise BackendError(self.service, f"undecodable transitions: {e}") from e
