"""
monitor_gateway.backends.notifications

Client for the notification service.

Responsibilities:
- List notifications for a customer or for one check.
- Submit notification batches for freshly written checks.
"""

from __future__ import annotations

from typing import Any

from monitor_gateway.auth.models import User
from monitor_gateway.backends.http import ServiceClient, path_segment
from monitor_gateway.errors import BackendError
from monitor_gateway.schema.checks import Notification, NotificationRequest


class NotificationClient(ServiceClient):
    service = "notifications"

    async def list_notifications(self, user: User) -> list[Notification]:
        return self._notifications(await self._call("GET", "/notifications", user=user))

    async def list_notifications_for_check(self, user: User, check_id: str) -> list[Notification]:
        body = await self._call("GET", f"/notifications/{path_segment(check_id)}", user=user)
        notifications = self._notifications(body)
        # Entries for a single check may come back without their check id.
        for n in notifications:
            n.check_id = n.check_id or check_id
        return notifications

    async def create_notifications_batch(
        self, user: User, requests: list[NotificationRequest]
    ) -> None:
        await self._call(
            "POST",
            "/notifications-multicheck",
            user=user,
            json={"notifications": [r.model_dump(mode="json") for r in requests]},
        )

    def _notifications(self, body: Any) -> list[Notification]:
        if isinstance(body, dict):
            body = body.get("notifications", [])
        if not isinstance(body, list):
            raise BackendError(self.service, "expected a list of notifications")
        try:
            return [Notification.model_validate(item) for item in body]
        except ValueError as e:
            raise BackendError(self.service, f"undecodable notification: {e}") from e
