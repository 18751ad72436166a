"""
monitor_gateway.services.check_aggregator

Check aggregation service.

Responsibilities:
- Compose checks (check management), notifications (notification service) and
  results (result store) into one enriched `Check` per check.
- Own the sequential batch write path (upsert / delete).
- Pass state-transition reads through to the state-history service.

Failure policy:
- Check-management and result-store failures abort the whole call.
- Notification failures are logged and degrade to empty notification lists.
"""

from __future__ import annotations

import asyncio
from collections import defaultdict
from datetime import datetime
from typing import Any

import structlog
from pydantic import ValidationError

from monitor_gateway.auth.models import User
from monitor_gateway.backends.check_management import CheckManagementClient
from monitor_gateway.backends.notifications import NotificationClient
from monitor_gateway.backends.result_store import ResultStore
from monitor_gateway.backends.state_history import StateHistoryClient
from monitor_gateway.errors import BackendError, CheckInputError, GatewayError
from monitor_gateway.schema.checks import (
    Check,
    Notification,
    NotificationRequest,
    StateTransition,
)
from monitor_gateway.schema.variants import resolve_check_spec

log = structlog.get_logger(__name__)


class CheckAggregator:
    def __init__(
        self,
        *,
        checks: CheckManagementClient,
        notifications: NotificationClient,
        results: ResultStore,
        history: StateHistoryClient,
    ) -> None:
        self._checks = checks
        self._notifications = notifications
        self._results = results
        self._history = history

    async def list_checks(self, user: User, check_id: str | None = None) -> list[Check]:
        """
        All checks of the customer, or the single check `check_id`, each carrying
        its notifications and results. Output keeps check-management order.
        """

        logger = log.bind(fn="list_checks", customer_id=user.customer_id, check_id=check_id)

        # The only auxiliary task: it is joined below, or cancelled and awaited on failure.
        notifications_task = asyncio.create_task(
            self._notifications_by_check(user, check_id, logger=logger)
        )
        try:
            if check_id:
                checks = [await self._checks.get_check(user, check_id)]
            else:
                checks = await self._checks.list_checks(user)
        except BaseException as e:
            notifications_task.cancel()
            await asyncio.gather(notifications_task, return_exceptions=True)
            if isinstance(e, BackendError):
                logger.error("checks_unavailable", error=str(e))
            raise

        notifications = await notifications_task

        for check in checks:
            check.notifications = [
                n for n in notifications.get(check.id, []) if n.check_id == check.id
            ]
            # Fatal: one failing check fails the whole listing.
            check.results = await asyncio.to_thread(
                self._results.get_results, user.customer_id, check.id
            )
            resolve_check_spec(check)

        logger.info("checks_composed", count=len(checks))
        return checks

    async def _notifications_by_check(
        self, user: User, check_id: str | None, *, logger: Any
    ) -> dict[str, list[Notification]]:
        try:
            if check_id:
                items = await self._notifications.list_notifications_for_check(user, check_id)
            else:
                items = await self._notifications.list_notifications(user)
        except GatewayError as e:
            logger.warning("notifications_unavailable", error=str(e))
            return {}

        by_check: dict[str, list[Notification]] = defaultdict(list)
        for n in items:
            by_check[n.check_id].append(n)
        return by_check

    async def upsert_checks(self, user: User, inputs: list[Any]) -> list[Check]:
        """
        Creates checks without an id and updates the others, one at a time.
        A failure stops the batch; checks written before it stay written.
        """

        logger = log.bind(fn="upsert_checks", customer_id=user.customer_id)
        saved_checks: list[Check] = []

        for position, raw in enumerate(inputs):
            if not isinstance(raw, dict):
                raise CheckInputError("error decoding check input")

            fields = dict(raw)
            notification_inputs = fields.pop("notifications", None)
            try:
                check = Check.model_validate(fields)
            except ValidationError as e:
                raise CheckInputError(f"invalid check at position {position}: {e}") from e

            if check.id:
                saved = await self._checks.update_check(user, check)
            else:
                saved = await self._checks.create_check(user, check)
            logger.info("check_saved", check_id=saved.id, created=not check.id)

            if isinstance(notification_inputs, list):
                wanted = _notifications_from_input(notification_inputs, saved.id)
                await self._notifications.create_notifications_batch(
                    user, [NotificationRequest(check_id=saved.id, notifications=wanted)]
                )
                saved.notifications = wanted

            saved_checks.append(saved)

        return saved_checks

    async def delete_checks(self, user: User, check_ids: list[Any]) -> list[str]:
        logger = log.bind(fn="delete_checks", customer_id=user.customer_id)
        deleted: list[str] = []

        for check_id in check_ids:
            if not isinstance(check_id, str) or not check_id:
                raise CheckInputError("unable to decode check id")
            await self._checks.delete_check(user, check_id)
            logger.info("check_deleted", check_id=check_id)
            deleted.append(check_id)

        return deleted

    async def state_transitions(
        self,
        user: User,
        check_id: str,
        *,
        start: datetime,
        end: datetime,
    ) -> list[StateTransition]:
        if end < start:
            raise CheckInputError("end must not be before start")
        return await self._history.get_state_transitions(
            user, check_id=check_id, start=start, end=end
        )


def _notifications_from_input(raw: list[Any], check_id: str) -> list[Notification]:
    notifications: list[Notification] = []
    for entry in raw:
        if not isinstance(entry, dict):
            continue
        kind = entry.get("type")
        value = entry.get("value")
        # Incomplete entries are dropped, not rejected.
        if isinstance(kind, str) and kind and isinstance(value, str) and value:
            notifications.append(Notification(check_id=check_id, type=kind, value=value))
    return notifications


# --- Module Notes -----------------------------------------------------------
# Result fetches run in a worker thread (boto3 is blocking) but strictly one check at a
# time, so total latency scales with the number of results and responses.
