"""
monitor_gateway.api.routers.checks

Check endpoints.

Responsibilities:
- Read composed checks (checks + notifications + results).
- Batch upsert / delete checks.
- Run an ad hoc test check on a worker.
- Read state transitions for a check.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Any

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from monitor_gateway.api.deps import aggregator_dep, dispatcher_dep
from monitor_gateway.auth.deps import get_user
from monitor_gateway.auth.models import User
from monitor_gateway.schema.checks import Check, StateTransition, TestCheckResponse
from monitor_gateway.services.check_aggregator import CheckAggregator
from monitor_gateway.services.test_dispatcher import OnDemandTestDispatcher

router = APIRouter(prefix="/v1/checks", tags=["checks"])


class ChecksResponse(BaseModel):
    checks: list[Check]


class UpsertChecksRequest(BaseModel):
    # Raw mappings: notifications are split off before the check itself is validated.
    checks: list[Any] = Field(default_factory=list)


class DeleteChecksRequest(BaseModel):
    ids: list[Any] = Field(default_factory=list)


class DeleteChecksResponse(BaseModel):
    deleted: list[str]


class TestCheckRequest(BaseModel):
    check: dict[str, Any]


class StateTransitionsResponse(BaseModel):
    transitions: list[StateTransition]


@router.get("", response_model=ChecksResponse)
async def list_checks(
    user: User = Depends(get_user),
    aggregator: CheckAggregator = Depends(aggregator_dep),
) -> ChecksResponse:
    return ChecksResponse(checks=await aggregator.list_checks(user))


@router.post("", response_model=ChecksResponse)
async def upsert_checks(
    body: UpsertChecksRequest,
    user: User = Depends(get_user),
    aggregator: CheckAggregator = Depends(aggregator_dep),
) -> ChecksResponse:
    return ChecksResponse(checks=await aggregator.upsert_checks(user, body.checks))


@router.post("/delete", response_model=DeleteChecksResponse)
async def delete_checks(
    body: DeleteChecksRequest,
    user: User = Depends(get_user),
    aggregator: CheckAggregator = Depends(aggregator_dep),
) -> DeleteChecksResponse:
    return DeleteChecksResponse(deleted=await aggregator.delete_checks(user, body.ids))


@router.post("/test", response_model=TestCheckResponse)
async def test_check(
    body: TestCheckRequest,
    user: User = Depends(get_user),
    dispatcher: OnDemandTestDispatcher = Depends(dispatcher_dep),
) -> TestCheckResponse:
    return await dispatcher.test_check(user, body.check)


@router.get("/{check_id}", response_model=Check)
async def get_check(
    check_id: str,
    user: User = Depends(get_user),
    aggregator: CheckAggregator = Depends(aggregator_dep),
) -> Check:
    checks = await aggregator.list_checks(user, check_id)
    return checks[0]


@router.get("/{check_id}/state-transitions", response_model=StateTransitionsResponse)
async def state_transitions(
    check_id: str,
    start: datetime | None = Query(default=None),
    end: datetime | None = Query(default=None),
    user: User = Depends(get_user),
    aggregator: CheckAggregator = Depends(aggregator_dep),
) -> StateTransitionsResponse:
    end = _utc(end) if end else datetime.now(tz=UTC)
    start = _utc(start) if start else end - timedelta(days=1)
    transitions = await aggregator.state_transitions(user, check_id, start=start, end=end)
    return StateTransitionsResponse(transitions=transitions)


def _utc(value: datetime) -> datetime:
    # Naive query params are taken as UTC.
    return value if value.tzinfo else value.replace(tzinfo=UTC)


# --- Module Notes -----------------------------------------------------------
# Batch writes are applied in request order and stop at the first failure; the response
# for a failed batch is the error, even though earlier items were committed.
