"""
monitor_gateway.query.executor

Walks a `QueryDocument` and assembles the response.

Responsibilities:
- Allocate a fresh `QueryContext` per query.
- Resolve parents before children; a failing parent nulls its subtree.
- Record gateway errors against the failing field and keep resolving siblings.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from typing import Any, TypeVar

import structlog

from monitor_gateway.auth.models import User
from monitor_gateway.backends.aws import CloudProvider, Group, Instance
from monitor_gateway.errors import GatewayError
from monitor_gateway.query import resolvers
from monitor_gateway.query.context import QueryContext
from monitor_gateway.query.document import (
    FieldError,
    InstancesSelection,
    QueryDocument,
    QueryResult,
    RegionSelection,
    VpcSelection,
)
from monitor_gateway.services.check_aggregator import CheckAggregator

log = structlog.get_logger(__name__)

T = TypeVar("T")
Path = list[str | int]


class QueryExecutor:
    def __init__(self, *, aggregator: CheckAggregator, provider: CloudProvider) -> None:
        self._aggregator = aggregator
        self._provider = provider

    async def execute(self, user: User, document: QueryDocument) -> QueryResult:
        run = _Run(QueryContext(user=user))

        if document.checks is not None:
            selection = document.checks
            checks = await run.field(
                ["checks"],
                lambda: resolvers.resolve_checks(run.ctx, self._aggregator, selection),
            )
            run.data["checks"] = (
                None if checks is None else [c.model_dump(mode="json") for c in checks]
            )

        if document.region is not None:
            run.data["region"] = await self._region(run, document.region)

        if run.errors:
            log.info("query_partial", errors=len(run.errors))
        return QueryResult(data=run.data, errors=run.errors)

    async def _region(self, run: _Run, selection: RegionSelection) -> dict[str, Any] | None:
        region = run.sync_field(["region"], lambda: resolvers.resolve_region(run.ctx, selection))
        if region is None:
            return None
        if selection.vpc is not None:
            region["vpc"] = await self._vpc(run, selection.vpc)
        return region

    async def _vpc(self, run: _Run, selection: VpcSelection) -> dict[str, Any] | None:
        path: Path = ["region", "vpc"]
        vpc = run.sync_field(path, lambda: resolvers.resolve_vpc(run.ctx, selection))
        if vpc is None:
            return None

        if selection.instances is not None:
            vpc["instances"] = await self._instances(run, selection.instances, path + ["instances"])

        if selection.groups is not None:
            groups_sel = selection.groups
            groups = await run.field(
                path + ["groups"],
                lambda: resolvers.resolve_groups(run.ctx, self._provider, groups_sel),
            )
            vpc["groups"] = None if groups is None else [_group_json(g) for g in groups]

        return vpc

    async def _instances(
        self, run: _Run, selection: InstancesSelection, path: Path
    ) -> list[dict[str, Any]] | None:
        instances = await run.field(
            path, lambda: resolvers.resolve_instances(run.ctx, self._provider, selection)
        )
        if instances is None:
            return None

        now = datetime.now(tz=UTC)
        out: list[dict[str, Any]] = []
        for i, instance in enumerate(instances):
            item = _instance_json(instance)
            if selection.metrics:
                metrics: dict[str, Any] = {}
                for name in selection.metrics:
                    metrics[name] = await run.field(
                        path + [i, "metrics", name],
                        lambda inst=instance, n=name: resolvers.resolve_metric(
                            run.ctx, self._provider, inst, n, now=now
                        ),
                    )
                item["metrics"] = metrics
            out.append(item)
        return out


class _Run:
    """
    State of one query execution. Dropped when the query returns.
    """

    def __init__(self, ctx: QueryContext) -> None:
        self.ctx = ctx
        self.data: dict[str, Any] = {}
        self.errors: list[FieldError] = []

    async def field(self, path: Path, resolve: Callable[[], Awaitable[T]]) -> T | None:
        try:
            return await resolve()
        except GatewayError as e:
            self._fail(path, e)
            return None

    def sync_field(self, path: Path, resolve: Callable[[], T]) -> T | None:
        try:
            return resolve()
        except GatewayError as e:
            self._fail(path, e)
            return None

    def _fail(self, path: Path, error: GatewayError) -> None:
        log.warning("field_failed", path=path, error=str(error), kind=type(error).__name__)
        self.errors.append(FieldError(path=list(path), message=str(error)))


def _instance_json(instance: Instance) -> dict[str, Any]:
    return {"type": instance.kind, "id": instance.instance_id, "attributes": instance.data}


def _group_json(group: Group) -> dict[str, Any]:
    return {"type": group.kind, "id": group.group_id, "attributes": group.data}


# --- Module Notes -----------------------------------------------------------
# Only `GatewayError`s become field errors. Anything else is a bug and fails the request.
