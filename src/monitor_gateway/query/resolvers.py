"""
monitor_gateway.query.resolvers

Field resolvers for the fixed query shapes.

Responsibilities:
- `region` / `vpc` bind the query context for their descendants.
- `instances` / `groups` / `metrics` read the context to scope provider calls.
- `checks` delegates to the check aggregator.
"""

from __future__ import annotations

import asyncio
from datetime import datetime
from typing import Any

from monitor_gateway.backends.aws import CloudProvider, Group, Instance
from monitor_gateway.errors import MissingGroupTypeError, MissingInstanceTypeError
from monitor_gateway.query.context import QueryContext
from monitor_gateway.query.document import (
    ChecksSelection,
    GroupsSelection,
    InstancesSelection,
    RegionSelection,
    VpcSelection,
)
from monitor_gateway.query.metrics import metric_query_for
from monitor_gateway.schema.checks import Check
from monitor_gateway.services.check_aggregator import CheckAggregator

INSTANCE_KINDS = ("ec2", "rds")
GROUP_KINDS = ("security", "elb", "autoscaling")


async def resolve_checks(
    ctx: QueryContext, aggregator: CheckAggregator, selection: ChecksSelection
) -> list[Check]:
    return await aggregator.list_checks(ctx.user, selection.id or None)


def resolve_region(ctx: QueryContext, selection: RegionSelection) -> dict[str, Any]:
    ctx.bind_region(selection.id)
    return {"id": ctx.region}


def resolve_vpc(ctx: QueryContext, selection: VpcSelection) -> dict[str, Any]:
    ctx.bind_vpc(selection.id)
    return {"id": ctx.vpc}


async def resolve_instances(
    ctx: QueryContext, provider: CloudProvider, selection: InstancesSelection
) -> list[Instance]:
    if selection.type not in INSTANCE_KINDS:
        raise MissingInstanceTypeError()
    # Read before leaving the loop thread so a missing ancestor fails here, not in boto3.
    region, vpc = ctx.region, ctx.vpc
    return await asyncio.to_thread(
        provider.list_instances,
        ctx.user,
        region=region,
        vpc=vpc,
        kind=selection.type,
        instance_id=selection.id or None,
    )


async def resolve_groups(
    ctx: QueryContext, provider: CloudProvider, selection: GroupsSelection
) -> list[Group]:
    if selection.type not in GROUP_KINDS:
        raise MissingGroupTypeError()
    region, vpc = ctx.region, ctx.vpc
    return await asyncio.to_thread(
        provider.list_groups,
        ctx.user,
        region=region,
        vpc=vpc,
        kind=selection.type,
        group_id=selection.id or None,
    )


async def resolve_metric(
    ctx: QueryContext,
    provider: CloudProvider,
    instance: Instance,
    metric_name: str,
    *,
    now: datetime | None = None,
) -> dict[str, Any]:
    query = metric_query_for(instance, metric_name, now=now)
    region = ctx.region
    return await asyncio.to_thread(provider.metric_statistics, ctx.user, region=region, query=query)


# --- Module Notes -----------------------------------------------------------
# Resolvers return domain values; shaping into response JSON happens in `query.executor`.
