"""
monitor_gateway.api.deps

FastAPI dependency wiring for the API layer.

Responsibilities:
- Expose the app-wide `Gateway` services to routers.
"""

from __future__ import annotations

from fastapi import Depends, Request

from monitor_gateway.api.container import Gateway
from monitor_gateway.query.executor import QueryExecutor
from monitor_gateway.services.check_aggregator import CheckAggregator
from monitor_gateway.services.test_dispatcher import OnDemandTestDispatcher


def gateway_dep(request: Request) -> Gateway:
    # Created by the lifespan handler in `monitor_gateway.api.app.create_app`.
    return request.app.state.gateway  # type: ignore[no-any-return]


def aggregator_dep(gateway: Gateway = Depends(gateway_dep)) -> CheckAggregator:
    return gateway.aggregator


def dispatcher_dep(gateway: Gateway = Depends(gateway_dep)) -> OnDemandTestDispatcher:
    return gateway.dispatcher


def executor_dep(gateway: Gateway = Depends(gateway_dep)) -> QueryExecutor:
    return gateway.executor
