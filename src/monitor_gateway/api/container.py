"""
monitor_gateway.api.container

Composition of the long-lived backend clients and the services built on them.

Responsibilities:
- Build one shared client per backend from settings.
- Close the clients the gateway owns at shutdown.
"""

from __future__ import annotations

from contextlib import AsyncExitStack
from dataclasses import dataclass, field

import boto3
import httpx

from monitor_gateway.auth.jwt import JwtConfig
from monitor_gateway.backends.aws import CloudProvider
from monitor_gateway.backends.check_management import CheckManagementClient
from monitor_gateway.backends.http import build_http_client
from monitor_gateway.backends.notifications import NotificationClient
from monitor_gateway.backends.result_store import ResultStore, ResultStoreTables
from monitor_gateway.backends.service_directory import ServiceDirectory
from monitor_gateway.backends.state_history import StateHistoryClient
from monitor_gateway.backends.worker import GrpcWorkerTransport
from monitor_gateway.query.executor import QueryExecutor
from monitor_gateway.services.check_aggregator import CheckAggregator
from monitor_gateway.services.test_dispatcher import OnDemandTestDispatcher
from monitor_gateway.settings import Settings


@dataclass(slots=True)
class Gateway:
    aggregator: CheckAggregator
    dispatcher: OnDemandTestDispatcher
    executor: QueryExecutor
    directory: ServiceDirectory
    http_clients: list[httpx.AsyncClient] = field(default_factory=list)

    async def aclose(self) -> None:
        # Every client is closed even if an earlier one fails; the failure is re-raised after.
        async with AsyncExitStack() as stack:
            for client in self.http_clients:
                stack.push_async_callback(client.aclose)


def build_gateway(settings: Settings) -> Gateway:
    jwt = JwtConfig.from_settings(settings)
    timeout = settings.backend_timeout_seconds

    checks_http = build_http_client(base_url=settings.check_service_url, timeout=timeout)
    notifications_http = build_http_client(
        base_url=settings.notification_service_url, timeout=timeout
    )
    history_http = build_http_client(base_url=settings.state_history_url, timeout=timeout)
    directory_http = build_http_client(base_url=settings.directory_url, timeout=timeout)

    dynamodb = boto3.client(
        "dynamodb",
        region_name=settings.aws_region,
        endpoint_url=settings.dynamodb_endpoint_url,
    )

    aggregator = CheckAggregator(
        checks=CheckManagementClient(http=checks_http, jwt=jwt),
        notifications=NotificationClient(http=notifications_http, jwt=jwt),
        results=ResultStore(client=dynamodb, tables=ResultStoreTables.from_settings(settings)),
        history=StateHistoryClient(http=history_http, jwt=jwt),
    )
    directory = ServiceDirectory(http=directory_http, route_path=settings.directory_route_path)
    dispatcher = OnDemandTestDispatcher(
        directory=directory,
        transport=GrpcWorkerTransport(connect_timeout=settings.worker_connect_timeout_seconds),
        settings=settings,
    )

    return Gateway(
        aggregator=aggregator,
        dispatcher=dispatcher,
        executor=QueryExecutor(aggregator=aggregator, provider=CloudProvider()),
        directory=directory,
        http_clients=[checks_http, notifications_http, history_http, directory_http],
    )


# --- Module Notes -----------------------------------------------------------
# Tests assemble a `Gateway` from fakes and hand it to `create_app` directly.
