"""
tests.test_api

HTTP surface of the gateway with a `Gateway` assembled from in-memory backends.

Responsibilities:
- Health/readiness probes and bearer-token auth.
- Checks, query and test-check endpoints, including error status mapping.
"""

from __future__ import annotations

from collections.abc import AsyncIterator

import httpx
import pytest
import pytest_asyncio

from monitor_gateway.api.app import create_app
from monitor_gateway.api.container import Gateway
from monitor_gateway.query.executor import QueryExecutor
from monitor_gateway.services.test_dispatcher import OnDemandTestDispatcher
from monitor_gateway.settings import Settings
from tests.fakes import (
    FakeCheckService,
    FakeDirectory,
    FakeDynamo,
    FakeNotificationService,
    FakeProvider,
    FakeTransport,
    build_aggregator,
)


class _Env:
    def __init__(self) -> None:
        self.checks = FakeCheckService(
            [{"id": "c1", "customer_id": "cust-1", "name": "web", "target": {"type": "sg"}}]
        )
        self.notifications = FakeNotificationService(
            [{"check_id": "c1", "type": "email", "value": "ops@example.com"}]
        )
        self.directory = FakeDirectory([])
        settings = Settings(env="test")
        aggregator = build_aggregator(
            checks=self.checks, notifications=self.notifications, dynamo=FakeDynamo()
        )
        self.gateway = Gateway(
            aggregator=aggregator,
            dispatcher=OnDemandTestDispatcher(
                directory=self.directory, transport=FakeTransport(), settings=settings
            ),
            executor=QueryExecutor(aggregator=aggregator, provider=FakeProvider()),
            directory=self.directory,
        )
        self.app = create_app(settings=settings, gateway=self.gateway)


@pytest.fixture
def env() -> _Env:
    return _Env()


@pytest_asyncio.fixture
async def client(env: _Env) -> AsyncIterator[httpx.AsyncClient]:
    # httpx ASGITransport does not run lifespan; enter it explicitly.
    async with env.app.router.lifespan_context(env.app):
        transport = httpx.ASGITransport(app=env.app)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
            yield c


async def _auth(client: httpx.AsyncClient) -> dict[str, str]:
    r = await client.post(
        "/v1/dev/token", json={"subject": "user-1", "customer_id": "cust-1"}
    )
    assert r.status_code == 200
    return {"Authorization": f"Bearer {r.json()['access_token']}"}


@pytest.mark.asyncio
async def test_health_endpoints(env: _Env, client: httpx.AsyncClient) -> None:
    r = await client.get("/healthz")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"

    r = await client.get("/readyz")
    assert r.status_code == 200
    assert r.json()["status"] == "ready"
    assert r.headers["x-request-id"]

    env.directory.healthy = False
    r = await client.get("/readyz")
    assert r.status_code == 503
    assert r.json()["dependency"] == "service-directory"


@pytest.mark.asyncio
async def test_routes_require_a_bearer_token(client: httpx.AsyncClient) -> None:
    r = await client.get("/v1/checks")
    assert r.status_code == 401

    r = await client.get("/v1/checks", headers={"Authorization": "Bearer not-a-jwt"})
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_list_and_get_checks(client: httpx.AsyncClient) -> None:
    headers = await _auth(client)

    r = await client.get("/v1/checks", headers=headers)
    assert r.status_code == 200
    (check,) = r.json()["checks"]
    assert check["id"] == "c1"
    assert check["notifications"][0]["value"] == "ops@example.com"
    assert check["results"] == []

    r = await client.get("/v1/checks/c1", headers=headers)
    assert r.status_code == 200
    assert r.json()["name"] == "web"


@pytest.mark.asyncio
async def test_backend_failure_maps_to_bad_gateway(env: _Env, client: httpx.AsyncClient) -> None:
    headers = await _auth(client)
    env.checks.fail = True

    r = await client.get("/v1/checks", headers=headers)

    assert r.status_code == 502
    assert r.json()["detail"].startswith("check-management")


@pytest.mark.asyncio
async def test_upsert_then_delete(env: _Env, client: httpx.AsyncClient) -> None:
    headers = await _auth(client)

    r = await client.post(
        "/v1/checks",
        headers=headers,
        json={"checks": [{"name": "api", "target": {"type": "elb", "id": "lb-1"}}]},
    )
    assert r.status_code == 200
    assert r.json()["checks"][0]["id"] == "new-1"

    r = await client.post("/v1/checks/delete", headers=headers, json={"ids": ["c1", "new-1"]})
    assert r.status_code == 200
    assert r.json() == {"deleted": ["c1", "new-1"]}
    assert env.checks.checks == {}

    r = await client.post("/v1/checks/delete", headers=headers, json={"ids": [7]})
    assert r.status_code == 400


@pytest.mark.asyncio
async def test_query_returns_data_and_field_errors(client: httpx.AsyncClient) -> None:
    headers = await _auth(client)

    r = await client.post(
        "/v1/query",
        headers=headers,
        json={"checks": {}, "region": {"id": "us-west-2", "vpc": {"instances": {"type": "ec2"}}}},
    )

    assert r.status_code == 200
    body = r.json()
    assert body["data"]["checks"][0]["id"] == "c1"
    assert body["data"]["region"]["vpc"] is None
    assert body["errors"] == [{"path": ["region", "vpc"], "message": "missing vpc id"}]


@pytest.mark.asyncio
async def test_test_check_without_workers_is_unavailable(client: httpx.AsyncClient) -> None:
    headers = await _auth(client)

    r = await client.post(
        "/v1/checks/test",
        headers=headers,
        json={"check": {"name": "probe", "target": {"type": "sg", "id": "sg-1"}}},
    )

    assert r.status_code == 503
    assert r.json()["detail"] == "no workers found"


# --- Module Notes -----------------------------------------------------------
# The dev token route is used for auth here, so these tests also cover token round-trips.
