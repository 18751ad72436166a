"""
tests.fakes

In-memory stand-ins for the gateway's collaborators.

Responsibilities:
- HTTP JSON backends served through `httpx.MockTransport`.
- A DynamoDB client speaking the low-level attribute-value format.
- Directory, worker transport and cloud provider doubles.
"""

from __future__ import annotations

import asyncio
import json
from datetime import datetime
from typing import Any

import httpx
from boto3.dynamodb.types import TypeSerializer
from botocore.exceptions import ClientError

from monitor_gateway.auth.jwt import JwtConfig
from monitor_gateway.auth.models import User
from monitor_gateway.backends.aws import Group, Instance, MetricQuery
from monitor_gateway.backends.check_management import CheckManagementClient
from monitor_gateway.backends.notifications import NotificationClient
from monitor_gateway.backends.result_store import ResultStore
from monitor_gateway.backends.service_directory import DirectoryEntry, WorkerAddress
from monitor_gateway.backends.state_history import StateHistoryClient
from monitor_gateway.errors import DirectoryError
from monitor_gateway.schema.checks import Check, TestCheckResponse
from monitor_gateway.services.check_aggregator import CheckAggregator

JWT = JwtConfig(alg="HS256", issuer="tests", audience="tests", secret="test-secret")

_serializer = TypeSerializer()


def marshal(item: dict[str, Any]) -> dict[str, Any]:
    return {k: _serializer.serialize(v) for k, v in item.items()}


def client_error(operation: str) -> ClientError:
    return ClientError(
        {"Error": {"Code": "ProvisionedThroughputExceededException", "Message": "slow down"}},
        operation,
    )


def mock_client(handler: Any, base_url: str) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url=base_url)


# --- HTTP backends ----------------------------------------------------------


class FakeCheckService:
    def __init__(self, checks: list[dict[str, Any]] | None = None) -> None:
        self.checks: dict[str, dict[str, Any]] = {c["id"]: dict(c) for c in checks or []}
        self.fail = False
        self.writes_before_failure: int | None = None
        self.requests: list[httpx.Request] = []
        self._next_id = 1

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail:
            return httpx.Response(500, json={"error": "check service down"})

        path = request.url.path
        check_id = path.removeprefix("/checks/") if path.startswith("/checks/") else None

        if request.method == "GET" and path == "/checks":
            return httpx.Response(200, json={"checks": list(self.checks.values())})
        if request.method == "GET" and check_id:
            if check_id not in self.checks:
                return httpx.Response(404, json={"error": "not found"})
            return httpx.Response(200, json=self.checks[check_id])

        if request.method in ("POST", "PUT", "DELETE"):
            if self.writes_before_failure is not None:
                if self.writes_before_failure == 0:
                    return httpx.Response(503, json={"error": "write rejected"})
                self.writes_before_failure -= 1

        if request.method == "POST" and path == "/checks":
            body = json.loads(request.content)
            body["id"] = f"new-{self._next_id}"
            self._next_id += 1
            self.checks[body["id"]] = body
            return httpx.Response(201, json=body)
        if request.method == "PUT" and check_id:
            body = json.loads(request.content)
            self.checks[check_id] = body
            return httpx.Response(200, json=body)
        if request.method == "DELETE" and check_id:
            if self.checks.pop(check_id, None) is None:
                return httpx.Response(404, json={"error": "not found"})
            return httpx.Response(204)

        return httpx.Response(405)


class FakeNotificationService:
    def __init__(self, notifications: list[dict[str, Any]] | None = None) -> None:
        self.notifications: list[dict[str, Any]] = list(notifications or [])
        self.fail = False
        self.batches: list[dict[str, Any]] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        if self.fail:
            return httpx.Response(503, json={"error": "notifications down"})

        path = request.url.path
        if request.method == "GET" and path == "/notifications":
            return httpx.Response(200, json={"notifications": self.notifications})
        if request.method == "GET" and path.startswith("/notifications/"):
            check_id = path.removeprefix("/notifications/")
            # The per-check listing omits the check id on each entry.
            items = [
                {"type": n["type"], "value": n["value"]}
                for n in self.notifications
                if n["check_id"] == check_id
            ]
            return httpx.Response(200, json=items)
        if request.method == "POST" and path == "/notifications-multicheck":
            body = json.loads(request.content)
            self.batches.append(body)
            for req in body["notifications"]:
                self.notifications = [
                    n for n in self.notifications if n["check_id"] != req["check_id"]
                ]
                self.notifications.extend(
                    {"check_id": req["check_id"], "type": n["type"], "value": n["value"]}
                    for n in req["notifications"]
                )
            return httpx.Response(204)

        return httpx.Response(405)


# --- DynamoDB ---------------------------------------------------------------


class FakeDynamo:
    """
    Low-level client double: `query` projects only keys, `get_item` returns full items.
    """

    def __init__(self, *, page_size: int = 100) -> None:
        self.results: dict[str, dict[str, Any]] = {}
        self.responses: dict[str, dict[str, Any]] = {}
        self.failing_tables: set[str] = set()
        self.fail_query = False
        self.page_size = page_size
        self.queries: list[dict[str, Any]] = []
        self.gets: list[tuple[str, str]] = []

    def add_result(
        self,
        *,
        result_id: str,
        check_id: str,
        customer_id: str,
        response_ids: list[str],
        passing: bool = True,
    ) -> None:
        self.results[result_id] = {
            "result_id": result_id,
            "check_id": check_id,
            "customer_id": customer_id,
            "passing": passing,
            "version": 1,
            "timestamp": "2026-10-18T12:00:00Z",
            "responses": response_ids,
        }

    def add_response(self, response_id: str, payload: Any = ..., attribute: str = "response_payload") -> None:
        item: dict[str, Any] = {"response_id": response_id}
        if payload is not ...:
            item[attribute] = payload
        self.responses[response_id] = item

    def query(self, **params: Any) -> dict[str, Any]:
        self.queries.append(params)
        if self.fail_query:
            raise client_error("Query")

        (placeholder, value), = params["ExpressionAttributeValues"].items()
        key = placeholder.lstrip(":")
        matching = [r for r in self.results.values() if r[key] == value["S"]]

        start = 0
        if "ExclusiveStartKey" in params:
            start = int(params["ExclusiveStartKey"]["offset"]["N"])
        page = matching[start : start + self.page_size]

        out: dict[str, Any] = {
            "Items": [marshal({"result_id": r["result_id"], key: r[key]}) for r in page]
        }
        if start + self.page_size < len(matching):
            out["LastEvaluatedKey"] = {"offset": {"N": str(start + self.page_size)}}
        return out

    def get_item(self, *, TableName: str, Key: dict[str, Any]) -> dict[str, Any]:
        (key_value,) = Key.values()
        self.gets.append((TableName, key_value["S"]))
        if TableName in self.failing_tables:
            raise client_error("GetItem")

        table = self.results if TableName == "check_results" else self.responses
        item = table.get(key_value["S"])
        return {"Item": marshal(item)} if item is not None else {}


def response_payload(response_id: str, *, code: int = 200) -> str:
    return json.dumps(
        {
            "response_id": response_id,
            "passing": code < 400,
            "target": {"type": "sg", "id": "sg-1", "address": "10.0.0.1"},
            "response": {
                "type_url": "type.googleapis.com/HttpResponse",
                "value": json.dumps({"code": code, "body": "ok", "host": "10.0.0.1"}),
            },
        }
    )


# --- aggregator assembly ----------------------------------------------------


def build_aggregator(
    *,
    checks: FakeCheckService,
    notifications: FakeNotificationService | Any,
    dynamo: FakeDynamo,
    history_handler: Any = None,
) -> CheckAggregator:
    if isinstance(notifications, FakeNotificationService):
        notifications = NotificationClient(
            http=mock_client(notifications.handler, "http://notifications"), jwt=JWT
        )
    history = history_handler or (lambda request: httpx.Response(200, json={"transitions": []}))
    return CheckAggregator(
        checks=CheckManagementClient(http=mock_client(checks.handler, "http://checks"), jwt=JWT),
        notifications=notifications,
        results=ResultStore(client=dynamo),
        history=StateHistoryClient(http=mock_client(history, "http://history"), jwt=JWT),
    )


# --- directory / workers ----------------------------------------------------


class FakeDirectory:
    def __init__(
        self,
        entries: list[DirectoryEntry] | None = None,
        *,
        fail: bool = False,
        hang: bool = False,
    ) -> None:
        self.entries = list(entries or [])
        self.fail = fail
        self.hang = hang
        self.lookups: list[str] = []
        self.healthy = True
        self.cancelled = False

    async def lookup(self, routing_key: str) -> list[DirectoryEntry]:
        self.lookups.append(routing_key)
        if self.hang:
            try:
                await asyncio.sleep(3600)
            except asyncio.CancelledError:
                self.cancelled = True
                raise
        if self.fail:
            raise DirectoryError("connection refused")
        return list(self.entries)

    async def ping(self) -> bool:
        return self.healthy


def worker_entry(hostname: str = "10.0.0.7", port: int = 4001, key: str = "/w/1") -> DirectoryEntry:
    return DirectoryEntry(
        key=key, value=json.dumps({"checker": {"hostname": hostname, "port": port}})
    )


class FakeTransport:
    def __init__(
        self,
        *,
        response: TestCheckResponse | None = None,
        error: Exception | None = None,
        hang: bool = False,
    ) -> None:
        self.response = response or TestCheckResponse()
        self.error = error
        self.hang = hang
        self.calls: list[dict[str, Any]] = []
        self.cancelled = False

    async def test_check(
        self,
        address: WorkerAddress,
        *,
        check: Check,
        deadline: datetime,
        timeout: float,
    ) -> TestCheckResponse:
        self.calls.append(
            {"address": address, "check": check, "deadline": deadline, "timeout": timeout}
        )
        if self.hang:
            try:
                await asyncio.sleep(3600)
            except asyncio.CancelledError:
                self.cancelled = True
                raise
        if self.error is not None:
            raise self.error
        return self.response


# --- cloud provider ---------------------------------------------------------


class FakeProvider:
    def __init__(self) -> None:
        self.instances: dict[str, list[Instance]] = {
            "ec2": [
                Instance(kind="ec2", instance_id="i-1", data={"InstanceId": "i-1"}),
                Instance(kind="ec2", instance_id="i-2", data={"InstanceId": "i-2"}),
            ],
            "rds": [
                Instance(
                    kind="rds", instance_id="db-1", data={"DBInstanceIdentifier": "db-1"}
                ),
            ],
        }
        self.instance_calls: list[dict[str, Any]] = []
        self.metric_calls: list[tuple[str, MetricQuery]] = []

    def list_instances(
        self, user: User, *, region: str, vpc: str, kind: str, instance_id: str | None = None
    ) -> list[Instance]:
        self.instance_calls.append({"region": region, "vpc": vpc, "kind": kind, "id": instance_id})
        return [i for i in self.instances[kind] if instance_id in (None, i.instance_id)]

    def list_groups(
        self, user: User, *, region: str, vpc: str, kind: str, group_id: str | None = None
    ) -> list[Group]:
        return [Group(kind="security", group_id="sg-1", data={"GroupId": "sg-1", "VpcId": vpc})]

    def metric_statistics(self, user: User, *, region: str, query: MetricQuery) -> dict[str, Any]:
        self.metric_calls.append((region, query))
        return {
            "namespace": query.namespace,
            "metric": query.metric_name,
            "statistic": query.statistic,
            "datapoints": [{"timestamp": query.end.isoformat(), "value": 1.5, "unit": "Percent"}],
        }
