"""
monitor_gateway.backends.worker

Transport for ad hoc test-check calls to a worker.

Responsibilities:
- Dial a worker over an insecure, short-lived gRPC channel with a connect timeout.
- Issue exactly one unary TestCheck call with JSON-encoded messages.
- Close the channel however the call ends (success, error, cancellation).
"""

from __future__ import annotations

import asyncio
import json
from datetime import datetime
from typing import Any, Protocol

import grpc
import structlog

from monitor_gateway.backends.service_directory import WorkerAddress
from monitor_gateway.errors import PayloadDecodeError, WorkerError, WorkerUnavailableError
from monitor_gateway.schema.checks import Check, TestCheckResponse
from monitor_gateway.schema.variants import resolve_response

log = structlog.get_logger(__name__)

TEST_CHECK_METHOD = "/checker.Checker/TestCheck"


class WorkerTransport(Protocol):
    async def test_check(
        self,
        address: WorkerAddress,
        *,
        check: Check,
        deadline: datetime,
        timeout: float,
    ) -> TestCheckResponse: ...


def _encode(message: dict[str, Any]) -> bytes:
    return json.dumps(message, separators=(",", ":")).encode("utf-8")


def _decode(raw: bytes) -> Any:
    return json.loads(raw.decode("utf-8"))


class GrpcWorkerTransport:
    def __init__(self, *, connect_timeout: float = 3.0) -> None:
        self._connect_timeout = connect_timeout

    async def test_check(
        self,
        address: WorkerAddress,
        *,
        check: Check,
        deadline: datetime,
        timeout: float,
    ) -> TestCheckResponse:
        addr = str(address)
        async with grpc.aio.insecure_channel(addr) as channel:
            try:
                await asyncio.wait_for(channel.channel_ready(), timeout=self._connect_timeout)
            except TimeoutError as e:
                raise WorkerUnavailableError(f"couldn't contact worker at {addr}") from e
            log.info("worker_connected", addr=addr)

            call = channel.unary_unary(
                TEST_CHECK_METHOD,
                request_serializer=_encode,
                response_deserializer=_decode,
            )
            try:
                body = await call(
                    {"deadline": deadline.isoformat(), "check": check.backend_payload()},
                    timeout=timeout,
                )
            except grpc.aio.AioRpcError as e:
                raise WorkerError(
                    f"worker at {addr} returned {e.code().name}: {e.details()}"
                ) from e

        try:
            response = TestCheckResponse.model_validate(body)
            response.responses = [resolve_response(r) for r in response.responses]
        except (ValueError, PayloadDecodeError) as e:
            raise WorkerError(f"worker at {addr} sent an undecodable response") from e
        return response


# --- Module Notes -----------------------------------------------------------
# Channels are never pooled: workers are ephemeral and a cached channel would outlive them.
