"""
monitor_gateway.backends.service_directory

Client for the worker service directory (etcd v2 keys API).

Responsibilities:
- Resolve a routing key to the ordered list of worker registrations.
- Read with quorum so a freshly registered worker is visible.
- Parse a registration document into a worker address.
"""

from __future__ import annotations

import json
import posixpath
from dataclasses import dataclass
from typing import Any

import httpx
import structlog

from monitor_gateway.errors import DirectoryError, WorkerAddressError

log = structlog.get_logger(__name__)

# etcd v2 errorCode for "Key not found".
_KEY_NOT_FOUND = 100


@dataclass(frozen=True, slots=True)
class DirectoryEntry:
    key: str
    value: str


@dataclass(frozen=True, slots=True)
class WorkerAddress:
    hostname: str
    port: int

    def __str__(self) -> str:
        return f"{self.hostname}:{self.port}"


class ServiceDirectory:
    def __init__(self, *, http: httpx.AsyncClient, route_path: str = "/opsee.co/routes") -> None:
        self._http = http
        self._route_path = route_path

    async def lookup(self, routing_key: str) -> list[DirectoryEntry]:
        """
        Recursive quorum read of `<route_path>/<routing_key>`.
        A missing key is an empty registration list, not an error.
        """

        key = posixpath.join(self._route_path, routing_key)
        try:
            r = await self._http.get(
                f"/v2/keys{key}",
                params={"recursive": "true", "quorum": "true"},
            )
        except httpx.HTTPError as e:
            raise DirectoryError(f"lookup of {key} failed: {e!r}") from e

        if r.status_code == 404 and _error_code(r) == _KEY_NOT_FOUND:
            log.info("directory_key_not_found", key=key)
            return []
        if r.is_error:
            raise DirectoryError(f"lookup of {key} returned {r.status_code}")

        try:
            body = r.json()
        except ValueError as e:
            raise DirectoryError(f"lookup of {key} returned an undecodable body") from e

        if not isinstance(body, dict):
            raise DirectoryError(f"lookup of {key} returned an unexpected body")
        # A null node or null child list means nothing is registered.
        node = body.get("node") or {}
        children = (node.get("nodes") or []) if isinstance(node, dict) else None
        if not isinstance(children, list):
            raise DirectoryError(f"lookup of {key} returned an unexpected node shape")

        return [
            DirectoryEntry(key=str(child.get("key", "")), value=str(child.get("value", "")))
            for child in children
            if isinstance(child, dict) and not child.get("dir")
        ]

    async def ping(self) -> bool:
        try:
            r = await self._http.get("/version")
        except httpx.HTTPError:
            return False
        return r.is_success


def parse_worker_address(value: str, *, service: str) -> WorkerAddress:
    """
    A registration value is a small address map:
    {"checker": {"hostname": "10.0.0.4", "port": 4001}, "monitor": {...}}
    """

    try:
        services = json.loads(value)
    except ValueError as e:
        raise WorkerAddressError(f"undecodable registration: {value!r}") from e

    entry = services.get(service) if isinstance(services, dict) else None
    if not isinstance(entry, dict):
        raise WorkerAddressError(f"registration has no {service} service")

    hostname = entry.get("hostname")
    port = entry.get("port")
    if not isinstance(hostname, str) or not hostname:
        raise WorkerAddressError(f"{service} registration has no hostname")
    if isinstance(port, bool) or not isinstance(port, (int, float)) or port <= 0:
        raise WorkerAddressError(f"{service} registration has an invalid port")
    return WorkerAddress(hostname=hostname, port=int(port))


def _error_code(r: httpx.Response) -> int | None:
    try:
        return int(r.json().get("errorCode"))
    except (ValueError, TypeError, AttributeError):
        return None


# --- Module Notes -----------------------------------------------------------
# The directory is eventually consistent; entries are returned in directory order and
# callers pick deterministically from the front.
