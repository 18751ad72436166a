"""
monitor_gateway.query.document

The fixed query shapes the gateway accepts.

Responsibilities:
- Declare every selectable field up front; anything else is rejected.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class _Selection(BaseModel):
    model_config = ConfigDict(extra="forbid")


class ChecksSelection(_Selection):
    id: str | None = None


class InstancesSelection(_Selection):
    type: str = ""
    id: str | None = None
    metrics: list[str] = Field(default_factory=list)


class GroupsSelection(_Selection):
    type: str = ""
    id: str | None = None


class VpcSelection(_Selection):
    id: str = ""
    instances: InstancesSelection | None = None
    groups: GroupsSelection | None = None


class RegionSelection(_Selection):
    id: str = ""
    vpc: VpcSelection | None = None


class QueryDocument(_Selection):
    checks: ChecksSelection | None = None
    region: RegionSelection | None = None


class FieldError(BaseModel):
    path: list[str | int]
    message: str


class QueryResult(BaseModel):
    data: dict[str, Any] = Field(default_factory=dict)
    errors: list[FieldError] = Field(default_factory=list)
