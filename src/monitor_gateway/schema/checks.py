"""
monitor_gateway.schema.checks

Wire models for checks and everything hung off them.

Responsibilities:
- Model checks, results, responses, notifications and state transitions as
  the backends serve them (snake_case JSON).
- Enforce that each polymorphic slot holds at most one variant.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class _Wire(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class Target(_Wire):
    type: str = ""
    id: str = ""
    name: str = ""
    address: str = ""


class Header(_Wire):
    name: str
    values: list[str] = Field(default_factory=list)


class Metric(_Wire):
    name: str
    value: float = 0.0
    tags: list[dict[str, str]] = Field(default_factory=list)
    timestamp: datetime | None = None


class HttpCheck(_Wire):
    name: str = ""
    path: str = "/"
    protocol: str = "http"
    port: int = 80
    verb: str = "GET"
    headers: list[Header] = Field(default_factory=list)
    body: str = ""


class CloudWatchMetric(_Wire):
    namespace: str
    name: str


class CloudWatchCheck(_Wire):
    metrics: list[CloudWatchMetric] = Field(default_factory=list)


class HttpResponse(_Wire):
    code: int = 0
    body: str = ""
    headers: list[Header] = Field(default_factory=list)
    host: str = ""
    metrics: list[Metric] = Field(default_factory=list)


class CloudWatchResponse(_Wire):
    namespace: str = ""
    metrics: list[Metric] = Field(default_factory=list)


class TypedPayload(_Wire):
    """
    A serialized variant: `type_url` names the variant, `value` is its JSON text.
    """

    type_url: str
    value: str = "{}"


class Notification(_Wire):
    check_id: str = ""
    type: str
    value: str


class NotificationRequest(_Wire):
    check_id: str
    notifications: list[Notification] = Field(default_factory=list)


class CheckResponse(_Wire):
    response_id: str = ""
    target: Target | None = None
    passing: bool = False
    error: str = ""
    response: TypedPayload | None = None
    http_response: HttpResponse | None = None
    cloudwatch_response: CloudWatchResponse | None = None

    @model_validator(mode="after")
    def _one_reply(self) -> CheckResponse:
        if self.http_response is not None and self.cloudwatch_response is not None:
            raise ValueError("a response holds either http_response or cloudwatch_response")
        return self

    @property
    def reply(self) -> HttpResponse | CloudWatchResponse | None:
        return self.http_response or self.cloudwatch_response


class CheckResult(_Wire):
    result_id: str = ""
    check_id: str = ""
    customer_id: str = ""
    check_name: str = ""
    timestamp: datetime | None = None
    passing: bool = False
    version: int = 0
    target: Target | None = None
    responses: list[CheckResponse] = Field(default_factory=list)


class Check(_Wire):
    id: str = ""
    customer_id: str = ""
    name: str = ""
    interval: int = 0
    target: Target | None = None
    http_check: HttpCheck | None = None
    cloudwatch_check: CloudWatchCheck | None = None
    check_spec: TypedPayload | None = None
    results: list[CheckResult] = Field(default_factory=list)
    notifications: list[Notification] = Field(default_factory=list)

    @model_validator(mode="after")
    def _one_spec(self) -> Check:
        if self.http_check is not None and self.cloudwatch_check is not None:
            raise ValueError("a check holds either http_check or cloudwatch_check")
        return self

    @property
    def spec(self) -> HttpCheck | CloudWatchCheck | None:
        return self.http_check or self.cloudwatch_check

    def backend_payload(self) -> dict[str, Any]:
        # Results and notifications live in other backends; never send them to check management.
        return self.model_dump(mode="json", exclude={"results", "notifications"}, exclude_none=True)


class StateTransition(_Wire):
    check_id: str
    customer_id: str = ""
    from_state: str = ""
    to_state: str = ""
    occurred_at: datetime | None = None


class TestCheckResponse(_Wire):
    responses: list[CheckResponse] = Field(default_factory=list)


# --- Module Notes -----------------------------------------------------------
# Serialized variants (`check_spec`, `CheckResponse.response`) are decoded into the
# structured slots by `schema.variants`; unknown tags leave the slots empty.
