"""
monitor_gateway.backends.aws

Cloud provider accessor (EC2, RDS, ELB, Auto Scaling, CloudWatch).

Responsibilities:
- List instances and groups scoped to a region and VPC, following provider pagination.
- Run point-in-time CloudWatch statistics queries.
- Translate botocore failures into `ProviderError`.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Literal

import boto3
import structlog
from botocore.exceptions import BotoCoreError, ClientError

from monitor_gateway.auth.models import User
from monitor_gateway.errors import MissingGroupTypeError, MissingInstanceTypeError, ProviderError

log = structlog.get_logger(__name__)

InstanceKind = Literal["ec2", "rds"]
GroupKind = Literal["security", "elb", "autoscaling"]

SessionFactory = Callable[[User, str], boto3.session.Session]


def default_session_factory(user: User, region: str) -> boto3.session.Session:
    # Ambient credentials; per-customer role assumption plugs in here.
    return boto3.session.Session(region_name=region)


@dataclass(frozen=True, slots=True)
class Instance:
    kind: InstanceKind
    instance_id: str
    data: dict[str, Any]


@dataclass(frozen=True, slots=True)
class Group:
    kind: GroupKind
    group_id: str
    data: dict[str, Any]


@dataclass(frozen=True, slots=True)
class MetricQuery:
    namespace: str
    dimension_name: str
    dimension_value: str
    metric_name: str
    start: datetime
    end: datetime
    period: int = 60
    statistic: str = "Average"


class CloudProvider:
    """
    Blocking boto3 accessor. Each call builds its clients from a fresh session for
    (user, region); callers on the event loop use `asyncio.to_thread`.
    """

    def __init__(self, *, session_factory: SessionFactory = default_session_factory) -> None:
        self._sessions = session_factory

    def _client(self, user: User, region: str, service: str) -> Any:
        return self._sessions(user, region).client(service)

    # --- instances ------------------------------------------------------------

    def list_instances(
        self,
        user: User,
        *,
        region: str,
        vpc: str,
        kind: str,
        instance_id: str | None = None,
    ) -> list[Instance]:
        log.info("list_instances", customer_id=user.customer_id, region=region, vpc=vpc, kind=kind)
        with _provider_errors(f"list {kind} instances"):
            if kind == "ec2":
                return list(self._ec2_instances(user, region, vpc, instance_id))
            if kind == "rds":
                return list(self._rds_instances(user, region, vpc, instance_id))
        raise MissingInstanceTypeError()

    def _ec2_instances(
        self, user: User, region: str, vpc: str, instance_id: str | None
    ) -> Iterator[Instance]:
        params: dict[str, Any] = {"Filters": [{"Name": "vpc-id", "Values": [vpc]}]}
        if instance_id:
            params["InstanceIds"] = [instance_id]

        paginator = self._client(user, region, "ec2").get_paginator("describe_instances")
        for page in paginator.paginate(**params):
            for reservation in page.get("Reservations", []):
                for inst in reservation.get("Instances") or []:
                    yield Instance(kind="ec2", instance_id=inst.get("InstanceId", ""), data=inst)

    def _rds_instances(
        self, user: User, region: str, vpc: str, instance_id: str | None
    ) -> Iterator[Instance]:
        # DescribeDBInstances has no vpc filter; match on the subnet group instead.
        params: dict[str, Any] = {}
        if instance_id:
            params["DBInstanceIdentifier"] = instance_id

        paginator = self._client(user, region, "rds").get_paginator("describe_db_instances")
        for page in paginator.paginate(**params):
            for inst in page.get("DBInstances", []):
                if (inst.get("DBSubnetGroup") or {}).get("VpcId") != vpc:
                    continue
                yield Instance(
                    kind="rds", instance_id=inst.get("DBInstanceIdentifier", ""), data=inst
                )

    # --- groups ---------------------------------------------------------------

    def list_groups(
        self,
        user: User,
        *,
        region: str,
        vpc: str,
        kind: str,
        group_id: str | None = None,
    ) -> list[Group]:
        log.info("list_groups", customer_id=user.customer_id, region=region, vpc=vpc, kind=kind)
        with _provider_errors(f"list {kind} groups"):
            if kind == "security":
                return list(self._security_groups(user, region, vpc, group_id))
            if kind == "elb":
                return list(self._load_balancers(user, region, vpc, group_id))
            if kind == "autoscaling":
                return list(self._autoscaling_groups(user, region, vpc, group_id))
        raise MissingGroupTypeError()

    def _security_groups(
        self, user: User, region: str, vpc: str, group_id: str | None
    ) -> Iterator[Group]:
        params: dict[str, Any] = {"Filters": [{"Name": "vpc-id", "Values": [vpc]}]}
        if group_id:
            params["GroupIds"] = [group_id]

        paginator = self._client(user, region, "ec2").get_paginator("describe_security_groups")
        for page in paginator.paginate(**params):
            for sg in page.get("SecurityGroups", []):
                yield Group(kind="security", group_id=sg.get("GroupId", ""), data=sg)

    def _load_balancers(
        self, user: User, region: str, vpc: str, group_id: str | None
    ) -> Iterator[Group]:
        params: dict[str, Any] = {}
        if group_id:
            params["LoadBalancerNames"] = [group_id]

        paginator = self._client(user, region, "elb").get_paginator("describe_load_balancers")
        for page in paginator.paginate(**params):
            for lb in page.get("LoadBalancerDescriptions", []):
                if lb.get("VPCId") != vpc:
                    continue
                yield Group(kind="elb", group_id=lb.get("LoadBalancerName", ""), data=lb)

    def _autoscaling_groups(
        self, user: User, region: str, vpc: str, group_id: str | None
    ) -> Iterator[Group]:
        # ASGs only know their subnets; resolve the vpc's subnets first.
        subnets: set[str] = set()
        ec2 = self._client(user, region, "ec2")
        for page in ec2.get_paginator("describe_subnets").paginate(
            Filters=[{"Name": "vpc-id", "Values": [vpc]}]
        ):
            subnets.update(s["SubnetId"] for s in page.get("Subnets", []) if "SubnetId" in s)

        params: dict[str, Any] = {}
        if group_id:
            params["AutoScalingGroupNames"] = [group_id]

        paginator = self._client(user, region, "autoscaling").get_paginator(
            "describe_auto_scaling_groups"
        )
        for page in paginator.paginate(**params):
            for asg in page.get("AutoScalingGroups", []):
                zone_subnets = {
                    s.strip() for s in (asg.get("VPCZoneIdentifier") or "").split(",") if s.strip()
                }
                if not zone_subnets & subnets:
                    continue
                yield Group(
                    kind="autoscaling", group_id=asg.get("AutoScalingGroupName", ""), data=asg
                )

    # --- metrics --------------------------------------------------------------

    def metric_statistics(self, user: User, *, region: str, query: MetricQuery) -> dict[str, Any]:
        with _provider_errors(f"get {query.metric_name} statistics"):
            out = self._client(user, region, "cloudwatch").get_metric_statistics(
                Namespace=query.namespace,
                MetricName=query.metric_name,
                Dimensions=[{"Name": query.dimension_name, "Value": query.dimension_value}],
                StartTime=query.start,
                EndTime=query.end,
                Period=query.period,
                Statistics=[query.statistic],
            )

        datapoints = sorted(out.get("Datapoints", []), key=lambda d: d.get("Timestamp"))
        return {
            "namespace": query.namespace,
            "metric": query.metric_name,
            "statistic": query.statistic,
            "datapoints": [
                {
                    "timestamp": d.get("Timestamp"),
                    "value": d.get(query.statistic),
                    "unit": d.get("Unit", ""),
                }
                for d in datapoints
            ],
        }


@contextmanager
def _provider_errors(action: str) -> Iterator[None]:
    try:
        yield
    except (BotoCoreError, ClientError) as e:
        log.error("provider_call_failed", action=action, error=str(e))
        raise ProviderError(f"{action} failed: {e}") from e


# --- Module Notes -----------------------------------------------------------
# Instance and group payloads are passed through as the provider returns them.
