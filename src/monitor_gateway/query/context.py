"""
monitor_gateway.query.context

Per-query scratch space threaded through the resolver tree.

Responsibilities:
- Carry the calling user.
- Hold region and vpc, bound once by ancestor resolvers and read by leaves.
- Fail loudly when a leaf reads a value no ancestor has bound.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from monitor_gateway.auth.models import User
from monitor_gateway.errors import MissingRegionError, MissingVpcError


@dataclass(slots=True, eq=False)
class QueryContext:
    """
    Allocated fresh for every query and dropped with it; never pooled or shared.
    """

    user: User
    _region: str | None = field(default=None, init=False)
    _vpc: str | None = field(default=None, init=False)

    def bind_region(self, region: str | None) -> None:
        if not region:
            raise MissingRegionError()
        if self._region is not None and self._region != region:
            raise RuntimeError("region is already bound for this query")
        self._region = region

    def bind_vpc(self, vpc: str | None) -> None:
        if not vpc:
            raise MissingVpcError()
        if self._vpc is not None and self._vpc != vpc:
            raise RuntimeError("vpc is already bound for this query")
        self._vpc = vpc

    @property
    def region(self) -> str:
        if not self._region:
            raise MissingRegionError()
        return self._region

    @property
    def vpc(self) -> str:
        if not self._vpc:
            raise MissingVpcError()
        return self._vpc


# --- Module Notes -----------------------------------------------------------
# No locking: each field has a single writer (its ancestor resolver) per query.
