"""
monitor_gateway.api.routers.query

Query endpoint for the fixed query shapes.

Responsibilities:
- Accept a `QueryDocument`, resolve it for the calling user, return data + field errors.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from monitor_gateway.api.deps import executor_dep
from monitor_gateway.auth.deps import get_user
from monitor_gateway.auth.models import User
from monitor_gateway.query.document import QueryDocument, QueryResult
from monitor_gateway.query.executor import QueryExecutor

router = APIRouter(prefix="/v1", tags=["query"])


@router.post("/query", response_model=QueryResult)
async def run_query(
    document: QueryDocument,
    user: User = Depends(get_user),
    executor: QueryExecutor = Depends(executor_dep),
) -> QueryResult:
    # Field failures come back in `errors` with a 200; only malformed documents are rejected.
    return await executor.execute(user, document)
