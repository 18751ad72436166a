"""
monitor_gateway.backends.result_store

Accessor for check results kept in DynamoDB.

Responsibilities:
- Find result references through a secondary index (by check or by customer).
- Re-fetch each full result item, then each of its responses by id.
- Fail closed: any error at any level aborts the fetch with no partial output.

Layout:
- `check_results` (pk `result_id`), indexes `check_id-index` and `customer_id-index`
  that project only key attributes.
- `check_responses` (pk `response_id`), payload stored under a single attribute.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

import structlog
from boto3.dynamodb.types import Binary, TypeDeserializer
from botocore.exceptions import BotoCoreError, ClientError

from monitor_gateway.errors import PayloadDecodeError, ResultStoreError, StoreIntegrityError
from monitor_gateway.schema.checks import CheckResponse, CheckResult
from monitor_gateway.schema.variants import resolve_response
from monitor_gateway.settings import Settings

log = structlog.get_logger(__name__)

_deserializer = TypeDeserializer()


@dataclass(frozen=True, slots=True)
class ResultStoreTables:
    results: str = "check_results"
    check_id_index: str = "check_id-index"
    customer_id_index: str = "customer_id-index"
    responses: str = "check_responses"
    payload_attribute: str = "response_payload"

    @classmethod
    def from_settings(cls, settings: Settings) -> ResultStoreTables:
        return cls(
            results=settings.check_result_table,
            check_id_index=settings.check_result_check_id_index,
            customer_id_index=settings.check_result_customer_id_index,
            responses=settings.check_response_table,
            payload_attribute=settings.response_payload_attribute,
        )


class ResultStore:
    """
    Blocking accessor; callers on the event loop run it via `asyncio.to_thread`.
    Cost is one Query page per index page, one GetItem per result and one per response.
    """

    def __init__(self, *, client: Any, tables: ResultStoreTables | None = None) -> None:
        self._client = client
        self._tables = tables or ResultStoreTables()

    def get_results(self, customer_id: str, check_id: str | None = None) -> list[CheckResult]:
        logger = log.bind(fn="get_results", customer_id=customer_id, check_id=check_id)

        if check_id:
            index, key, value = self._tables.check_id_index, "check_id", check_id
        else:
            index, key, value = self._tables.customer_id_index, "customer_id", customer_id

        results: list[CheckResult] = []
        for ref in self._query_index(index=index, key=key, value=value, logger=logger):
            result_key = ref.get("result_id")
            if result_key is None:
                raise StoreIntegrityError(f"index {index} returned an item without result_id")
            results.append(self._load_result(result_key, logger=logger))

        logger.debug("results_loaded", count=len(results))
        return results

    def _query_index(
        self, *, index: str, key: str, value: str, logger: Any
    ) -> list[dict[str, Any]]:
        params: dict[str, Any] = {
            "TableName": self._tables.results,
            "IndexName": index,
            "KeyConditionExpression": f"{key} = :{key}",
            "ExpressionAttributeValues": {f":{key}": {"S": value}},
        }
        items: list[dict[str, Any]] = []
        while True:
            try:
                page = self._client.query(**params)
            except (BotoCoreError, ClientError) as e:
                logger.error("result_index_query_failed", index=index, error=str(e))
                raise ResultStoreError(f"query on {index} failed: {e}") from e
            items.extend(page.get("Items", []))
            last_key = page.get("LastEvaluatedKey")
            if not last_key:
                return items
            params["ExclusiveStartKey"] = last_key

    def _load_result(self, result_key: dict[str, Any], *, logger: Any) -> CheckResult:
        result_id = _deserializer.deserialize(result_key)
        logger = logger.bind(result_id=result_id)

        item = self._get_item(self._tables.results, {"result_id": result_key}, logger=logger)
        if item is None:
            logger.error("result_item_missing")
            raise StoreIntegrityError(f"result {result_id} is indexed but has no item")
        fields = unmarshal_item(item)

        response_ids = fields.pop("responses", None) or []
        if not isinstance(response_ids, list) or not all(isinstance(r, str) for r in response_ids):
            logger.error("result_response_list_invalid")
            raise StoreIntegrityError(f"result {result_id} has a malformed response list")

        try:
            result = CheckResult.model_validate(fields)
        except ValueError as e:
            logger.error("result_item_invalid", error=str(e))
            raise StoreIntegrityError(f"result {result_id} is undecodable: {e}") from e

        # Order and length follow the id list stored on the result.
        result.responses = [self._load_response(rid, logger=logger) for rid in response_ids]
        return result

    def _load_response(self, response_id: str, *, logger: Any) -> CheckResponse:
        logger = logger.bind(response_id=response_id)

        item = self._get_item(
            self._tables.responses, {"response_id": {"S": response_id}}, logger=logger
        )
        attribute = self._tables.payload_attribute
        if item is None or attribute not in item:
            logger.error("response_payload_missing", attribute=attribute)
            raise StoreIntegrityError(f"response {response_id} has no {attribute} attribute")

        raw = _deserializer.deserialize(item[attribute])
        if isinstance(raw, Binary):
            raw = raw.value
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8", errors="strict")

        try:
            response = CheckResponse.model_validate(json.loads(raw))
            response.response_id = response.response_id or response_id
            return resolve_response(response)
        except (TypeError, ValueError, PayloadDecodeError) as e:
            logger.error("response_payload_invalid", error=str(e))
            raise StoreIntegrityError(f"response {response_id} payload is undecodable") from e

    def _get_item(
        self, table: str, key: dict[str, Any], *, logger: Any
    ) -> dict[str, Any] | None:
        try:
            out = self._client.get_item(TableName=table, Key=key)
        except (BotoCoreError, ClientError) as e:
            logger.error("get_item_failed", table=table, error=str(e))
            raise ResultStoreError(f"get_item on {table} failed: {e}") from e
        return out.get("Item")


def unmarshal_item(item: dict[str, Any]) -> dict[str, Any]:
    return {k: _plain(_deserializer.deserialize(v)) for k, v in item.items()}


def _plain(value: Any) -> Any:
    # DynamoDB numbers come back as Decimal and sets as set; models want JSON-ish types.
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    if isinstance(value, Binary):
        return value.value
    if isinstance(value, (set, frozenset)):
        return sorted(_plain(v) for v in value)
    if isinstance(value, list):
        return [_plain(v) for v in value]
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    return value


# --- Module Notes -----------------------------------------------------------
# Gets are issued one at a time, unbatched. Latency grows with result and response counts.
