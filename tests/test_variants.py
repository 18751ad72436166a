"""
tests.test_variants

Tagged-union decoding for check specs and response payloads.
"""

from __future__ import annotations

import json

import pytest

from monitor_gateway.errors import PayloadDecodeError
from monitor_gateway.schema.checks import Check, CheckResponse, CloudWatchCheck, TypedPayload
from monitor_gateway.schema.variants import (
    encode_payload,
    resolve_check_spec,
    resolve_response,
    variant_tag,
)


def test_tag_is_the_last_path_segment() -> None:
    assert variant_tag("type.googleapis.com/CloudWatchResponse") == "CloudWatchResponse"
    assert variant_tag("HttpCheck") == "HttpCheck"


def test_cloudwatch_spec_fills_only_its_slot() -> None:
    spec = CloudWatchCheck.model_validate({"metrics": [{"namespace": "AWS/RDS", "name": "CPUUtilization"}]})
    check = resolve_check_spec(Check(id="c1", check_spec=encode_payload(spec)))

    assert check.cloudwatch_check == spec
    assert check.http_check is None


def test_unknown_tag_leaves_slots_empty() -> None:
    response = resolve_response(
        CheckResponse(response=TypedPayload(type_url="type.googleapis.com/Ping", value="{}"))
    )

    assert response.reply is None


def test_known_tag_with_bad_value_is_a_decode_error() -> None:
    with pytest.raises(PayloadDecodeError):
        resolve_response(
            CheckResponse(response=TypedPayload(type_url="HttpResponse", value="{oops"))
        )


def test_structured_slot_wins_over_serialized_payload() -> None:
    check = Check.model_validate(
        {
            "http_check": {"port": 8080},
            "check_spec": {"type_url": "CloudWatchCheck", "value": json.dumps({"metrics": []})},
        }
    )

    resolve_check_spec(check)

    assert check.http_check.port == 8080
    assert check.cloudwatch_check is None


def test_a_check_cannot_hold_both_specs() -> None:
    with pytest.raises(ValueError):
        Check.model_validate({"http_check": {}, "cloudwatch_check": {}})
