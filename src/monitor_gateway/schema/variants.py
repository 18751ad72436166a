"""
monitor_gateway.schema.variants

Tagged-union codec for serialized check specs and response payloads.

Responsibilities:
- Map a payload's type tag onto the closed variant set and fill the matching slot.
- Encode a structured variant back into its serialized form.
"""

from __future__ import annotations

import json

from pydantic import BaseModel, ValidationError

from monitor_gateway.errors import PayloadDecodeError
from monitor_gateway.schema.checks import (
    Check,
    CheckResponse,
    CloudWatchCheck,
    CloudWatchResponse,
    HttpCheck,
    HttpResponse,
    TypedPayload,
)

# tag -> (slot name on the owning model, variant model)
CHECK_SPEC_VARIANTS: dict[str, tuple[str, type[BaseModel]]] = {
    "HttpCheck": ("http_check", HttpCheck),
    "CloudWatchCheck": ("cloudwatch_check", CloudWatchCheck),
}

RESPONSE_VARIANTS: dict[str, tuple[str, type[BaseModel]]] = {
    "HttpResponse": ("http_response", HttpResponse),
    "CloudWatchResponse": ("cloudwatch_response", CloudWatchResponse),
}


def variant_tag(type_url: str) -> str:
    # "type.googleapis.com/HttpCheck" and "HttpCheck" name the same variant.
    return type_url.rstrip("/").rsplit("/", 1)[-1]


def decode_payload(
    payload: TypedPayload,
    variants: dict[str, tuple[str, type[BaseModel]]],
) -> tuple[str, BaseModel] | None:
    """
    Returns (slot, decoded model), or None when the tag is not a known variant.
    A known tag whose value does not parse is a data-integrity failure.
    """

    known = variants.get(variant_tag(payload.type_url))
    if known is None:
        return None

    slot, model = known
    try:
        return slot, model.model_validate(json.loads(payload.value or "{}"))
    except (ValueError, ValidationError) as e:
        raise PayloadDecodeError(f"malformed {payload.type_url} payload: {e}") from e


def encode_payload(variant: BaseModel) -> TypedPayload:
    return TypedPayload(type_url=type(variant).__name__, value=variant.model_dump_json())


def resolve_check_spec(check: Check) -> Check:
    if check.spec is not None or check.check_spec is None:
        return check
    decoded = decode_payload(check.check_spec, CHECK_SPEC_VARIANTS)
    if decoded is not None:
        slot, spec = decoded
        setattr(check, slot, spec)
    return check


def resolve_response(response: CheckResponse) -> CheckResponse:
    if response.reply is not None or response.response is None:
        return response
    decoded = decode_payload(response.response, RESPONSE_VARIANTS)
    if decoded is not None:
        slot, reply = decoded
        setattr(response, slot, reply)
    return response


# --- Module Notes -----------------------------------------------------------
# Adding a variant means adding one row to the tables above and a slot on the
# owning model; nothing dispatches on Python types.
