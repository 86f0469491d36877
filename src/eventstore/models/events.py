"""Event record helpers."""

from __future__ import annotations

import json
import math
from typing import Any, TypeAlias

from eventstore.errors import InvalidEventPayloadError

EventRecord: TypeAlias = dict[str, Any]

INVALID_JSON_MESSAGE = "Invalid JSON body"
NOT_AN_OBJECT_MESSAGE = "Event payload must be a JSON object"


def _reject_constant(name: str) -> Any:
    msg = f"Unsupported JSON constant: {name}"
    raise ValueError(msg)


def _parse_finite_float(text: str) -> float:
    value = float(text)
    if not math.isfinite(value):
        msg = f"Number out of range: {text}"
        raise ValueError(msg)
    return value


def decode_event_payload(body: bytes) -> dict[str, Any]:
    """Decode a raw request body into an event payload.

    Only finite standard JSON is accepted: ``NaN``, ``Infinity`` and numbers
    that overflow a float are rejected so that every stored record can be
    serialized back out.
    """
    try:
        payload = json.loads(
            body.decode("utf-8"),
            parse_constant=_reject_constant,
            parse_float=_parse_finite_float,
        )
    except (UnicodeDecodeError, ValueError, RecursionError) as exc:
        raise InvalidEventPayloadError(INVALID_JSON_MESSAGE) from exc
    if not isinstance(payload, dict):
        raise InvalidEventPayloadError(NOT_AN_OBJECT_MESSAGE)
    return payload


def build_event_record(event_id: str, payload: dict[str, Any]) -> EventRecord:
    """Merge a generated id with client fields; the generated id wins."""
    record: EventRecord = {"id": event_id}
    record.update((key, value) for key, value in payload.items() if key != "id")
    return record
