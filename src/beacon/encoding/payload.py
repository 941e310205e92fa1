# src/beacon/encoding/payload.py
"""Batch-level payload assembly.

Wire layout (key order is part of the contract):

    {"common":{"traceId":"...","attributes":{...}},"metrics":[{...},...]}

- ``common`` is present only when the batch has common attributes and/or
  a shared trace id. Inside it the trace id comes first.
- The kind key (``metrics``, ``spans`` or ``events``) is always present,
  rendered as ``[]`` for an empty batch.

Rendering is pure: the same batch always yields the same bytes.
"""

from __future__ import annotations

import json
from typing import Any

from beacon.contracts.batch import SpanBatch, TelemetryBatch
from beacon.contracts.errors import EncodingError
from beacon.encoding.entities import attributes_to_dict, entity_to_dict

MEDIA_TYPE = "application/json; charset=utf-8"


def _dumps(value: Any) -> str:
    try:
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False, allow_nan=False)
    except (TypeError, ValueError) as e:
        raise EncodingError(f"Payload is not JSON-serializable: {e}") from e


def common_block(batch: TelemetryBatch) -> dict[str, Any] | None:
    """Return the hoisted ``common`` object, or None when there is nothing to hoist."""
    trace_id = batch.trace_id if isinstance(batch, SpanBatch) else None
    if trace_id is None and not batch.has_common_attributes:
        return None

    common: dict[str, Any] = {}
    if trace_id is not None:
        common["traceId"] = trace_id
    if batch.has_common_attributes:
        common["attributes"] = attributes_to_dict(batch.common_attributes)
    return common


def telemetry_block(batch: TelemetryBatch) -> list[dict[str, Any]]:
    """Return the per-entity encodings in batch order."""
    if isinstance(batch, SpanBatch) and batch.trace_id is None:
        for span in batch.entities:
            if span.trace_id is None:
                raise EncodingError(f"Span {span.id!r} has no trace id and the batch has no shared trace id")
    return [entity_to_dict(entity) for entity in batch.entities]


def render_common_block(batch: TelemetryBatch) -> str:
    """Render ``"common":{...}`` or an empty string."""
    common = common_block(batch)
    if common is None:
        return ""
    return f'"common":{_dumps(common)}'


def render_telemetry_block(batch: TelemetryBatch) -> str:
    """Render ``"<kind>":[...]``."""
    return f"{_dumps(batch.kind.value)}:{_dumps(telemetry_block(batch))}"


def render_batch(batch: TelemetryBatch) -> str:
    """Render the complete payload as JSON text."""
    common = render_common_block(batch)
    telemetry = render_telemetry_block(batch)
    if common:
        return "{" + common + "," + telemetry + "}"
    return "{" + telemetry + "}"


def encode_batch(batch: TelemetryBatch) -> bytes:
    """Encode a batch to UTF-8 payload bytes.

    Raises:
        EncodingError: If any entity or attribute cannot be rendered.
    """
    return render_batch(batch).encode("utf-8")
