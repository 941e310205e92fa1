"""JSON encoding of telemetry batches into the wire payload."""

from beacon.encoding.entities import (
    attributes_to_dict,
    entity_to_dict,
    event_to_dict,
    metric_to_dict,
    span_to_dict,
)
from beacon.encoding.payload import (
    MEDIA_TYPE,
    common_block,
    encode_batch,
    render_batch,
    render_common_block,
    render_telemetry_block,
    telemetry_block,
)

__all__ = [
    "MEDIA_TYPE",
    "attributes_to_dict",
    "common_block",
    "encode_batch",
    "entity_to_dict",
    "event_to_dict",
    "metric_to_dict",
    "render_batch",
    "render_common_block",
    "render_telemetry_block",
    "span_to_dict",
    "telemetry_block",
]
