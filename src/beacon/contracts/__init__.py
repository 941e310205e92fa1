"""Shared data contracts: attributes, telemetry entities, batches, errors, results.

Everything that crosses a component boundary (encoder, controller,
transport, sender) is defined here so those components depend on the
contracts rather than on each other.
"""

from beacon.contracts.attributes import EMPTY_ATTRIBUTES, Attributes, AttributeValue
from beacon.contracts.batch import (
    EventBatch,
    MetricBatch,
    SpanBatch,
    TelemetryBatch,
    event_batch,
    metric_batch,
    span_batch,
)
from beacon.contracts.errors import (
    CanceledError,
    DeliveryError,
    EncodingError,
    HttpStatusError,
    OversizedPayloadError,
    RateLimitedError,
    RejectedError,
    RetriesExhaustedError,
    ServerError,
    TransientTransportError,
    TransportError,
    UnexpectedResponseError,
    is_retryable,
)
from beacon.contracts.results import DeliveryResult, DeliveryState, HttpResponse
from beacon.contracts.telemetry import (
    Count,
    Event,
    Gauge,
    Metric,
    MetricType,
    Span,
    Summary,
    Telemetry,
    TelemetryKind,
)

__all__ = [
    "EMPTY_ATTRIBUTES",
    "AttributeValue",
    "Attributes",
    "CanceledError",
    "Count",
    "DeliveryError",
    "DeliveryResult",
    "DeliveryState",
    "EncodingError",
    "Event",
    "EventBatch",
    "Gauge",
    "HttpResponse",
    "HttpStatusError",
    "Metric",
    "MetricBatch",
    "MetricType",
    "OversizedPayloadError",
    "RateLimitedError",
    "RejectedError",
    "RetriesExhaustedError",
    "ServerError",
    "Span",
    "SpanBatch",
    "Summary",
    "Telemetry",
    "TelemetryBatch",
    "TelemetryKind",
    "TransientTransportError",
    "TransportError",
    "UnexpectedResponseError",
    "event_batch",
    "is_retryable",
    "metric_batch",
    "span_batch",
]
