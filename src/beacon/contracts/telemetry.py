# src/beacon/contracts/telemetry.py
"""Telemetry entity model: metrics, spans and events.

Each entity pairs its required fields with a frozen Attributes bag. The
variants are flat frozen dataclasses; the encoder dispatches on the
concrete type rather than through an inheritance hierarchy.

Construction validates structural invariants and raises EncodingError
(a ValueError) so malformed telemetry is rejected before it reaches the
wire. Value-level checks that depend on rendering (NaN, infinity, span
trace-id resolution against the batch) happen in the encoder.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import ClassVar, Union

from beacon.contracts.attributes import EMPTY_ATTRIBUTES, Attributes, AttributeValue, attach
from beacon.contracts.errors import EncodingError

Number = Union[int, float]
AttributesLike = Union[Attributes, Mapping[str, AttributeValue], None]


class TelemetryKind(StrEnum):
    """Telemetry kinds; the value is the payload key for the entity array."""

    METRICS = "metrics"
    SPANS = "spans"
    EVENTS = "events"


class MetricType(StrEnum):
    """Wire ``type`` discriminator for metric variants."""

    GAUGE = "gauge"
    COUNT = "count"
    SUMMARY = "summary"


def _require_text(entity: str, field_name: str, value: object) -> None:
    if not isinstance(value, str) or not value:
        raise EncodingError(f"{entity}.{field_name} must be a non-empty string, got {value!r}")


def _require_number(entity: str, field_name: str, value: object) -> None:
    # bool is an int subclass but renders as true/false, not a number
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise EncodingError(f"{entity}.{field_name} must be a number, got {type(value).__name__}")


def _require_timestamp(entity: str, value: object) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise EncodingError(f"{entity}.timestamp must be integer epoch milliseconds, got {value!r}")


def _require_interval(entity: str, value: object) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise EncodingError(f"{entity}.interval_ms must be an integer, got {value!r}")
    if value < 0:
        raise EncodingError(f"{entity}.interval_ms must be >= 0, got {value}")


def _attach(instance: object, attributes: AttributesLike) -> None:
    object.__setattr__(instance, "attributes", attach(attributes))


# =============================================================================
# Metrics
# =============================================================================


@dataclass(frozen=True, slots=True)
class Gauge:
    """A single sampled value at a point in time."""

    kind: ClassVar[TelemetryKind] = TelemetryKind.METRICS
    metric_type: ClassVar[MetricType] = MetricType.GAUGE

    name: str
    value: Number
    timestamp: int
    attributes: Attributes = field(default=EMPTY_ATTRIBUTES)

    def __post_init__(self) -> None:
        _require_text("Gauge", "name", self.name)
        _require_number("Gauge", "value", self.value)
        _require_timestamp("Gauge", self.timestamp)
        _attach(self, self.attributes)


@dataclass(frozen=True, slots=True)
class Count:
    """A delta count accumulated over ``interval_ms`` ending at ``timestamp``."""

    kind: ClassVar[TelemetryKind] = TelemetryKind.METRICS
    metric_type: ClassVar[MetricType] = MetricType.COUNT

    name: str
    value: Number
    timestamp: int
    interval_ms: int
    attributes: Attributes = field(default=EMPTY_ATTRIBUTES)

    def __post_init__(self) -> None:
        _require_text("Count", "name", self.name)
        _require_number("Count", "value", self.value)
        _require_timestamp("Count", self.timestamp)
        _require_interval("Count", self.interval_ms)
        _attach(self, self.attributes)


@dataclass(frozen=True, slots=True)
class Summary:
    """Pre-aggregated distribution (count/sum/min/max) over an interval."""

    kind: ClassVar[TelemetryKind] = TelemetryKind.METRICS
    metric_type: ClassVar[MetricType] = MetricType.SUMMARY

    name: str
    count: int
    sum: Number
    min: Number
    max: Number
    timestamp: int
    interval_ms: int
    attributes: Attributes = field(default=EMPTY_ATTRIBUTES)

    def __post_init__(self) -> None:
        _require_text("Summary", "name", self.name)
        if isinstance(self.count, bool) or not isinstance(self.count, int) or self.count < 0:
            raise EncodingError(f"Summary.count must be a non-negative integer, got {self.count!r}")
        for field_name in ("sum", "min", "max"):
            _require_number("Summary", field_name, getattr(self, field_name))
        _require_timestamp("Summary", self.timestamp)
        _require_interval("Summary", self.interval_ms)
        _attach(self, self.attributes)


Metric = Union[Gauge, Count, Summary]


# =============================================================================
# Spans
# =============================================================================


@dataclass(frozen=True, slots=True)
class Span:
    """One unit of work in a distributed trace.

    ``trace_id`` may be left as None when the span travels in a SpanBatch
    that carries a shared trace id.
    """

    kind: ClassVar[TelemetryKind] = TelemetryKind.SPANS

    id: str
    timestamp: int
    duration_ms: Number
    trace_id: str | None = None
    name: str | None = None
    parent_id: str | None = None
    service_name: str | None = None
    attributes: Attributes = field(default=EMPTY_ATTRIBUTES)

    def __post_init__(self) -> None:
        _require_text("Span", "id", self.id)
        if self.trace_id is not None:
            _require_text("Span", "trace_id", self.trace_id)
        if self.parent_id is not None:
            _require_text("Span", "parent_id", self.parent_id)
            if self.parent_id == self.id:
                raise EncodingError(f"Span {self.id!r} cannot be its own parent")
        if self.name is not None:
            _require_text("Span", "name", self.name)
        if self.service_name is not None:
            _require_text("Span", "service_name", self.service_name)
        _require_timestamp("Span", self.timestamp)
        _require_number("Span", "duration_ms", self.duration_ms)
        if self.duration_ms < 0:
            raise EncodingError(f"Span.duration_ms must be >= 0, got {self.duration_ms}")
        _attach(self, self.attributes)


# =============================================================================
# Events
# =============================================================================


@dataclass(frozen=True, slots=True)
class Event:
    """A free-form structured event."""

    kind: ClassVar[TelemetryKind] = TelemetryKind.EVENTS

    event_type: str
    timestamp: int
    attributes: Attributes = field(default=EMPTY_ATTRIBUTES)

    def __post_init__(self) -> None:
        _require_text("Event", "event_type", self.event_type)
        _require_timestamp("Event", self.timestamp)
        _attach(self, self.attributes)


Telemetry = Union[Gauge, Count, Summary, Span, Event]
