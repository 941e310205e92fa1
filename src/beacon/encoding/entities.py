# src/beacon/encoding/entities.py
"""Per-entity JSON shapes.

One function per telemetry variant, registered on ``entity_to_dict`` with
functools.singledispatch. Each returns a plain dict whose insertion order
IS the wire key order; payload.py renders these with compact separators.

Conventions shared by every variant:
- Optional fields that are None are omitted entirely (no ``null``).
- Numbers keep their Python type: ints stay integral, floats keep full
  precision via repr. NaN and infinity are rejected with EncodingError.
- Metric attributes are omitted when empty; span and event attributes are
  always present (``{}`` when empty).
"""

from __future__ import annotations

import math
from functools import singledispatch
from typing import Any

from beacon.contracts.attributes import Attributes
from beacon.contracts.errors import EncodingError
from beacon.contracts.telemetry import Count, Event, Gauge, MetricType, Span, Summary


def _finite(entity: str, field_name: str, value: int | float) -> int | float:
    if isinstance(value, float) and not math.isfinite(value):
        raise EncodingError(f"{entity}.{field_name} must be finite, got {value}")
    return value


def attributes_to_dict(attributes: Attributes) -> dict[str, Any]:
    """Render attributes in insertion order, rejecting non-finite floats."""
    rendered: dict[str, Any] = {}
    for key, value in attributes.items():
        if isinstance(value, float) and not math.isfinite(value):
            raise EncodingError(f"Attribute '{key}' must be finite, got {value}")
        rendered[key] = value
    return rendered


@singledispatch
def entity_to_dict(entity: object) -> dict[str, Any]:
    """Render one telemetry entity as an ordered dict."""
    raise EncodingError(f"No encoder registered for {type(entity).__name__}")


# =============================================================================
# Metrics
# =============================================================================


def _with_metric_attributes(out: dict[str, Any], attributes: Attributes) -> dict[str, Any]:
    if not attributes.is_empty():
        out["attributes"] = attributes_to_dict(attributes)
    return out


@entity_to_dict.register
def gauge_to_dict(gauge: Gauge) -> dict[str, Any]:
    out: dict[str, Any] = {
        "name": gauge.name,
        "type": MetricType.GAUGE.value,
        "value": _finite("Gauge", "value", gauge.value),
        "timestamp": gauge.timestamp,
    }
    return _with_metric_attributes(out, gauge.attributes)


@entity_to_dict.register
def count_to_dict(count: Count) -> dict[str, Any]:
    out: dict[str, Any] = {
        "name": count.name,
        "type": MetricType.COUNT.value,
        "value": _finite("Count", "value", count.value),
        "timestamp": count.timestamp,
        "interval.ms": count.interval_ms,
    }
    return _with_metric_attributes(out, count.attributes)


@entity_to_dict.register
def summary_to_dict(summary: Summary) -> dict[str, Any]:
    out: dict[str, Any] = {
        "name": summary.name,
        "type": MetricType.SUMMARY.value,
        "value": {
            "count": summary.count,
            "sum": _finite("Summary", "sum", summary.sum),
            "min": _finite("Summary", "min", summary.min),
            "max": _finite("Summary", "max", summary.max),
        },
        "timestamp": summary.timestamp,
        "interval.ms": summary.interval_ms,
    }
    return _with_metric_attributes(out, summary.attributes)


def metric_to_dict(metric: Gauge | Count | Summary) -> dict[str, Any]:
    """Render any metric variant."""
    return entity_to_dict(metric)


# =============================================================================
# Spans and Events
# =============================================================================


@entity_to_dict.register
def span_to_dict(span: Span) -> dict[str, Any]:
    out: dict[str, Any] = {"id": span.id}
    if span.trace_id is not None:
        out["trace.id"] = span.trace_id
    out["timestamp"] = span.timestamp

    # Reserved span fields travel inside the attributes object, ahead of
    # the caller's own attributes, which may not override them.
    attributes: dict[str, Any] = {"duration.ms": _finite("Span", "duration_ms", span.duration_ms)}
    if span.name is not None:
        attributes["name"] = span.name
    if span.service_name is not None:
        attributes["service.name"] = span.service_name
    if span.parent_id is not None:
        attributes["parent.id"] = span.parent_id
    for key, value in attributes_to_dict(span.attributes).items():
        attributes.setdefault(key, value)
    out["attributes"] = attributes
    return out


@entity_to_dict.register
def event_to_dict(event: Event) -> dict[str, Any]:
    return {
        "eventType": event.event_type,
        "timestamp": event.timestamp,
        "attributes": attributes_to_dict(event.attributes),
    }
