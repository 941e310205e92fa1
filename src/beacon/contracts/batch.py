# src/beacon/contracts/batch.py
"""Immutable batches of same-kind telemetry.

A batch groups entities of one kind with batch-level common attributes
(hoisted into the payload's ``common`` block) and, for spans, an optional
shared trace id. Batches are frozen after construction so a send, its
retries and its splits all observe exactly the same data.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field, replace
from typing import ClassVar, Generic, TypeVar

from beacon.contracts.attributes import EMPTY_ATTRIBUTES, Attributes
from beacon.contracts.errors import EncodingError
from beacon.contracts.telemetry import (
    AttributesLike,
    Count,
    Event,
    Gauge,
    Span,
    Summary,
    TelemetryKind,
    _attach,
)

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class _Batch(Generic[T]):
    """Shared behaviour of the kind-specific batches."""

    kind: ClassVar[TelemetryKind]
    _entity_types: ClassVar[tuple[type, ...]]

    entities: tuple[T, ...] = ()
    attributes: Attributes = field(default=EMPTY_ATTRIBUTES)

    def __post_init__(self) -> None:
        entities = tuple(self.entities)
        for entity in entities:
            if not isinstance(entity, self._entity_types):
                raise TypeError(f"{type(self).__name__} cannot hold {type(entity).__name__}")
        object.__setattr__(self, "entities", entities)
        _attach(self, self.attributes)

    @property
    def common_attributes(self) -> Attributes:
        return self.attributes

    @property
    def has_common_attributes(self) -> bool:
        return not self.attributes.is_empty()

    @property
    def is_empty(self) -> bool:
        return not self.entities

    def split(self) -> tuple[_Batch[T], _Batch[T]]:
        """Halve the batch by entity count, keeping order and shared context.

        The first half receives ``len(self) // 2`` entities.

        Raises:
            ValueError: If the batch holds fewer than two entities.
        """
        if len(self.entities) < 2:
            raise ValueError(f"Cannot split a batch of {len(self.entities)} entities")
        middle = len(self.entities) // 2
        return (
            replace(self, entities=self.entities[:middle]),
            replace(self, entities=self.entities[middle:]),
        )

    def __len__(self) -> int:
        return len(self.entities)

    def __iter__(self) -> Iterator[T]:
        return iter(self.entities)


@dataclass(frozen=True, slots=True)
class MetricBatch(_Batch[Gauge | Count | Summary]):
    """Batch of Gauge, Count and Summary metrics."""

    kind: ClassVar[TelemetryKind] = TelemetryKind.METRICS
    _entity_types: ClassVar[tuple[type, ...]] = (Gauge, Count, Summary)


@dataclass(frozen=True, slots=True)
class SpanBatch(_Batch[Span]):
    """Batch of spans, optionally sharing one trace id.

    Spans without their own ``trace_id`` inherit the batch's at encode time.
    """

    kind: ClassVar[TelemetryKind] = TelemetryKind.SPANS
    _entity_types: ClassVar[tuple[type, ...]] = (Span,)

    trace_id: str | None = None

    def __post_init__(self) -> None:
        _Batch.__post_init__(self)
        if self.trace_id is not None and (not isinstance(self.trace_id, str) or not self.trace_id):
            raise EncodingError(f"SpanBatch.trace_id must be a non-empty string, got {self.trace_id!r}")


@dataclass(frozen=True, slots=True)
class EventBatch(_Batch[Event]):
    """Batch of structured events."""

    kind: ClassVar[TelemetryKind] = TelemetryKind.EVENTS
    _entity_types: ClassVar[tuple[type, ...]] = (Event,)


TelemetryBatch = MetricBatch | SpanBatch | EventBatch


def metric_batch(metrics: Iterable[Gauge | Count | Summary], attributes: AttributesLike = None) -> MetricBatch:
    return MetricBatch(tuple(metrics), attributes)  # type: ignore[arg-type]


def span_batch(spans: Iterable[Span], attributes: AttributesLike = None, *, trace_id: str | None = None) -> SpanBatch:
    return SpanBatch(tuple(spans), attributes, trace_id)  # type: ignore[arg-type]


def event_batch(events: Iterable[Event], attributes: AttributesLike = None) -> EventBatch:
    return EventBatch(tuple(events), attributes)  # type: ignore[arg-type]
