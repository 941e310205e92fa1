# tests/property/conftest.py
"""Hypothesis strategies shared by the property tests."""

from __future__ import annotations

from hypothesis import strategies as st

from beacon.contracts import Attributes, Count, Event, Gauge, Span, Summary

# Values cover every scalar type the wire accepts
attribute_keys = st.text(min_size=1, max_size=12)
finite_floats = st.floats(allow_nan=False, allow_infinity=False)
attribute_values = st.one_of(
    st.text(max_size=20),
    st.integers(min_value=-(2**63), max_value=2**64),
    finite_floats,
    st.booleans(),
)
timestamps = st.integers(min_value=0, max_value=2**53)
names = st.text(min_size=1, max_size=20)


@st.composite
def attributes(draw: st.DrawFn, max_size: int = 5) -> Attributes:
    pairs = draw(st.lists(st.tuples(attribute_keys, attribute_values), max_size=max_size))
    built = Attributes()
    for key, value in pairs:
        built.put(key, value)
    return built.frozen()


gauges = st.builds(Gauge, name=names, value=finite_floats, timestamp=timestamps, attributes=attributes())
counts = st.builds(
    Count,
    name=names,
    value=st.integers(min_value=0, max_value=2**40),
    timestamp=timestamps,
    interval_ms=st.integers(min_value=0, max_value=86_400_000),
    attributes=attributes(),
)
summaries = st.builds(
    Summary,
    name=names,
    count=st.integers(min_value=0, max_value=10_000),
    sum=finite_floats,
    min=finite_floats,
    max=finite_floats,
    timestamp=timestamps,
    interval_ms=st.integers(min_value=0, max_value=86_400_000),
    attributes=attributes(),
)
metrics = st.one_of(gauges, counts, summaries)


@st.composite
def spans(draw: st.DrawFn) -> Span:
    span_id = draw(st.uuids()).hex
    return Span(
        id=span_id,
        trace_id=draw(st.uuids()).hex,
        timestamp=draw(timestamps),
        duration_ms=draw(st.floats(min_value=0, max_value=1e9)),
        name=draw(st.none() | names),
        service_name=draw(st.none() | names),
        attributes=draw(attributes()),
    )


events = st.builds(Event, event_type=names, timestamp=timestamps, attributes=attributes())

# Delays that keep RetryPolicy valid
valid_base_delays = st.floats(min_value=0.0, max_value=10.0)
valid_jitter = st.floats(min_value=0.0, max_value=10.0)
valid_exponential_bases = st.floats(min_value=1.0, max_value=5.0)
