# tests/integration/test_sender_http.py
"""End-to-end delivery through the real httpx transport.

Everything is real except the network: settings are validated by
pydantic, the sender is built by create_sender, and respx answers the
HTTP requests the pooled httpx.Client makes.
"""

from __future__ import annotations

import gzip
import json
import threading
from concurrent.futures import ThreadPoolExecutor

import httpx
import pytest
import respx

from beacon.contracts import (
    CanceledError,
    Count,
    DeliveryState,
    Event,
    Gauge,
    RejectedError,
    RetriesExhaustedError,
    Span,
    Summary,
    TransientTransportError,
    event_batch,
    metric_batch,
    span_batch,
)
from beacon.core.config import SenderSettings
from beacon.delivery.clock import MockClock
from beacon.factory import create_sender
from beacon.sender import TelemetrySender

METRICS_URL = "https://metric-api.example.test/metric/v1"
SPANS_URL = "https://trace-api.example.test/trace/v1"
EVENTS_URL = "https://insights-collector.example.test/v1/accounts/events"


def _settings(**overrides: object) -> SenderSettings:
    return SenderSettings.model_validate(
        {
            "endpoints": {"metrics_url": METRICS_URL, "spans_url": SPANS_URL, "events_url": EVENTS_URL},
            "retry": {"max_attempts": 4, "jitter_seconds": 0, "max_delay_seconds": 15},
            **overrides,
        }
    )


@pytest.fixture
def clock() -> MockClock:
    return MockClock()


@pytest.fixture
def sender(clock: MockClock):
    with create_sender(_settings(), api_key="integration-key", clock=clock) as s:
        yield s


class TestMetricsEndToEnd:
    @respx.mock
    def test_mixed_metric_batch(self, sender: TelemetrySender) -> None:
        route = respx.post(METRICS_URL).mock(return_value=httpx.Response(202, json={"requestId": "abc"}))
        batch = metric_batch(
            [
                Gauge("temperature", 21.5, 1_700_000_000_000, {"room": "lab"}),
                Count("requests", 12, 1_700_000_000_000, interval_ms=10_000),
                Summary("latency", count=4, sum=10.0, min=1.0, max=4.0, timestamp=1_700_000_000_000, interval_ms=10_000),
            ],
            {"host.name": "worker-1"},
        )

        result = sender.send_metric_batch(batch)

        assert result.state is DeliveryState.SUCCESS
        assert result.response is not None and json.loads(result.response.body) == {"requestId": "abc"}
        request = route.calls.last.request
        assert request.headers["Api-Key"] == "integration-key"
        assert request.headers["Content-Type"] == "application/json; charset=utf-8"
        payload = json.loads(request.content)
        assert payload["common"] == {"attributes": {"host.name": "worker-1"}}
        assert [m["type"] for m in payload["metrics"]] == ["gauge", "count", "summary"]

    @respx.mock
    def test_rate_limit_then_success(self, sender: TelemetrySender, clock: MockClock) -> None:
        route = respx.post(METRICS_URL).mock(
            side_effect=[
                httpx.Response(429, headers={"Retry-After": "3"}),
                httpx.Response(429),
                httpx.Response(202),
            ]
        )

        result = sender.send_metric_batch(metric_batch([Gauge("g", 1.0, 1)]))

        assert result.succeeded
        assert result.attempts == 3
        assert clock.sleeps == [3.0, 3.0]
        assert route.calls[0].request.content == route.calls[2].request.content

    @respx.mock
    def test_persistent_outage_exhausts_retries(self, sender: TelemetrySender, clock: MockClock) -> None:
        route = respx.post(METRICS_URL).mock(return_value=httpx.Response(503))

        result = sender.send_metric_batch(metric_batch([Gauge("g", 1.0, 1)]))

        assert result.state is DeliveryState.FAILED
        assert isinstance(result.error, RetriesExhaustedError)
        assert route.call_count == 4
        assert clock.sleeps == [1.0, 2.0, 4.0]

    @respx.mock
    def test_connection_reset_is_resent_inside_transport(self, sender: TelemetrySender, clock: MockClock) -> None:
        route = respx.post(METRICS_URL).mock(side_effect=[httpx.ReadError("reset"), httpx.Response(202)])

        result = sender.send_metric_batch(metric_batch([Gauge("g", 1.0, 1)]))

        assert result.succeeded
        assert result.attempts == 1
        assert route.call_count == 2
        assert clock.sleeps == []

    @respx.mock
    def test_unreachable_host_backs_off_and_fails(self, sender: TelemetrySender, clock: MockClock) -> None:
        respx.post(METRICS_URL).mock(side_effect=httpx.ConnectError("connection refused"))

        result = sender.send_metric_batch(metric_batch([Gauge("g", 1.0, 1)]))

        assert isinstance(result.error, RetriesExhaustedError)
        assert isinstance(result.error.last_error, TransientTransportError)
        assert len(clock.sleeps) == 3


class TestSpansEndToEnd:
    @respx.mock
    def test_oversized_span_batch_is_split(self, sender: TelemetrySender) -> None:
        route = respx.post(SPANS_URL).mock(
            side_effect=[httpx.Response(413), httpx.Response(202), httpx.Response(202)]
        )
        spans = [Span(id=f"span-{i}", timestamp=1000 + i, duration_ms=5) for i in range(2)]

        result = sender.send_span_batch(span_batch(spans, {"service.name": "checkout"}, trace_id="trace-1"))

        assert result.succeeded
        assert result.was_split
        assert route.call_count == 3
        halves = [json.loads(call.request.content) for call in route.calls[1:]]
        assert [[s["id"] for s in half["spans"]] for half in halves] == [["span-0"], ["span-1"]]
        assert all(half["common"]["traceId"] == "trace-1" for half in halves)
        assert route.calls.last.request.headers["Data-Format"] == "newrelic"

    @respx.mock
    def test_rejected_key_is_fatal(self, sender: TelemetrySender, clock: MockClock) -> None:
        route = respx.post(SPANS_URL).mock(return_value=httpx.Response(403, text="invalid license key"))

        result = sender.send_span_batch(span_batch([Span(id="s", trace_id="t", timestamp=1, duration_ms=1)]))

        assert isinstance(result.error, RejectedError)
        assert result.error.response.body == "invalid license key"
        assert route.call_count == 1
        assert clock.sleeps == []


class TestEventsEndToEnd:
    @respx.mock
    def test_gzip_events(self, clock: MockClock) -> None:
        route = respx.post(EVENTS_URL).mock(return_value=httpx.Response(200))

        with create_sender(_settings(gzip=True), api_key="k", clock=clock) as sender:
            result = sender.send_event_batch(event_batch([Event("Deploy", 1, {"version": "1.2.3"})]))

        assert result.succeeded
        request = route.calls.last.request
        assert request.headers["Content-Encoding"] == "gzip"
        assert json.loads(gzip.decompress(request.content)) == {
            "events": [{"eventType": "Deploy", "timestamp": 1, "attributes": {"version": "1.2.3"}}]
        }

    @respx.mock
    def test_cancel_during_backoff(self) -> None:
        cancel = threading.Event()
        clock = MockClock(on_sleep=lambda _seconds: cancel.set())
        route = respx.post(EVENTS_URL).mock(return_value=httpx.Response(500))

        with create_sender(_settings(), api_key="k", clock=clock) as sender:
            result = sender.send_event_batch(event_batch([Event("Deploy", 1)]), cancel=cancel)

        assert result.state is DeliveryState.CANCELED
        assert isinstance(result.error, CanceledError)
        assert route.call_count == 1


class TestConcurrentSends:
    @respx.mock
    def test_shared_sender_across_threads(self, sender: TelemetrySender) -> None:
        route = respx.post(EVENTS_URL).mock(return_value=httpx.Response(202))
        batches = [event_batch([Event("Tick", i)]) for i in range(20)]

        with ThreadPoolExecutor(max_workers=5) as pool:
            results = list(pool.map(sender.send_event_batch, batches))

        assert all(result.succeeded for result in results)
        assert route.call_count == 20
        timestamps = sorted(json.loads(call.request.content)["events"][0]["timestamp"] for call in route.calls)
        assert timestamps == list(range(20))
