# src/beacon/sender.py
"""TelemetrySender: public entry point for delivering batches.

Pure composition of the encoder, the delivery controller and a transport.
One sender can be shared across threads; each send keeps its retry state
local to the call.
"""

from __future__ import annotations

import gzip
import threading
from collections.abc import Callable
from types import TracebackType

from beacon import __version__
from beacon.contracts.batch import EventBatch, MetricBatch, SpanBatch, TelemetryBatch
from beacon.contracts.results import DeliveryResult
from beacon.delivery.clock import Clock
from beacon.delivery.controller import DeliveryController
from beacon.delivery.retry import RetryPolicy
from beacon.encoding.payload import MEDIA_TYPE, encode_batch
from beacon.providers import CredentialProvider, EndpointProvider
from beacon.transport.protocols import HttpPoster

USER_AGENT = f"beacon-python/{__version__}"

# The trace ingest endpoint requires the payload format to be declared
SPAN_FORMAT_HEADERS: dict[str, str] = {
    "Data-Format": "newrelic",
    "Data-Format-Version": "1",
}


def gzip_encoder(encoder: Callable[[TelemetryBatch], bytes] = encode_batch) -> Callable[[TelemetryBatch], bytes]:
    """Wrap an encoder so its output is gzip-compressed.

    mtime is pinned to 0 so the same batch always compresses to the same
    bytes, keeping retries byte-identical.
    """

    def encode(batch: TelemetryBatch) -> bytes:
        return gzip.compress(encoder(batch), mtime=0)

    return encode


class TelemetrySender:
    """Sends metric, span and event batches.

    Example:
        sender = TelemetrySender(
            HttpxPoster(),
            credentials=StaticApiKey(key),
            endpoints=StaticEndpoints({...}),
        )
        result = sender.send_metric_batch(batch)
    """

    def __init__(
        self,
        poster: HttpPoster,
        *,
        credentials: CredentialProvider,
        endpoints: EndpointProvider,
        retry_policy: RetryPolicy | None = None,
        clock: Clock | None = None,
        user_agent_product: str | None = None,
        gzip: bool = False,
    ) -> None:
        self._poster = poster
        self._credentials = credentials
        self._endpoints = endpoints
        self._gzip = gzip
        self._user_agent = f"{USER_AGENT} {user_agent_product}" if user_agent_product else USER_AGENT
        self._controller = DeliveryController(
            poster,
            retry_policy=retry_policy,
            clock=clock,
            encoder=gzip_encoder() if gzip else encode_batch,
        )

    @property
    def user_agent(self) -> str:
        return self._user_agent

    def send_metric_batch(self, batch: MetricBatch, *, cancel: threading.Event | None = None) -> DeliveryResult:
        """Deliver a metric batch. See DeliveryController.deliver."""
        return self._send(batch, cancel)

    def send_span_batch(self, batch: SpanBatch, *, cancel: threading.Event | None = None) -> DeliveryResult:
        """Deliver a span batch. See DeliveryController.deliver."""
        return self._send(batch, cancel)

    def send_event_batch(self, batch: EventBatch, *, cancel: threading.Event | None = None) -> DeliveryResult:
        """Deliver an event batch. See DeliveryController.deliver."""
        return self._send(batch, cancel)

    def _send(self, batch: TelemetryBatch, cancel: threading.Event | None) -> DeliveryResult:
        return self._controller.deliver(
            batch,
            url=self._endpoints.url_for(batch.kind),
            headers=self._headers_for(batch),
            media_type=MEDIA_TYPE,
            cancel=cancel,
        )

    def _headers_for(self, batch: TelemetryBatch) -> dict[str, str]:
        headers = dict(self._credentials.auth_headers())
        headers["User-Agent"] = self._user_agent
        if self._gzip:
            headers["Content-Encoding"] = "gzip"
        if isinstance(batch, SpanBatch):
            headers.update(SPAN_FORMAT_HEADERS)
        return headers

    def close(self) -> None:
        """Close the transport if it holds resources."""
        close = getattr(self._poster, "close", None)
        if callable(close):
            close()

    def __enter__(self) -> TelemetrySender:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
