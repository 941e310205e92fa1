# src/beacon/delivery/controller.py
"""DeliveryController: the encode -> send -> classify -> retry/split state machine.

    ENCODING ──> SENDING ──> SUCCESS
       ^            │  ^
       │            │  └── RETRYING   (transient I/O, 429, 5xx; same bytes)
       │            ├────> FAILED     (encoding error, 4xx, unexpected status,
       │            │                  retries exhausted)
       │            ├────> CANCELED   (cancel event set before a send or
       │            │                  during a backoff wait)
       └─ SPLITTING <┘                (413 with two or more entities;
                                       each half re-encoded and delivered)

Retry timing uses tenacity with strategies from delivery.retry. A new
Retrying object, wait strategy and stop strategy are built for every
send, so the controller itself holds no mutable state and one instance can
serve any number of threads.
"""

from __future__ import annotations

import random
import threading
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

import structlog
from tenacity import RetryCallState, RetryError, Retrying, retry_if_exception, stop_after_attempt

from beacon.contracts.batch import TelemetryBatch
from beacon.contracts.errors import (
    CanceledError,
    DeliveryError,
    EncodingError,
    HttpStatusError,
    OversizedPayloadError,
    RetriesExhaustedError,
    TransientTransportError,
    TransportError,
    is_retryable,
)
from beacon.contracts.results import DeliveryResult, DeliveryState, HttpResponse
from beacon.delivery.clock import DEFAULT_CLOCK, Clock
from beacon.delivery.responses import raise_for_status
from beacon.delivery.retry import RetryPolicy, stop_after_elapsed, wait_monotonic_backoff
from beacon.encoding.payload import MEDIA_TYPE, encode_batch
from beacon.transport.protocols import HttpPoster

logger = structlog.get_logger(__name__)

BatchEncoder = Callable[[TelemetryBatch], bytes]


@dataclass
class _SendProgress:
    """Per-call bookkeeping shared between the retry loop and its callbacks."""

    attempts: int = 0
    last_response: HttpResponse | None = None


class DeliveryController:
    """Delivers one batch to completion and reports a terminal DeliveryResult.

    Example:
        controller = DeliveryController(HttpxPoster(), retry_policy=RetryPolicy())
        result = controller.deliver(batch, url=url, headers={"Api-Key": key})
        if not result.succeeded:
            log_failure(result.error)
    """

    def __init__(
        self,
        poster: HttpPoster,
        *,
        retry_policy: RetryPolicy | None = None,
        clock: Clock | None = None,
        encoder: BatchEncoder = encode_batch,
        rng_factory: Callable[[], random.Random] = random.Random,
    ) -> None:
        """Initialize the controller.

        Args:
            poster: Transport used for every send
            retry_policy: Attempt, delay and elapsed-time budget (default policy if None)
            clock: Time source for backoff and budgets (system clock if None)
            encoder: Batch -> payload bytes; may wrap encode_batch (e.g. gzip)
            rng_factory: Builds the jitter source for each delivery
        """
        self._poster = poster
        self._policy = retry_policy if retry_policy is not None else RetryPolicy.default()
        self._clock = clock if clock is not None else DEFAULT_CLOCK
        self._encoder = encoder
        self._rng_factory = rng_factory

    @property
    def retry_policy(self) -> RetryPolicy:
        return self._policy

    def deliver(
        self,
        batch: TelemetryBatch,
        *,
        url: str,
        headers: Mapping[str, str],
        media_type: str = MEDIA_TYPE,
        cancel: threading.Event | None = None,
    ) -> DeliveryResult:
        """Encode, send, retry and split until a terminal state is reached.

        Never raises DeliveryError: every failure is returned as the result's
        ``error``.

        Args:
            batch: Batch to deliver; read only, never mutated
            url: Endpoint URL for the batch's kind
            headers: Request headers (auth, user agent, content encoding)
            media_type: Content-Type of the encoded body
            cancel: Set by the caller to abort retries and pending backoff

        Returns:
            DeliveryResult in state SUCCESS, FAILED or CANCELED
        """
        log = logger.bind(kind=batch.kind.value, entities=len(batch), url=url)

        if cancel is not None and cancel.is_set():
            log.info("Delivery canceled before encoding")
            return self._result(DeliveryState.CANCELED, batch, error=CanceledError("Delivery canceled"))

        log.debug("Encoding batch", state=DeliveryState.ENCODING.value)
        try:
            body = self._encoder(batch)
        except EncodingError as e:
            log.error("Batch cannot be encoded", state=DeliveryState.FAILED.value, error=str(e))
            return self._result(DeliveryState.FAILED, batch, error=e)

        progress = _SendProgress()
        try:
            response = self._send_with_retry(body, url, headers, media_type, cancel, progress, log)
        except OversizedPayloadError as e:
            return self._split(batch, e, url=url, headers=headers, media_type=media_type, cancel=cancel, progress=progress, log=log)
        except CanceledError as e:
            log.info("Delivery canceled", state=DeliveryState.CANCELED.value, attempts=progress.attempts)
            return self._result(DeliveryState.CANCELED, batch, progress, error=e)
        except RetriesExhaustedError as e:
            log.error(
                "Delivery failed, retries exhausted",
                state=DeliveryState.FAILED.value,
                attempts=e.attempts,
                last_error=str(e.last_error),
            )
            return self._result(DeliveryState.FAILED, batch, progress, error=e)
        except (HttpStatusError, TransportError) as e:
            log.error(
                "Delivery failed permanently",
                state=DeliveryState.FAILED.value,
                attempts=progress.attempts,
                error_type=type(e).__name__,
                error=str(e),
            )
            return self._result(DeliveryState.FAILED, batch, progress, error=e)

        log.debug("Batch delivered", state=DeliveryState.SUCCESS.value, attempts=progress.attempts, status=response.status_code)
        return self._result(DeliveryState.SUCCESS, batch, progress)

    # -------------------------------------------------------------------------
    # SENDING / RETRYING
    # -------------------------------------------------------------------------

    def _send_with_retry(
        self,
        body: bytes,
        url: str,
        headers: Mapping[str, str],
        media_type: str,
        cancel: threading.Event | None,
        progress: _SendProgress,
        log: Any,
    ) -> HttpResponse:
        """Send ``body`` until success, a fatal classification, or budget exhaustion.

        Every attempt re-sends the identical ``body`` bytes. An OSError
        raised by the poster is treated as a TransientTransportError.

        Raises:
            OversizedPayloadError: On 413 (caller decides whether to split)
            CanceledError: If ``cancel`` is set before a send or during backoff
            RetriesExhaustedError: When attempts or elapsed time run out
            HttpStatusError / TransportError: Fatal classification
        """
        policy = self._policy

        def backoff(seconds: float) -> None:
            if self._clock.sleep(seconds, cancel):
                raise CanceledError("Delivery canceled during backoff")

        def before_sleep(retry_state: RetryCallState) -> None:
            outcome = retry_state.outcome
            error = outcome.exception() if outcome is not None else None
            log.warning(
                "Transient delivery failure, backing off",
                state=DeliveryState.RETRYING.value,
                attempt=retry_state.attempt_number,
                delay_seconds=retry_state.next_action.sleep if retry_state.next_action else None,
                error_type=type(error).__name__ if error is not None else None,
                error=str(error) if error is not None else None,
            )

        retrying = Retrying(
            stop=stop_after_attempt(policy.max_attempts) | stop_after_elapsed(policy.max_elapsed, self._clock),
            wait=wait_monotonic_backoff(policy, self._rng_factory()),
            retry=retry_if_exception(is_retryable),
            sleep=backoff,
            before_sleep=before_sleep,
            reraise=False,  # We catch RetryError and convert to RetriesExhaustedError
        )

        try:
            for attempt_state in retrying:
                with attempt_state:
                    if cancel is not None and cancel.is_set():
                        raise CanceledError("Delivery canceled before send")
                    progress.attempts = attempt_state.retry_state.attempt_number
                    log.debug("Sending payload", state=DeliveryState.SENDING.value, attempt=progress.attempts, bytes=len(body))
                    try:
                        response = self._poster.post(url, headers, body, media_type)
                    except OSError as e:
                        # Socket errors from any poster are retryable transport failures
                        raise TransientTransportError(f"{type(e).__name__}: {e}") from e
                    progress.last_response = response
                    return raise_for_status(response)
        except RetryError as e:
            last_error = e.last_attempt.exception()
            assert last_error is not None, "RetryError without exception is impossible"
            raise RetriesExhaustedError(progress.attempts, last_error) from last_error

        # Should not reach here - Retrying always returns or raises
        raise RuntimeError("Unexpected state in retry loop")  # pragma: no cover

    # -------------------------------------------------------------------------
    # SPLITTING
    # -------------------------------------------------------------------------

    def _split(
        self,
        batch: TelemetryBatch,
        error: OversizedPayloadError,
        *,
        url: str,
        headers: Mapping[str, str],
        media_type: str,
        cancel: threading.Event | None,
        progress: _SendProgress,
        log: Any,
    ) -> DeliveryResult:
        """Deliver each half of an oversized batch sequentially.

        Both halves are attempted even if the first fails; only
        cancellation stops the second half from being sent.
        """
        if len(batch) < 2:
            log.error("Payload too large and cannot be split", state=DeliveryState.FAILED.value)
            return self._result(DeliveryState.FAILED, batch, progress, error=error)

        halves = batch.split()
        log.info(
            "Payload too large, splitting batch",
            state=DeliveryState.SPLITTING.value,
            sizes=[len(half) for half in halves],
        )

        children: list[DeliveryResult] = []
        for half in halves:
            child = self.deliver(half, url=url, headers=headers, media_type=media_type, cancel=cancel)
            children.append(child)
            if child.state is DeliveryState.CANCELED:
                break

        if any(child.state is DeliveryState.CANCELED for child in children):
            state = DeliveryState.CANCELED
        elif all(child.succeeded for child in children):
            state = DeliveryState.SUCCESS
        else:
            state = DeliveryState.FAILED

        # The parent's cause is the first child that ended in the parent's state
        cause = next((child.error for child in children if child.state is state), None)
        return DeliveryResult(
            state=state,
            entity_count=len(batch),
            attempts=progress.attempts,
            response=None,
            error=cause,
            children=tuple(children),
        )

    @staticmethod
    def _result(
        state: DeliveryState,
        batch: TelemetryBatch,
        progress: _SendProgress | None = None,
        *,
        error: DeliveryError | None = None,
    ) -> DeliveryResult:
        return DeliveryResult(
            state=state,
            entity_count=len(batch),
            attempts=progress.attempts if progress is not None else 0,
            response=progress.last_response if progress is not None else None,
            error=error,
        )
