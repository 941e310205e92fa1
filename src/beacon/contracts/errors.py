# src/beacon/contracts/errors.py
"""Error taxonomy for encoding and delivery.

Every failure the pipeline can report is a subclass of DeliveryError.
The delivery controller never raises these across the sender facade;
they are returned inside DeliveryResult.error so callers always receive
a typed cause. DeliveryResult.raise_for_failure() re-raises on demand.

Retry classification:
    Retryable:     TransientTransportError, RateLimitedError, ServerError
    Split trigger: OversizedPayloadError
    Fatal:         EncodingError, TransportError, RejectedError,
                   UnexpectedResponseError, RetriesExhaustedError,
                   CanceledError
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from beacon.contracts.results import HttpResponse


class DeliveryError(Exception):
    """Base class for all Beacon encode/deliver failures."""


class EncodingError(DeliveryError, ValueError):
    """Entity or batch data violates an invariant and cannot be encoded.

    Never retried: re-encoding the same data would fail the same way.
    """


# =============================================================================
# Transport Errors
# =============================================================================


class TransportError(DeliveryError):
    """The request could not be sent at all (bad URL, unsupported scheme)."""


class TransientTransportError(TransportError):
    """Socket-level failure: connection reset, timeout, DNS resolution."""


# =============================================================================
# HTTP Status Errors
# =============================================================================


class HttpStatusError(DeliveryError):
    """Backend answered with a non-2xx status.

    Attributes:
        response: The full response, kept for caller diagnostics
    """

    def __init__(self, response: HttpResponse, message: str | None = None) -> None:
        self.response = response
        super().__init__(message or f"HTTP {response.status_code}: {response.status_text}")

    @property
    def status_code(self) -> int:
        return self.response.status_code


class RateLimitedError(HttpStatusError):
    """HTTP 429. Retried with backoff, honouring Retry-After when given.

    Attributes:
        retry_after: Seconds the backend asked us to wait, or None
    """

    def __init__(self, response: HttpResponse, retry_after: float | None = None) -> None:
        self.retry_after = retry_after
        super().__init__(response)


class ServerError(HttpStatusError):
    """HTTP 5xx. Retried with backoff."""


class OversizedPayloadError(HttpStatusError):
    """HTTP 413. The batch is split and resubmitted when it can be."""


class RejectedError(HttpStatusError):
    """HTTP 400/401/403/404/405. The request is malformed or unauthorized."""


class UnexpectedResponseError(HttpStatusError):
    """Any status outside the classified ranges (e.g. 3xx, 409, 418)."""


# =============================================================================
# Terminal Control-Flow Errors
# =============================================================================


class RetriesExhaustedError(DeliveryError):
    """Raised when the attempt or elapsed-time budget runs out.

    Attributes:
        attempts: Number of send attempts made
        last_error: The last transient cause observed
    """

    def __init__(self, attempts: int, last_error: BaseException) -> None:
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(f"Retries exhausted after {attempts} attempt(s): {last_error}")
        self.__cause__ = last_error


class CanceledError(DeliveryError):
    """The caller signalled cancellation before delivery completed."""


_RETRYABLE: tuple[type[DeliveryError], ...] = (
    TransientTransportError,
    RateLimitedError,
    ServerError,
)


def is_retryable(error: BaseException) -> bool:
    """Return True if the controller should back off and re-send."""
    return isinstance(error, _RETRYABLE)
