# src/beacon/transport/classification.py
"""Classification of raw transport exceptions.

Two questions are answered here:

1. Is this failure a flaky socket that deserves ONE immediate re-send
   inside the transport (``is_transient_io_error``)? Connection resets and
   peers dropping a pooled keep-alive connection qualify; timeouts and DNS
   failures do not, since an instant re-send would just fail again.

2. Once the transport gives up, which Beacon error does the failure
   become (``to_delivery_error``)? Everything socket-level is retryable
   by the controller; malformed requests are fatal.

The first question is a pluggable classifier so deployments can widen or
narrow it without subclassing the transport.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator

import httpx

from beacon.contracts.errors import TransientTransportError, TransportError

TransientErrorClassifier = Callable[[BaseException], bool]

RESET_ERROR_TYPES: tuple[type[BaseException], ...] = (
    httpx.ReadError,
    httpx.WriteError,
    httpx.RemoteProtocolError,
    ConnectionResetError,
    ConnectionAbortedError,
    BrokenPipeError,
)

# Requests that can never succeed no matter how often they are sent
_FATAL_ERROR_TYPES: tuple[type[BaseException], ...] = (
    httpx.UnsupportedProtocol,
    httpx.LocalProtocolError,
    httpx.InvalidURL,
)


def _exception_chain(error: BaseException) -> Iterator[BaseException]:
    seen: set[int] = set()
    current: BaseException | None = error
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        current = current.__cause__ or current.__context__


def is_transient_io_error(error: BaseException) -> bool:
    """Return True if ``error`` (or anything in its cause chain) is a connection reset."""
    return any(isinstance(cause, RESET_ERROR_TYPES) for cause in _exception_chain(error))


def matching_types(*error_types: type[BaseException]) -> TransientErrorClassifier:
    """Build a classifier that matches the given types anywhere in the cause chain."""

    def classifier(error: BaseException) -> bool:
        return any(isinstance(cause, error_types) for cause in _exception_chain(error))

    return classifier


def to_delivery_error(error: Exception) -> TransportError:
    """Convert a raw client exception into a Beacon transport error."""
    message = f"{type(error).__name__}: {error}"
    if isinstance(error, _FATAL_ERROR_TYPES):
        return TransportError(message)
    if isinstance(error, httpx.TransportError | OSError):
        return TransientTransportError(message)
    return TransportError(message)
