# src/beacon/delivery/responses.py
"""HTTP response classification.

Maps a status code onto the error taxonomy. This is the only place that
interprets status codes; transports hand back every response unchanged.

    2xx                      -> success (no error)
    400, 401, 403, 404, 405  -> RejectedError (fatal)
    413                      -> OversizedPayloadError (split)
    429                      -> RateLimitedError (retry, Retry-After aware)
    5xx                      -> ServerError (retry)
    anything else            -> UnexpectedResponseError (fatal)
"""

from __future__ import annotations

import math
from collections.abc import Mapping

from beacon.contracts.errors import (
    HttpStatusError,
    OversizedPayloadError,
    RateLimitedError,
    RejectedError,
    ServerError,
    UnexpectedResponseError,
)
from beacon.contracts.results import HttpResponse

REJECTED_STATUSES = frozenset({400, 401, 403, 404, 405})
PAYLOAD_TOO_LARGE = 413
TOO_MANY_REQUESTS = 429


def parse_retry_after(headers: Mapping[str, str]) -> float | None:
    """Extract a Retry-After delay in seconds.

    Only the delta-seconds form is honoured. HTTP-date values, negative
    numbers and garbage yield None so the regular backoff applies.
    """
    for name, value in headers.items():
        if name.lower() != "retry-after":
            continue
        try:
            seconds = float(value.strip())
        except ValueError:
            return None
        if math.isnan(seconds) or seconds < 0:
            return None
        return seconds
    return None


def classify(response: HttpResponse) -> HttpStatusError | None:
    """Return the error a response represents, or None for 2xx."""
    status = response.status_code
    if response.is_success:
        return None
    if status in REJECTED_STATUSES:
        return RejectedError(response)
    if status == PAYLOAD_TOO_LARGE:
        return OversizedPayloadError(response)
    if status == TOO_MANY_REQUESTS:
        return RateLimitedError(response, retry_after=parse_retry_after(response.headers))
    if 500 <= status < 600:
        return ServerError(response)
    return UnexpectedResponseError(response, f"Unexpected HTTP {status}: {response.status_text}")


def raise_for_status(response: HttpResponse) -> HttpResponse:
    """Return the response on 2xx, otherwise raise its classified error."""
    error = classify(response)
    if error is not None:
        raise error
    return response
