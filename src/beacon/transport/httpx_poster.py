# src/beacon/transport/httpx_poster.py
"""Production HTTP transport over httpx.

Wraps a single shared httpx.Client. httpx.Client is thread-safe and pools
connections internally, so one HttpxPoster can serve every concurrent send
in the process.

The only retry logic here is a single immediate re-send when the failure
looks like a dropped connection (see transport.classification). Sustained
failures surface to the delivery controller, which owns backoff.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import TracebackType

import httpx
import structlog

from beacon.contracts.results import HttpResponse
from beacon.transport.classification import (
    TransientErrorClassifier,
    is_transient_io_error,
    to_delivery_error,
)

logger = structlog.get_logger(__name__)

DEFAULT_TIMEOUT_SECONDS = 2.0

# One original attempt plus one immediate re-send
_MAX_SENDS = 2


class HttpxPoster:
    """HttpPoster backed by httpx.

    Example:
        with HttpxPoster(timeout=5.0) as poster:
            response = poster.post(url, {"Api-Key": key}, body, "application/json")
    """

    def __init__(
        self,
        client: httpx.Client | None = None,
        *,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        is_transient: TransientErrorClassifier = is_transient_io_error,
    ) -> None:
        """Initialize the poster.

        Args:
            client: Preconstructed client to use. When omitted a client is
                created (and owned, i.e. closed by close()).
            timeout: Timeout in seconds for the owned client
            is_transient: Decides whether a failure earns one immediate re-send
        """
        self._owns_client = client is None
        # follow_redirects=False: a redirected POST is an unexpected response,
        # not something to chase silently.
        self._client = client if client is not None else httpx.Client(timeout=timeout, follow_redirects=False)
        self._is_transient = is_transient

    def post(
        self,
        url: str,
        headers: Mapping[str, str],
        body: bytes,
        media_type: str,
    ) -> HttpResponse:
        request_headers = httpx.Headers(headers)
        request_headers["Content-Type"] = media_type

        first_failure: Exception | None = None
        for send_number in range(1, _MAX_SENDS + 1):
            try:
                response = self._client.post(url, content=body, headers=request_headers)
            except (httpx.HTTPError, httpx.InvalidURL, OSError) as e:
                if send_number < _MAX_SENDS and self._is_transient(e):
                    logger.debug(
                        "Transient I/O error, re-sending once",
                        url=url,
                        error_type=type(e).__name__,
                        error=str(e),
                    )
                    first_failure = e
                    continue
                error = to_delivery_error(e)
                if first_failure is not None:
                    error.add_note(f"first attempt failed with {type(first_failure).__name__}: {first_failure}")
                raise error from e
            return _to_response(response)

        raise AssertionError("unreachable: send loop always returns or raises")  # pragma: no cover

    def close(self) -> None:
        """Close the underlying client if this poster created it."""
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> HttpxPoster:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


def _to_response(response: httpx.Response) -> HttpResponse:
    return HttpResponse(
        status_code=response.status_code,
        status_text=response.reason_phrase or str(response.status_code),
        body=response.text,
        headers=dict(response.headers.items()),
    )
