# src/beacon/transport/protocols.py
"""Protocol definitions for HTTP transports.

A transport sends bytes and returns whatever the server answered. It does
not interpret status codes; that is the delivery controller's job.
"""

from collections.abc import Mapping
from typing import Protocol, runtime_checkable

from beacon.contracts.results import HttpResponse


@runtime_checkable
class HttpPoster(Protocol):
    """Send one POST request and return the response.

    Implementations:
    - HttpxPoster: production transport over a pooled httpx.Client
    - ScriptedPoster: replays scripted outcomes (beacon.testing.fakes)

    Error handling:
        - Any completed HTTP exchange, whatever its status, is RETURNED.
        - Socket-level failures raise TransientTransportError.
        - Requests that can never be sent (invalid URL, unsupported scheme)
          raise TransportError.

    Thread Safety:
        post() may be called concurrently from many threads. Implementations
        must not keep per-request state on the instance.
    """

    def post(
        self,
        url: str,
        headers: Mapping[str, str],
        body: bytes,
        media_type: str,
    ) -> HttpResponse:
        """POST ``body`` to ``url`` with ``Content-Type: media_type``.

        Args:
            url: Absolute endpoint URL
            headers: Request headers (auth, user agent, encoding)
            body: Encoded payload bytes
            media_type: Value for the Content-Type header

        Returns:
            The server's response, for any status code

        Raises:
            TransientTransportError: Connection reset, timeout, DNS failure
            TransportError: The request could not be constructed or sent
        """
        ...
