# src/beacon/factory.py
"""Factory for building a TelemetrySender from validated settings.

Wires the default stack: HttpxPoster over a pooled httpx.Client, retry
policy from RetrySettings, endpoints from EndpointSettings.
"""

from __future__ import annotations

import httpx
import structlog

from beacon.core.config import SenderSettings
from beacon.delivery.clock import Clock
from beacon.delivery.retry import RetryPolicy
from beacon.providers import CredentialProvider, StaticApiKey
from beacon.sender import TelemetrySender
from beacon.transport.httpx_poster import HttpxPoster

logger = structlog.get_logger(__name__)


def create_sender(
    settings: SenderSettings,
    *,
    api_key: str | None = None,
    credentials: CredentialProvider | None = None,
    client: httpx.Client | None = None,
    clock: Clock | None = None,
) -> TelemetrySender:
    """Create a TelemetrySender from settings.

    Exactly one of ``api_key`` or ``credentials`` must be given.

    Args:
        settings: Validated sender settings
        api_key: Key sent in ``settings.api_key_header``
        credentials: Custom credential provider
        client: Shared httpx client (the sender then does not own it)
        clock: Clock override, mainly for tests

    Raises:
        ValueError: If neither or both credential sources are given
    """
    if (api_key is None) == (credentials is None):
        raise ValueError("Provide exactly one of api_key or credentials")
    if credentials is None:
        assert api_key is not None
        credentials = StaticApiKey(api_key, header=settings.api_key_header)

    poster = HttpxPoster(client, timeout=settings.timeout_seconds)
    sender = TelemetrySender(
        poster,
        credentials=credentials,
        endpoints=settings.endpoints,
        retry_policy=RetryPolicy.from_settings(settings.retry),
        clock=clock,
        user_agent_product=settings.user_agent_product,
        gzip=settings.gzip,
    )

    logger.debug(
        "Telemetry sender created",
        gzip=settings.gzip,
        timeout_seconds=settings.timeout_seconds,
        max_attempts=settings.retry.max_attempts,
    )
    return sender
