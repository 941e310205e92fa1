# src/beacon/providers.py
"""Collaborator interfaces the sender consumes: credentials and endpoints.

Credential storage, rotation and endpoint discovery live outside Beacon.
The sender only needs something that can hand it auth headers and a URL
per telemetry kind; the static implementations below cover the common
case of a fixed API key and fixed endpoints.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Protocol, runtime_checkable

from beacon.contracts.telemetry import TelemetryKind


@runtime_checkable
class CredentialProvider(Protocol):
    """Supplies authentication headers for each request.

    Called once per send (not per retry), so implementations may rotate
    credentials between batches.
    """

    def auth_headers(self) -> Mapping[str, str]:
        ...


@runtime_checkable
class EndpointProvider(Protocol):
    """Supplies the ingest URL for a telemetry kind."""

    def url_for(self, kind: TelemetryKind) -> str:
        ...


class StaticApiKey:
    """A fixed API key sent in a single header."""

    def __init__(self, api_key: str, header: str = "Api-Key") -> None:
        if not api_key:
            raise ValueError("api_key must be non-empty")
        self._api_key = api_key
        self._header = header

    def auth_headers(self) -> Mapping[str, str]:
        return {self._header: self._api_key}

    def __repr__(self) -> str:
        # Never echo the key itself
        return f"StaticApiKey(header={self._header!r})"


class StaticEndpoints:
    """Fixed URL per telemetry kind."""

    def __init__(self, urls: Mapping[TelemetryKind, str]) -> None:
        missing = [kind.value for kind in TelemetryKind if kind not in urls]
        if missing:
            raise ValueError(f"No endpoint configured for: {', '.join(missing)}")
        self._urls = dict(urls)

    def url_for(self, kind: TelemetryKind) -> str:
        return self._urls[kind]
