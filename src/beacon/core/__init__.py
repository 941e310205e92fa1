"""Core infrastructure: configuration models."""

from beacon.core.config import EndpointSettings, RetrySettings, SenderSettings

__all__ = [
    "EndpointSettings",
    "RetrySettings",
    "SenderSettings",
]
