"""HTTP transports: send bytes, return status, body and headers."""

from beacon.transport.classification import (
    TransientErrorClassifier,
    is_transient_io_error,
    matching_types,
    to_delivery_error,
)
from beacon.transport.httpx_poster import HttpxPoster
from beacon.transport.protocols import HttpPoster

__all__ = [
    "HttpPoster",
    "HttpxPoster",
    "TransientErrorClassifier",
    "is_transient_io_error",
    "matching_types",
    "to_delivery_error",
]
