"""Delivery controller: retry, backoff, split and response classification."""

from beacon.delivery.clock import DEFAULT_CLOCK, Clock, MockClock, SystemClock
from beacon.delivery.controller import BatchEncoder, DeliveryController
from beacon.delivery.responses import classify, parse_retry_after, raise_for_status
from beacon.delivery.retry import RetryPolicy, stop_after_elapsed, wait_monotonic_backoff

__all__ = [
    "DEFAULT_CLOCK",
    "BatchEncoder",
    "Clock",
    "DeliveryController",
    "MockClock",
    "RetryPolicy",
    "SystemClock",
    "classify",
    "parse_retry_after",
    "raise_for_status",
    "stop_after_elapsed",
    "wait_monotonic_backoff",
]
