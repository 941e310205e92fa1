# src/beacon/contracts/results.py
"""Results surfaced by the delivery pipeline.

HttpResponse is what a transport hands back for any completed round trip,
regardless of status. DeliveryResult is what the sender facade returns to
callers: a terminal state, the response (when one was received) and the
typed cause for every non-success outcome.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from types import MappingProxyType

from beacon.contracts.errors import DeliveryError


class DeliveryState(StrEnum):
    """States of the delivery state machine.

    ENCODING -> SENDING -> {SUCCESS, RETRYING, SPLITTING, FAILED}
    RETRYING re-enters SENDING; SPLITTING re-enters ENCODING per half.
    CANCELED is reachable from SENDING and RETRYING.
    """

    ENCODING = "encoding"
    SENDING = "sending"
    RETRYING = "retrying"
    SPLITTING = "splitting"
    SUCCESS = "success"
    FAILED = "failed"
    CANCELED = "canceled"

    @property
    def is_terminal(self) -> bool:
        return self in (DeliveryState.SUCCESS, DeliveryState.FAILED, DeliveryState.CANCELED)


@dataclass(frozen=True, slots=True)
class HttpResponse:
    """A completed HTTP exchange.

    Attributes:
        status_code: Numeric HTTP status
        status_text: Reason phrase (or the code as text when unavailable)
        body: Decoded response body
        headers: Response headers, read-only
    """

    status_code: int
    status_text: str = ""
    body: str = ""
    headers: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))
        if not self.status_text:
            object.__setattr__(self, "status_text", str(self.status_code))

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300


@dataclass(frozen=True, slots=True)
class DeliveryResult:
    """Terminal outcome of delivering one batch.

    A batch that was split on HTTP 413 reports the combined outcome of its
    halves; the per-half results are kept in ``children`` in send order and
    the parent itself carries no response.

    Attributes:
        state: SUCCESS, FAILED or CANCELED
        entity_count: Number of entities in the delivered batch
        attempts: Send attempts made for this batch (0 if encoding failed)
        response: Last HTTP response received, if any
        error: Cause of a non-success outcome; None on success
        children: Sub-results when the batch was split
    """

    state: DeliveryState
    entity_count: int
    attempts: int = 0
    response: HttpResponse | None = None
    error: DeliveryError | None = None
    children: tuple[DeliveryResult, ...] = ()

    def __post_init__(self) -> None:
        if not self.state.is_terminal:
            raise ValueError(f"DeliveryResult requires a terminal state, got {self.state}")
        if self.state is DeliveryState.SUCCESS and self.error is not None:
            raise ValueError("Successful DeliveryResult cannot carry an error")
        if self.state is not DeliveryState.SUCCESS and self.error is None:
            raise ValueError(f"{self.state} DeliveryResult requires an error cause")

    @property
    def succeeded(self) -> bool:
        return self.state is DeliveryState.SUCCESS

    @property
    def was_split(self) -> bool:
        return bool(self.children)

    def raise_for_failure(self) -> None:
        """Raise the carried error if delivery did not succeed."""
        if self.error is not None:
            raise self.error
