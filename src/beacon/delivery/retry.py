# src/beacon/delivery/retry.py
"""Retry policy and tenacity strategies for the delivery controller.

RetryPolicy is the runtime form of RetrySettings. The strategies below
plug into tenacity.Retrying:

- wait_monotonic_backoff: exponential growth plus jitter, never shorter
  than the previous wait, raised to a Retry-After hint, capped at
  max_delay.
- stop_after_elapsed: stops when the upcoming wait would end at or past
  the elapsed budget on the injected clock, so no send starts after it.

Both are stateful and MUST be constructed per delivery. The controller
builds a fresh Retrying for every send so no counters leak across calls.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import TYPE_CHECKING

from tenacity import RetryCallState
from tenacity.stop import stop_base
from tenacity.wait import wait_base

from beacon.contracts.errors import RateLimitedError
from beacon.delivery.clock import Clock

if TYPE_CHECKING:
    from beacon.core.config import RetrySettings


@dataclass(frozen=True, slots=True)
class RetryPolicy:
    """Runtime configuration for delivery retries.

    max_attempts is the TOTAL number of sends, not the number of retries.
    So max_attempts=5 means: send, then up to 4 backoff waits and re-sends.
    """

    max_attempts: int = 5
    base_delay: float = 1.0  # seconds
    max_delay: float = 15.0  # seconds
    exponential_base: float = 2.0
    jitter: float = 1.0  # seconds
    max_elapsed: float = 120.0  # seconds

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if self.base_delay < 0:
            raise ValueError("base_delay must be >= 0")
        if self.max_delay < self.base_delay:
            raise ValueError("max_delay must be >= base_delay")
        if self.exponential_base < 1.0:
            raise ValueError("exponential_base must be >= 1.0")
        if self.jitter < 0:
            raise ValueError("jitter must be >= 0")
        if self.max_elapsed <= 0:
            raise ValueError("max_elapsed must be > 0")

    @classmethod
    def default(cls) -> RetryPolicy:
        return cls()

    @classmethod
    def no_retry(cls) -> RetryPolicy:
        """Factory for a single-attempt policy."""
        return cls(max_attempts=1)

    @classmethod
    def from_settings(cls, settings: RetrySettings) -> RetryPolicy:
        """Map validated RetrySettings onto the runtime policy."""
        return cls(
            max_attempts=settings.max_attempts,
            base_delay=settings.initial_delay_seconds,
            max_delay=settings.max_delay_seconds,
            exponential_base=settings.exponential_base,
            jitter=settings.jitter_seconds,
            max_elapsed=settings.max_elapsed_seconds,
        )


class wait_monotonic_backoff(wait_base):
    """Exponential backoff with jitter whose successive waits never decrease.

    wait(n) = min(max_delay, max(previous, base * exp_base**(n-1) + U(0, jitter), retry_after))
    """

    def __init__(self, policy: RetryPolicy, rng: random.Random | None = None) -> None:
        self._policy = policy
        self._rng = rng if rng is not None else random.Random()
        self._previous = 0.0

    def __call__(self, retry_state: RetryCallState) -> float:
        policy = self._policy
        exponent = max(0, retry_state.attempt_number - 1)
        try:
            delay = policy.base_delay * policy.exponential_base**exponent
        except OverflowError:
            delay = policy.max_delay
        if policy.jitter:
            delay += self._rng.uniform(0, policy.jitter)

        hint = _retry_after_hint(retry_state)
        if hint is not None:
            delay = max(delay, hint)

        delay = min(max(delay, self._previous), policy.max_delay)
        self._previous = delay
        return delay


class stop_after_elapsed(stop_base):
    """Stop retrying when elapsed time plus the upcoming wait reaches ``budget``.

    Works like tenacity.stop_before_delay but reads elapsed time from the
    injected clock. tenacity computes the wait before calling stop, so
    ``retry_state.upcoming_sleep`` already includes any Retry-After hint.
    """

    def __init__(self, budget: float, clock: Clock) -> None:
        self._budget = budget
        self._clock = clock
        self._started = clock.monotonic()

    def __call__(self, retry_state: RetryCallState) -> bool:
        elapsed = self._clock.monotonic() - self._started
        return elapsed + retry_state.upcoming_sleep >= self._budget


def _retry_after_hint(retry_state: RetryCallState) -> float | None:
    outcome = retry_state.outcome
    if outcome is None or not outcome.failed:
        return None
    error = outcome.exception()
    if isinstance(error, RateLimitedError):
        return error.retry_after
    return None
