# src/beacon/delivery/clock.py
"""Clock abstraction for testable backoff timing.

The delivery controller measures elapsed time against its retry budget
and sleeps between attempts. Both go through a Clock so tests can
simulate minutes of backoff without real delays.

Production code uses SystemClock (the default).
Tests inject MockClock to control time advancement.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from typing import Protocol


class Clock(Protocol):
    """Abstract clock for backoff and elapsed-time budgets.

    Implementations:
    - SystemClock: time.monotonic() and Event.wait() (production)
    - MockClock: Controllable time, sleeps advance it instantly (testing)
    """

    def monotonic(self) -> float:
        """Return monotonic time in seconds."""
        ...

    def sleep(self, seconds: float, cancel: threading.Event | None = None) -> bool:
        """Block for ``seconds`` or until ``cancel`` is set.

        Returns:
            True if the sleep was cut short by cancellation, False if the
            full duration elapsed.
        """
        ...


class SystemClock:
    """Production clock using time.monotonic().

    Sleeping waits on the cancellation event (or a private one when none
    is given), so a caller setting the event wakes the sleeper immediately.
    """

    def monotonic(self) -> float:
        """Return system monotonic time."""
        return time.monotonic()

    def sleep(self, seconds: float, cancel: threading.Event | None = None) -> bool:
        if seconds <= 0:
            return cancel is not None and cancel.is_set()
        event = cancel if cancel is not None else threading.Event()
        return event.wait(seconds)


class MockClock:
    """Controllable clock for deterministic testing.

    Sleeping advances mock time by the requested amount and records it in
    ``sleeps``. An optional ``on_sleep`` hook runs before time advances,
    which lets a test set a cancellation event "during" a backoff wait.

    Example:
        clock = MockClock(start=0.0)
        clock.sleep(1.5)
        assert clock.monotonic() == 1.5
        assert clock.sleeps == [1.5]
    """

    def __init__(self, start: float = 0.0, on_sleep: Callable[[float], None] | None = None) -> None:
        """Initialize mock clock at a given time.

        Args:
            start: Initial monotonic time value (default 0.0).
            on_sleep: Called with the requested duration on every sleep.
        """
        self._current = start
        self._on_sleep = on_sleep
        self.sleeps: list[float] = []

    def monotonic(self) -> float:
        """Return current mock time."""
        return self._current

    def sleep(self, seconds: float, cancel: threading.Event | None = None) -> bool:
        self.sleeps.append(seconds)
        if self._on_sleep is not None:
            self._on_sleep(seconds)
        if cancel is not None and cancel.is_set():
            return True
        self.advance(max(0.0, seconds))
        return False

    def advance(self, seconds: float) -> None:
        """Advance mock time by specified seconds.

        Raises:
            ValueError: If seconds is negative.
        """
        if seconds < 0:
            raise ValueError(f"Cannot advance time by negative amount: {seconds}")
        self._current += seconds


# Default clock for production use
DEFAULT_CLOCK: Clock = SystemClock()
