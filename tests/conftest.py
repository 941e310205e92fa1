# tests/conftest.py
"""Shared test fixtures and helpers.

Fixtures:
- mock_clock: MockClock starting at t=0 that records every backoff sleep
- no_jitter_policy: RetryPolicy with deterministic delays 1, 2, 4, 8, ...
- make_controller: builds a DeliveryController around a ScriptedPoster

Hypothesis Configuration:
- "ci" profile: Fast tests for CI (100 examples) - default
- "nightly" profile: Thorough tests (1000 examples)
- "debug" profile: Minimal tests with verbose output (10 examples)

Set profile via environment variable:
    HYPOTHESIS_PROFILE=nightly pytest tests/property/
"""

from __future__ import annotations

import os
from collections.abc import Callable, Iterable

import pytest
from hypothesis import Phase, Verbosity, settings

from beacon.contracts import Attributes, Gauge, MetricBatch
from beacon.delivery.clock import MockClock
from beacon.delivery.controller import DeliveryController
from beacon.delivery.retry import RetryPolicy
from beacon.testing.fakes import Outcome, ScriptedPoster

METRICS_URL = "https://metrics.example.test/metric/v1"
SPANS_URL = "https://traces.example.test/trace/v1"
EVENTS_URL = "https://events.example.test/v1/events"


@pytest.fixture
def mock_clock() -> MockClock:
    return MockClock(start=0.0)


@pytest.fixture
def no_jitter_policy() -> RetryPolicy:
    """Policy whose waits are exactly 1, 2, 4, 8, 15, 15, ..."""
    return RetryPolicy(max_attempts=5, base_delay=1.0, max_delay=15.0, exponential_base=2.0, jitter=0.0, max_elapsed=120.0)


@pytest.fixture
def gauge_batch() -> MetricBatch:
    """The canonical single-gauge batch with one common attribute."""
    return MetricBatch(
        (Gauge("gauge", 3.0, 555),),
        Attributes().put("key", "val"),
    )


@pytest.fixture
def make_controller(
    mock_clock: MockClock,
    no_jitter_policy: RetryPolicy,
) -> Callable[..., tuple[DeliveryController, ScriptedPoster]]:
    """Factory for a controller wired to a scripted transport and the mock clock."""

    def _make(
        script: Iterable[Outcome] = (),
        *,
        policy: RetryPolicy | None = None,
        **poster_kwargs: object,
    ) -> tuple[DeliveryController, ScriptedPoster]:
        poster = ScriptedPoster(script, **poster_kwargs)  # type: ignore[arg-type]
        controller = DeliveryController(
            poster,
            retry_policy=policy or no_jitter_policy,
            clock=mock_clock,
        )
        return controller, poster

    return _make


# =============================================================================
# Hypothesis Configuration
# =============================================================================

# CI profile: Fast tests for continuous integration
settings.register_profile(
    "ci",
    max_examples=100,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,  # Disable deadline for CI (timing varies)
)

# Nightly profile: Thorough testing for scheduled runs
settings.register_profile(
    "nightly",
    max_examples=1000,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

# Debug profile: Minimal examples with verbose output for debugging
settings.register_profile(
    "debug",
    max_examples=10,
    verbosity=Verbosity.verbose,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

# Load profile from environment, default to "ci"
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "ci"))
