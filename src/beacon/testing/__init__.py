"""Test doubles for code that sends telemetry through Beacon."""

from beacon.delivery.clock import MockClock
from beacon.testing.fakes import RecordedRequest, ScriptedPoster

__all__ = ["MockClock", "RecordedRequest", "ScriptedPoster"]
