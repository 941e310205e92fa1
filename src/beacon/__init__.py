"""
Beacon: client-side telemetry delivery.

Encodes metric, span and event batches into a JSON wire format and
delivers them over HTTP with retry, backoff and payload splitting.
"""

__version__ = "0.3.0"
