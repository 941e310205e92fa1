# tests/unit/core/test_sender_config.py
"""Tests for sender configuration models."""

import pytest
from pydantic import ValidationError

from beacon.contracts import TelemetryKind
from beacon.core.config import EndpointSettings, RetrySettings, SenderSettings

ENDPOINTS = {
    "metrics_url": "https://metrics.example.test/metric/v1",
    "spans_url": "https://traces.example.test/trace/v1",
    "events_url": "https://events.example.test/v1/events",
}


class TestRetrySettings:
    def test_defaults(self) -> None:
        settings = RetrySettings()

        assert settings.max_attempts == 5
        assert settings.initial_delay_seconds == 1.0
        assert settings.max_delay_seconds == 15.0
        assert settings.exponential_base == 2.0
        assert settings.jitter_seconds == 1.0
        assert settings.max_elapsed_seconds == 120.0

    @pytest.mark.parametrize(
        "overrides",
        [
            {"max_attempts": 0},
            {"initial_delay_seconds": 0},
            {"exponential_base": 1.0},
            {"jitter_seconds": -1},
            {"max_elapsed_seconds": 0},
            {"initial_delay_seconds": 20.0, "max_delay_seconds": 10.0},
            {"unknown_field": 1},
        ],
    )
    def test_invalid_values_rejected(self, overrides: dict[str, float]) -> None:
        with pytest.raises(ValidationError):
            RetrySettings(**overrides)

    def test_frozen(self) -> None:
        settings = RetrySettings()
        with pytest.raises(ValidationError):
            settings.max_attempts = 10  # type: ignore[misc]


class TestEndpointSettings:
    def test_url_for_each_kind(self) -> None:
        endpoints = EndpointSettings(**ENDPOINTS)

        assert endpoints.url_for(TelemetryKind.METRICS) == ENDPOINTS["metrics_url"]
        assert endpoints.url_for(TelemetryKind.SPANS) == ENDPOINTS["spans_url"]
        assert endpoints.url_for(TelemetryKind.EVENTS) == ENDPOINTS["events_url"]

    def test_invalid_url_rejected(self) -> None:
        with pytest.raises(ValidationError):
            EndpointSettings(**{**ENDPOINTS, "spans_url": "not a url"})

    def test_all_endpoints_required(self) -> None:
        with pytest.raises(ValidationError):
            EndpointSettings(metrics_url=ENDPOINTS["metrics_url"])  # type: ignore[call-arg]


class TestSenderSettings:
    def test_from_mapping_with_defaults(self) -> None:
        settings = SenderSettings.model_validate({"endpoints": ENDPOINTS})

        assert settings.timeout_seconds == 2.0
        assert settings.gzip is False
        assert settings.user_agent_product is None
        assert settings.api_key_header == "Api-Key"
        assert settings.retry == RetrySettings()

    def test_nested_retry_from_mapping(self) -> None:
        settings = SenderSettings.model_validate(
            {"endpoints": ENDPOINTS, "retry": {"max_attempts": 2, "jitter_seconds": 0}}
        )

        assert settings.retry.max_attempts == 2
        assert settings.retry.jitter_seconds == 0

    @pytest.mark.parametrize("product", ["", " my-app/1.0", "my-app/1.0 "])
    def test_product_token_must_be_trimmed(self, product: str) -> None:
        with pytest.raises(ValidationError, match="user_agent_product"):
            SenderSettings(endpoints=EndpointSettings(**ENDPOINTS), user_agent_product=product)

    def test_non_positive_timeout_rejected(self) -> None:
        with pytest.raises(ValidationError):
            SenderSettings.model_validate({"endpoints": ENDPOINTS, "timeout_seconds": 0})

    def test_empty_api_key_header_rejected(self) -> None:
        with pytest.raises(ValidationError):
            SenderSettings.model_validate({"endpoints": ENDPOINTS, "api_key_header": ""})
