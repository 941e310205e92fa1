# tests/unit/delivery/test_responses.py
"""Tests for HTTP status classification."""

import pytest

from beacon.contracts import (
    HttpResponse,
    OversizedPayloadError,
    RateLimitedError,
    RejectedError,
    ServerError,
    UnexpectedResponseError,
)
from beacon.delivery.responses import classify, parse_retry_after, raise_for_status


class TestClassify:
    @pytest.mark.parametrize("status", [200, 201, 202, 204, 299])
    def test_2xx_is_success(self, status: int) -> None:
        response = HttpResponse(status)
        assert classify(response) is None
        assert raise_for_status(response) is response

    @pytest.mark.parametrize("status", [400, 401, 403, 404, 405])
    def test_rejected_statuses(self, status: int) -> None:
        assert isinstance(classify(HttpResponse(status)), RejectedError)

    def test_413_is_oversized(self) -> None:
        assert isinstance(classify(HttpResponse(413)), OversizedPayloadError)

    def test_429_is_rate_limited(self) -> None:
        error = classify(HttpResponse(429, headers={"Retry-After": "12"}))

        assert isinstance(error, RateLimitedError)
        assert error.retry_after == 12.0

    @pytest.mark.parametrize("status", [500, 502, 503, 504, 599])
    def test_5xx_is_server_error(self, status: int) -> None:
        assert isinstance(classify(HttpResponse(status)), ServerError)

    @pytest.mark.parametrize("status", [100, 301, 302, 304, 402, 408, 409, 418, 422, 600])
    def test_everything_else_is_unexpected(self, status: int) -> None:
        assert isinstance(classify(HttpResponse(status)), UnexpectedResponseError)

    def test_raise_for_status_raises_classified_error(self) -> None:
        with pytest.raises(RejectedError) as exc_info:
            raise_for_status(HttpResponse(403, "Forbidden", "no key"))
        assert exc_info.value.response.body == "no key"


class TestParseRetryAfter:
    @pytest.mark.parametrize(
        ("headers", "expected"),
        [
            ({"Retry-After": "5"}, 5.0),
            ({"retry-after": " 2.5 "}, 2.5),
            ({"Retry-After": "0"}, 0.0),
            ({"Retry-After": "-3"}, None),
            ({"Retry-After": "Wed, 21 Oct 2015 07:28:00 GMT"}, None),
            ({"Retry-After": "nan"}, None),
            ({}, None),
        ],
    )
    def test_delta_seconds_only(self, headers: dict[str, str], expected: float | None) -> None:
        assert parse_retry_after(headers) == expected
