"""
Unit tests for rate limit decisions and header rendering.
"""

import pytest

from helpdesk.core.rate_limit import (
    LIMIT_HEADER,
    REMAINING_HEADER,
    RESET_HEADER,
    FixedWindowRateLimiter,
    RateLimitDecision,
    get_rate_limiter,
    reset_rate_limiter,
)


@pytest.mark.unit
class TestRateLimitDecision:
    def test_allowed_headers(self):
        decision = RateLimitDecision(allowed=True, limit=5, count=2, reset_time=11_000, now=10_200)

        assert decision.headers() == {
            LIMIT_HEADER: "5",
            REMAINING_HEADER: "3",
            RESET_HEADER: "11000",
        }

    def test_rejected_headers_include_retry_after(self):
        decision = RateLimitDecision(allowed=False, limit=5, count=5, reset_time=11_000, now=10_200)
        headers = decision.headers()

        assert headers[REMAINING_HEADER] == "0"
        assert headers["Retry-After"] == "1"

    def test_retry_after_rounds_up_to_whole_seconds(self):
        decision = RateLimitDecision(allowed=False, limit=5, count=5, reset_time=12_500, now=10_000)
        assert decision.retry_after == 3

    def test_retry_after_is_at_least_one_second(self):
        decision = RateLimitDecision(allowed=False, limit=5, count=5, reset_time=10_000, now=10_000)
        assert decision.retry_after == 1

    def test_remaining_never_negative(self):
        decision = RateLimitDecision(allowed=False, limit=5, count=9, reset_time=1, now=0)
        assert decision.remaining == 0


@pytest.mark.unit
class TestRateLimiterSingleton:
    def test_configured_from_settings(self, test_settings):
        limiter = get_rate_limiter()

        assert isinstance(limiter, FixedWindowRateLimiter)
        assert limiter.capacity == test_settings.rate_limit_requests
        assert limiter.window_ms == test_settings.rate_limit_window_ms
        assert get_rate_limiter() is limiter

    def test_reset(self, test_settings):
        limiter = get_rate_limiter()
        reset_rate_limiter()
        assert get_rate_limiter() is not limiter
