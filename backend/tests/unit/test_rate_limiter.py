"""Unit tests for the sliding-window rate limiter."""

from datetime import datetime, timedelta

import pytest
from fastapi import HTTPException

from app.services.rate_limiter import RateLimiter


class TestRateLimiter:
    def test_allows_up_to_limit(self) -> None:
        limiter = RateLimiter(max_requests=3, window_seconds=60)
        for _ in range(3):
            limiter.check_rate_limit("10.0.0.1")

        with pytest.raises(HTTPException) as exc_info:
            limiter.check_rate_limit("10.0.0.1")
        assert exc_info.value.status_code == 429

    def test_limits_are_per_ip(self) -> None:
        limiter = RateLimiter(max_requests=1, window_seconds=60)
        limiter.check_rate_limit("10.0.0.1")
        limiter.check_rate_limit("10.0.0.2")

    def test_old_requests_leave_the_window(self) -> None:
        limiter = RateLimiter(max_requests=1, window_seconds=60)
        limiter.requests["10.0.0.1"] = [datetime.now() - timedelta(seconds=120)]

        limiter.check_rate_limit("10.0.0.1")

        assert len(limiter.requests["10.0.0.1"]) == 1

    def test_rejected_requests_are_not_recorded(self) -> None:
        limiter = RateLimiter(max_requests=1, window_seconds=60)
        limiter.check_rate_limit("10.0.0.1")
        with pytest.raises(HTTPException):
            limiter.check_rate_limit("10.0.0.1")
        assert len(limiter.requests["10.0.0.1"]) == 1

    def test_cost_consumes_several_slots(self) -> None:
        limiter = RateLimiter(max_requests=5, window_seconds=60)
        limiter.check_rate_limit("10.0.0.1", cost=4)
        assert limiter.remaining("10.0.0.1") == 1

        with pytest.raises(HTTPException):
            limiter.check_rate_limit("10.0.0.1", cost=2)
        assert limiter.remaining("10.0.0.1") == 1

    def test_rejection_carries_retry_after(self) -> None:
        limiter = RateLimiter(max_requests=1, window_seconds=60)
        limiter.check_rate_limit("10.0.0.1")

        with pytest.raises(HTTPException) as exc_info:
            limiter.check_rate_limit("10.0.0.1")

        retry_after = int(exc_info.value.headers["Retry-After"])
        assert 1 <= retry_after <= 60

    def test_retry_after_is_zero_without_history(self) -> None:
        assert RateLimiter(max_requests=1, window_seconds=60).retry_after("10.0.0.9") == 0
