"""Unit tests for the fixed-window rate limiter."""

import pytest

from core.config import Settings
from core.rate_limit import RateLimitConfig, RateLimiter, RateLimiterRegistry


def make_limiter(clock, window_ms=1000, max_requests=3):
    return RateLimiter(RateLimitConfig(window_ms=window_ms, max_requests=max_requests), clock=clock)


class TestRateLimitConfig:

    def test_rejects_non_positive_window(self):
        with pytest.raises(ValueError):
            RateLimitConfig(window_ms=0, max_requests=1)

    def test_rejects_zero_quota(self):
        with pytest.raises(ValueError):
            RateLimitConfig(window_ms=1000, max_requests=0)


class TestRateLimiter:

    def test_fixed_window_sequence(self, clock):
        limiter = make_limiter(clock)
        results = []
        for _ in range(4):
            results.append(limiter.is_allowed("c1").allowed)
            clock.advance(10)
        assert results == [True, True, True, False]

    def test_first_request_opens_window(self, clock):
        limiter = make_limiter(clock)
        decision = limiter.is_allowed("c1")
        assert decision.allowed is True
        assert decision.reset_time == clock.now + 1000
        assert decision.remaining == 2
        assert decision.limit == 3

    def test_denied_request_reports_existing_reset_time(self, clock):
        limiter = make_limiter(clock, max_requests=1)
        first = limiter.is_allowed("c1")
        clock.advance(400)
        denied = limiter.is_allowed("c1")
        assert denied.allowed is False
        assert denied.reset_time == first.reset_time
        assert denied.remaining == 0

    def test_window_resets_after_reset_time(self, clock):
        limiter = make_limiter(clock)
        for _ in range(3):
            limiter.is_allowed("c1")
        reset_time = limiter.is_allowed("c1").reset_time

        clock.now = reset_time + 1
        decision = limiter.is_allowed("c1")

        assert decision.allowed is True
        assert decision.remaining == 2  # fresh count of 1
        assert decision.reset_time == clock.now + 1000

    def test_window_still_active_at_exact_reset_time(self, clock):
        limiter = make_limiter(clock, max_requests=1)
        first = limiter.is_allowed("c1")
        clock.now = first.reset_time
        assert limiter.is_allowed("c1").allowed is False

    def test_keys_are_isolated(self, clock):
        limiter = make_limiter(clock)
        for _ in range(4):
            limiter.is_allowed("c1")
        assert limiter.is_allowed("c1").allowed is False
        assert limiter.is_allowed("c2").allowed is True
        assert limiter.remaining("c2") == 2

    def test_boundary_burst_is_permitted(self, clock):
        limiter = make_limiter(clock)
        opened = limiter.is_allowed("c1")
        clock.now = opened.reset_time - 1
        assert [limiter.is_allowed("c1").allowed for _ in range(2)] == [True, True]
        clock.now = opened.reset_time + 1
        assert [limiter.is_allowed("c1").allowed for _ in range(3)] == [True, True, True]

    def test_remaining_for_unknown_key(self, clock):
        limiter = make_limiter(clock)
        assert limiter.remaining("nobody") == 3

    def test_retry_after_rounds_up(self, clock):
        limiter = make_limiter(clock)
        assert limiter.retry_after(clock.now + 1500) == 2
        assert limiter.retry_after(clock.now - 10) == 0

    def test_cleanup_drops_only_expired_records(self, clock):
        limiter = make_limiter(clock, window_ms=1000)
        limiter.is_allowed("old")
        clock.advance(600)
        limiter.is_allowed("fresh")
        clock.advance(500)

        assert limiter.cleanup() == 1
        assert limiter.size == 1
        assert limiter.remaining("fresh") == 2

    def test_empty_key_is_valid(self, clock):
        limiter = make_limiter(clock)
        assert limiter.is_allowed("").allowed is True


class TestRateLimiterRegistry:

    def test_from_settings_builds_named_classes(self, clock):
        registry = RateLimiterRegistry.from_settings(Settings(), clock=clock)
        assert registry.names() == ["auth", "general", "sensitive"]
        assert registry.get("general").config == RateLimitConfig(60_000, 100)
        assert registry.get("auth").config == RateLimitConfig(300_000, 5)
        assert registry.get("sensitive").config == RateLimitConfig(60_000, 20)

    def test_unknown_limiter_raises_key_error(self, clock):
        registry = RateLimiterRegistry.from_settings(Settings(), clock=clock)
        with pytest.raises(KeyError):
            registry.get("bulk")

    def test_limiters_are_independent(self, clock):
        registry = RateLimiterRegistry.from_settings(
            Settings(rate_limit_auth_max_requests=1), clock=clock
        )
        registry.get("auth").is_allowed("c1")
        assert registry.get("auth").is_allowed("c1").allowed is False
        assert registry.get("general").is_allowed("c1").allowed is True

    def test_cleanup_sums_all_limiters(self, clock):
        registry = RateLimiterRegistry.from_settings(Settings(), clock=clock)
        registry.get("general").is_allowed("a")
        registry.get("auth").is_allowed("b")
        clock.advance(400_000)
        assert registry.cleanup() == 2
        assert registry.sizes() == {"general": 0, "auth": 0, "sensitive": 0}

    def test_reset_drops_all_records(self, clock):
        registry = RateLimiterRegistry.from_settings(Settings(rate_limit_auth_max_requests=1), clock=clock)
        limiter = registry.get("auth")
        limiter.is_allowed("c1")
        limiter.reset()
        assert limiter.size == 0
        assert limiter.is_allowed("c1").allowed is True
