"""Fixed-window request limiter keyed by client identity.

Each limiter counts requests per key inside discrete windows of
``window_ms``. A client can spend its full quota at the end of one window and
again at the start of the next, so short bursts of up to twice the nominal
rate are possible across a boundary.

State lives in memory only and is lost on restart.
"""

import math
from dataclasses import dataclass
from typing import Dict

from core.cleanup import PeriodicSweeper
from core.clock import Clock, now_ms
from core.config import Settings


@dataclass(frozen=True)
class RateLimitConfig:
    window_ms: int
    max_requests: int

    def __post_init__(self):
        if self.window_ms <= 0:
            raise ValueError(f"window_ms must be positive, got {self.window_ms}")
        if self.max_requests < 1:
            raise ValueError(f"max_requests must be at least 1, got {self.max_requests}")


@dataclass
class RateLimitRecord:
    count: int
    reset_at: float


@dataclass(frozen=True)
class RateLimitDecision:
    """Outcome of one ``is_allowed`` call.

    ``reset_time`` is the epoch-ms end of the window that governed the
    decision; a denied client should wait until then.
    """
    allowed: bool
    reset_time: float
    limit: int
    remaining: int


class RateLimiter:
    """Per-key fixed-window counter for one class of traffic."""

    def __init__(self, config: RateLimitConfig, name: str = "general", clock: Clock = now_ms):
        self.config = config
        self.name = name
        self._clock = clock
        self._records: Dict[str, RateLimitRecord] = {}

    def is_allowed(self, key: str) -> RateLimitDecision:
        """Count one request for ``key`` and decide whether it may proceed."""
        now = self._clock()
        record = self._records.get(key)

        if record is None or now > record.reset_at:
            record = RateLimitRecord(count=1, reset_at=now + self.config.window_ms)
            self._records[key] = record
            return self._decision(True, record)

        if record.count >= self.config.max_requests:
            return self._decision(False, record)

        record.count += 1
        return self._decision(True, record)

    def remaining(self, key: str) -> int:
        """Requests ``key`` may still make in its current window."""
        record = self._records.get(key)
        if record is None or self._clock() > record.reset_at:
            return self.config.max_requests
        return max(0, self.config.max_requests - record.count)

    def retry_after(self, reset_time: float) -> int:
        """Whole seconds until ``reset_time``, never negative."""
        return max(0, math.ceil((reset_time - self._clock()) / 1000))

    def cleanup(self) -> int:
        """Drop records whose window has ended. Returns how many were dropped."""
        now = self._clock()
        expired = [k for k, record in list(self._records.items()) if now > record.reset_at]
        for key in expired:
            self._records.pop(key, None)
        return len(expired)

    def reset(self) -> None:
        self._records.clear()

    @property
    def size(self) -> int:
        return len(self._records)

    def _decision(self, allowed: bool, record: RateLimitRecord) -> RateLimitDecision:
        return RateLimitDecision(
            allowed=allowed,
            reset_time=record.reset_at,
            limit=self.config.max_requests,
            remaining=max(0, self.config.max_requests - record.count),
        )


class RateLimiterRegistry:
    """Named limiters sharing one periodic cleanup task."""

    def __init__(self, limiters: Dict[str, RateLimiter], cleanup_interval: float = 300):
        self._limiters = dict(limiters)
        self.sweeper = PeriodicSweeper("rate_limit", self.cleanup, cleanup_interval)

    @classmethod
    def from_settings(cls, settings: Settings, clock: Clock = now_ms) -> "RateLimiterRegistry":
        configs = {
            "general": RateLimitConfig(
                window_ms=settings.rate_limit_general_window_ms,
                max_requests=settings.rate_limit_general_max_requests,
            ),
            "auth": RateLimitConfig(
                window_ms=settings.rate_limit_auth_window_ms,
                max_requests=settings.rate_limit_auth_max_requests,
            ),
            "sensitive": RateLimitConfig(
                window_ms=settings.rate_limit_sensitive_window_ms,
                max_requests=settings.rate_limit_sensitive_max_requests,
            ),
        }
        limiters = {name: RateLimiter(cfg, name=name, clock=clock) for name, cfg in configs.items()}
        return cls(limiters, cleanup_interval=settings.rate_limit_cleanup_interval)

    def get(self, name: str) -> RateLimiter:
        """Return the limiter for ``name``. Raises ``KeyError`` if unknown."""
        try:
            return self._limiters[name]
        except KeyError:
            raise KeyError(f"Unknown rate limiter: {name}") from None

    def names(self) -> list:
        return sorted(self._limiters)

    def cleanup(self) -> int:
        return sum(limiter.cleanup() for limiter in self._limiters.values())

    def sizes(self) -> Dict[str, int]:
        return {name: limiter.size for name, limiter in self._limiters.items()}

    async def start(self) -> None:
        await self.sweeper.start()

    async def stop(self) -> None:
        await self.sweeper.stop()
