"""Wall clock in epoch milliseconds, shared by the cache and rate limiter."""

import time
from typing import Callable

Clock = Callable[[], float]


def now_ms() -> float:
    return time.time() * 1000
