"""Health check utilities for daemon monitoring.

Provides uptime tracking and the payload for the /health endpoint.
"""
import time
from typing import Dict, Any, TYPE_CHECKING

import psutil

if TYPE_CHECKING:
    from core.config import Settings
    from core.cache import MemoryCache
    from core.rate_limit import RateLimiterRegistry
    from services.records import RecordsService

# Module-level startup time tracking
_startup_time: float = 0.0


def set_startup_time() -> None:
    """Record the application startup time. Call once during lifespan startup."""
    global _startup_time
    _startup_time = time.time()


def get_uptime() -> float:
    """Get uptime in seconds since startup."""
    return time.time() - _startup_time if _startup_time else 0.0


def get_memory_mb() -> float:
    """Get current process memory usage in MB."""
    try:
        return psutil.Process().memory_info().rss / (1024 * 1024)
    except psutil.Error:
        return 0.0


async def get_health_status(
    cache: "MemoryCache",
    rate_limiters: "RateLimiterRegistry",
    records: "RecordsService",
    settings: "Settings"
) -> Dict[str, Any]:
    """Get health status for /health endpoint.

    Returns:
        Dict containing status, uptime, memory, cache and limiter state.
    """
    backend_ok = await records.ping()

    return {
        "status": "healthy" if backend_ok else "degraded",
        "uptime_seconds": round(get_uptime(), 1),
        "memory_mb": round(get_memory_mb(), 1),
        "checks": {
            "records_backend": backend_ok,
        },
        "cache": {
            "size": cache.size,
            "sweeper_running": cache.sweeper.running,
        },
        "rate_limits": {
            "enabled": settings.rate_limit_enabled,
            "tracked_keys": rate_limiters.sizes(),
            "sweeper_running": rate_limiters.sweeper.running,
        },
    }
