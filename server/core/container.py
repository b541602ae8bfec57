"""Dependency injection container for the application."""

from dependency_injector import containers, providers

from core.config import Settings
from core.cache import MemoryCache
from core.rate_limit import RateLimiterRegistry
from services.records import RecordsService


class Container(containers.DeclarativeContainer):
    """Application dependency injection container."""

    # Settings
    settings = providers.Singleton(
        Settings,
    )

    # In-process cache (one per worker)
    cache = providers.Singleton(
        MemoryCache,
        default_ttl_ms=settings.provided.cache_default_ttl_ms,
        sweep_interval=settings.provided.cache_sweep_interval,
    )

    # Named rate limiters: general, auth, sensitive
    rate_limiters = providers.Singleton(
        RateLimiterRegistry.from_settings,
        settings=settings,
    )

    # Records backend client
    records = providers.Singleton(
        RecordsService,
        settings=settings,
    )


# Global container instance
container = Container()
