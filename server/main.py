"""
FastAPI backend for the back-office API.

Reads are cached in-process, requests are rate limited per client, and all
persistence is delegated to the managed records service.
"""

# Performance: Install uvloop if available (Linux/macOS only)
try:
    import uvloop
    uvloop.install()
except ImportError:
    pass  # Windows - uvloop not available, use default asyncio

from datetime import datetime
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, ORJSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from core.container import container
from core.health import get_health_status, set_startup_time
from core.logging import configure_logging, get_logger
from middleware.rate_limit import register_rate_limit_handler
from routers import resources

# Initialize settings and logging
settings = container.settings()
configure_logging(settings)
logger = get_logger(__name__)

# Suppress noisy loggers
import logging
logging.getLogger("uvicorn").setLevel(logging.WARNING)
logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
logging.getLogger("uvicorn.error").setLevel(logging.WARNING)
logging.getLogger("httpx").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan management."""
    logger.info("Starting back-office API")
    set_startup_time()

    cache = container.cache()
    rate_limiters = container.rate_limiters()
    await cache.start()
    await rate_limiters.start()

    logger.info("Services started successfully",
                rate_limiters=rate_limiters.names(),
                cache_default_ttl_ms=cache.default_ttl_ms)
    yield

    # Shutdown
    await rate_limiters.stop()
    await cache.stop()
    cache.reset()
    await container.records().aclose()
    logger.info("Services shutdown complete")


class CatchAllExceptionsMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except Exception as e:
            logger.error(f"Unhandled exception: {type(e).__name__}: {str(e)}", exc_info=True)
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={
                    "success": False,
                    "error": f"{type(e).__name__}: {str(e)}",
                    "detail": "Internal server error"
                }
            )


def create_app() -> FastAPI:
    app = FastAPI(
        title="Back-office API",
        version="1.0.0",
        description="Back-office records API with cached reads and per-client rate limits",
        lifespan=lifespan,
        default_response_class=ORJSONResponse
    )

    # Exception middleware BEFORE CORS to catch all errors
    app.add_middleware(CatchAllExceptionsMiddleware)
    register_rate_limit_handler(app)

    # CORS middleware (must be AFTER exception middleware)
    logger.info("Configuring CORS middleware",
                origins_count=len(settings.cors_origins),
                origins=settings.cors_origins)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Retry-After", "X-RateLimit-Limit", "X-RateLimit-Remaining", "X-RateLimit-Reset"],
    )

    app.include_router(resources.router)

    @app.get("/health")
    async def health_check():
        """Detailed health check."""
        payload = await get_health_status(
            cache=container.cache(),
            rate_limiters=container.rate_limiters(),
            records=container.records(),
            settings=container.settings(),
        )
        payload.update({
            "service": "backoffice-api",
            "version": app.version,
            "environment": "development" if settings.debug else "production",
            "timestamp": datetime.now().isoformat(),
        })
        return payload

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    logger.info("Starting back-office API",
                host=settings.host, port=settings.port, debug=settings.debug)
    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        reload_dirs=["."] if settings.debug else None,
        reload_excludes=["*.pyc", "__pycache__", "*.log"] if settings.debug else None,
        workers=1 if settings.debug else settings.workers
    )
