"""Rate limiting for routes.

Routes opt in per traffic class::

    @router.get("/", dependencies=[Depends(rate_limit("general"))])

Allowed requests get ``X-RateLimit-*`` headers; denied ones get a 429 with a
``Retry-After`` hint.
"""

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse

from core.container import container
from core.logging import get_logger, log_rate_limit_decision

logger = get_logger(__name__)

UNKNOWN = "unknown"


class RateLimitExceeded(Exception):
    """Raised by the rate_limit dependency when a client is over quota."""

    def __init__(self, limiter: str, limit: int, reset_time: float, retry_after: int):
        self.limiter = limiter
        self.limit = limit
        self.reset_time = reset_time
        self.retry_after = retry_after
        super().__init__(f"Rate limit exceeded for '{limiter}' (retry after {retry_after}s)")


def client_key(request: Request) -> str:
    """Identify the client as ``<ip>:<user-agent>``.

    The first X-Forwarded-For hop wins over the socket peer address.
    """
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        ip = forwarded.split(",")[0].strip() or UNKNOWN
    elif request.client and request.client.host:
        ip = request.client.host
    else:
        ip = UNKNOWN
    user_agent = request.headers.get("user-agent") or UNKNOWN
    return f"{ip}:{user_agent}"


def rate_limit(name: str = "general"):
    """Build a FastAPI dependency enforcing the named limiter."""

    async def dependency(request: Request, response: Response) -> None:
        if not container.settings().rate_limit_enabled:
            return

        limiter = container.rate_limiters().get(name)
        key = client_key(request)
        decision = limiter.is_allowed(key)
        log_rate_limit_decision(logger, name, key, decision.allowed,
                                remaining=decision.remaining, path=request.url.path)

        if not decision.allowed:
            raise RateLimitExceeded(
                limiter=name,
                limit=decision.limit,
                reset_time=decision.reset_time,
                retry_after=limiter.retry_after(decision.reset_time),
            )

        response.headers["X-RateLimit-Limit"] = str(decision.limit)
        response.headers["X-RateLimit-Remaining"] = str(decision.remaining)
        response.headers["X-RateLimit-Reset"] = str(int(decision.reset_time))

    return dependency


async def rate_limit_exceeded_handler(_request: Request, exc: RateLimitExceeded) -> JSONResponse:
    return JSONResponse(
        status_code=429,
        content={"error": "Too many requests", "retryAfter": exc.retry_after},
        headers={
            "Retry-After": str(exc.retry_after),
            "X-RateLimit-Limit": str(exc.limit),
            "X-RateLimit-Remaining": "0",
            "X-RateLimit-Reset": str(int(exc.reset_time)),
        },
    )


def register_rate_limit_handler(app: FastAPI) -> None:
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
