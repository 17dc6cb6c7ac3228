# student_insights/core/rate_limit.py
from typing import List

from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from slowapi.wrappers import Limit, LimitGroup

from student_insights.core.config import Settings


def build_limiter(settings: Settings) -> Limiter:
    """One limiter per application instance; the counter lives in the configured storage."""
    return Limiter(
        key_func=get_remote_address,
        default_limits=[settings.RATE_LIMIT],
        storage_uri=settings.RATE_LIMIT_STORAGE_URI,
    )


def build_limits(settings: Settings) -> List[Limit]:
    """Parsed form of ``RATE_LIMIT``, shared by every route of one app."""
    group = LimitGroup(
        settings.RATE_LIMIT,
        get_remote_address,
        "api",
        False,
        None,
        None,
        None,
        1,
        False,
    )
    return list(group)


def enforce_rate_limit(request: Request) -> None:
    """
    App-wide dependency: counts the request against every configured limit
    and raises RateLimitExceeded on the first one that is exhausted.
    """
    limiter: Limiter = request.app.state.limiter
    if not limiter.enabled:
        return
    for limit in request.app.state.rate_limits:
        if not limiter.limiter.hit(limit.limit, limit.key_func(request), limit.scope):
            raise RateLimitExceeded(limit)


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    return JSONResponse(
        status_code=429,
        content={"detail": "Rate limit exceeded", "error": str(exc)},
    )
