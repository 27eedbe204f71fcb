"""
Rate Limiting for the DrawHub API
=================================
slowapi limiter keyed by authenticated user when known, otherwise by client IP.

Only the login endpoint carries an explicit limit (brute force protection):
    @router.post("/login")
    @limiter.limit(settings.LOGIN_RATE_LIMIT)
    async def login(request: Request, ...): ...

Storage defaults to in-process memory; point RATE_LIMIT_STORAGE_URI at
redis://... when running more than one worker.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from fastapi import Request
from fastapi.responses import JSONResponse

from drawhub.core.config import settings
from drawhub.core.logging_config import logger


def get_user_identifier(request: Request) -> str:
    """Rate limit key: authenticated user id, falling back to the client IP"""
    user_id = getattr(request.state, 'user_id', None)
    if user_id:
        return f"user:{user_id}"
    return f"ip:{get_remote_address(request)}"


limiter = Limiter(
    key_func=get_user_identifier,
    default_limits=[f"{settings.RATE_LIMIT_PER_MINUTE}/minute"],
    storage_uri=settings.RATE_LIMIT_STORAGE_URI,
    strategy="fixed-window",
    enabled=settings.RATE_LIMIT_ENABLED,
)


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    """JSON 429 in the same shape as every other API error"""
    logger.warning(
        f"[RateLimit] Exceeded for {get_user_identifier(request)}: {exc.detail}",
        extra={"event_type": "rate_limited", "http_path": request.url.path}
    )

    return JSONResponse(
        status_code=429,
        content={
            "code": "RATE_LIMITED",
            "message": "Muitas tentativas. Aguarde um minuto e tente novamente.",
        },
        headers={"Retry-After": "60"}
    )
