"""
Request Rate Limiting

slowapi limiter shared by the books and ratings routers. Clients are
keyed by IP address; reads use settings.rate_limit_default, rating
mutations and book administration use settings.rate_limit_write.
"""

import logging

from fastapi import Request
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.responses import JSONResponse

from catalog.config import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()

RETRY_AFTER_SECONDS = 60


def get_client_ip(request: Request) -> str:
    """Client address, taken from proxy headers when the API sits behind one."""
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return forwarded_for.split(",", 1)[0].strip()

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip.strip()

    return get_remote_address(request)


def create_limiter() -> Limiter:
    limiter = Limiter(
        key_func=get_client_ip,
        default_limits=[settings.rate_limit_default],
        storage_uri=settings.rate_limit_storage_uri,
        enabled=settings.rate_limit_enabled,
    )
    logger.info(
        f"Rate limiting {'on' if settings.rate_limit_enabled else 'off'} "
        f"(reads {settings.rate_limit_default}, writes {settings.rate_limit_write})"
    )
    return limiter


limiter = create_limiter()


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """429 in the API's {"message", "data"} envelope."""
    logger.warning(f"Rate limit hit by {get_client_ip(request)} on {request.url.path}: {exc.detail}")
    return JSONResponse(
        status_code=429,
        content={
            "message": "Too many requests. Please slow down.",
            "data": {"limit": str(exc.detail)},
        },
        headers={"Retry-After": str(RETRY_AFTER_SECONDS)},
    )
