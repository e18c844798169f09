"""Fixed-window rate limiting backed by Redis.

Rules:
  - /api/v1/auth/*: AUTH_RATE_LIMIT_PER_MINUTE per client IP (anti brute-force)
  - everything else under /api/v1: RATE_LIMIT_PER_MINUTE per caller
    (JWT subject when a valid bearer token is present, client IP otherwise)

Key pattern: "ratelimit:{group}:{identity}:{window}" with INCR + EXPIRE.
Middleware runs outside FastAPI's exception handlers, so the 429 envelope is
rendered here rather than raised.
If Redis is unreachable the request is let through and a warning is logged.
"""

import logging
import time

from redis.exceptions import RedisError
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from config.settings import settings
from src.hb_common.errors import AppError, RateLimitError
from src.hb_common.redis_client import get_redis
from src.hb_common.response import error_json
from src.hb_gateway.auth.jwt_handler import decode_token

logger = logging.getLogger(__name__)

_WINDOW_SECONDS = 60
_API_PREFIX = "/api/v1"
_AUTH_PREFIX = "/api/v1/auth"


def client_ip(request: Request) -> str:
    """First hop of X-Forwarded-For when behind a proxy, else the socket peer."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def caller_identity(request: Request) -> str:
    auth = request.headers.get("authorization", "")
    scheme, _, token = auth.partition(" ")
    if scheme.lower() == "bearer" and token:
        try:
            return f"user:{decode_token(token, expected_type='access')['sub']}"
        except AppError:
            pass
    return f"ip:{client_ip(request)}"


class RateLimitMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        path = request.url.path
        if not settings.RATE_LIMIT_ENABLED or not path.startswith(_API_PREFIX):
            return await call_next(request)

        if path.startswith(_AUTH_PREFIX):
            group, identity, limit = "auth", f"ip:{client_ip(request)}", settings.AUTH_RATE_LIMIT_PER_MINUTE
        else:
            group, identity, limit = "api", caller_identity(request), settings.RATE_LIMIT_PER_MINUTE

        window = int(time.time()) // _WINDOW_SECONDS
        key = f"ratelimit:{group}:{identity}:{window}"
        try:
            redis = await get_redis()
            count = await redis.incr(key)
            if count == 1:
                await redis.expire(key, _WINDOW_SECONDS)
        except RedisError:
            logger.warning("Rate limiter unavailable, letting %s %s through", group, identity)
            return await call_next(request)

        if count > limit:
            logger.warning("Rate limit exceeded: %s %s (%d/%d)", group, identity, count, limit)
            retry_after = _WINDOW_SECONDS - int(time.time()) % _WINDOW_SECONDS
            return error_json(request, RateLimitError(), headers={"Retry-After": str(retry_after)})
        return await call_next(request)
