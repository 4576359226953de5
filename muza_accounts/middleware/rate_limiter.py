"""
Rate limiting middleware for code-issuing and credential endpoints.

WHAT: Limits how often one client may request verification codes or try
passwords.

WHY: Every code request sends an email and every login is a password
guess. Without limits an attacker could:
1. Flood an inbox with verification emails
2. Brute-force the 6-digit code space within its 15-minute lifetime
3. Guess passwords

HOW: Redis fixed window per client IP and endpoint:
1. INCR a counter for IP+endpoint, EXPIRE it after the window
2. If the counter exceeds the limit, return 429 Too Many Requests
3. Rate limit headers inform clients of their current status

Design decisions:
- Fail-open: If Redis is unavailable, allow requests (prevents self-DOS)
- Per-endpoint limits: code issuance is stricter than login
"""

from dataclasses import dataclass
from typing import Optional, Dict
import logging
import redis.asyncio as aioredis
from redis.exceptions import RedisError
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from muza_accounts.core.config import settings
from muza_accounts.core.exceptions import RateLimitExceeded
from muza_accounts.middleware.request_context import get_client_ip


logger = logging.getLogger(__name__)


# ============================================================================
# Configuration
# ============================================================================


@dataclass
class RateLimitConfig:
    """Rate limit parameters for an endpoint."""

    requests_per_window: int = 5
    """Maximum number of requests allowed in the window."""

    window_seconds: int = 60
    """Duration of the rate limit window in seconds."""

    key_prefix: str = "ratelimit"
    """Redis key prefix for rate limit counters."""


# Endpoint-specific rate limit configurations
RATE_LIMITS: Dict[str, RateLimitConfig] = {
    "/api/auth/login": RateLimitConfig(
        requests_per_window=5,
        window_seconds=60,
        key_prefix="ratelimit:login",
    ),
    "/api/auth/register/initiate": RateLimitConfig(
        requests_per_window=3,
        window_seconds=60,
        key_prefix="ratelimit:register",
    ),
    "/api/auth/register/resend-code": RateLimitConfig(
        requests_per_window=3,
        window_seconds=60,
        key_prefix="ratelimit:register-resend",
    ),
    "/api/auth/register/verify": RateLimitConfig(
        requests_per_window=10,
        window_seconds=60,
        key_prefix="ratelimit:register-verify",
    ),
    "/api/users/email/change/initiate": RateLimitConfig(
        requests_per_window=3,
        window_seconds=60,
        key_prefix="ratelimit:email-change",
    ),
    "/api/users/email/change/resend-code": RateLimitConfig(
        requests_per_window=3,
        window_seconds=60,
        key_prefix="ratelimit:email-change-resend",
    ),
    "/api/users/email/change/verify": RateLimitConfig(
        requests_per_window=10,
        window_seconds=60,
        key_prefix="ratelimit:email-change-verify",
    ),
}


# ============================================================================
# Rate Limit Result
# ============================================================================


@dataclass
class RateLimitResult:
    """Result of a rate limit check."""

    allowed: bool
    """Whether the request is allowed (under limit)."""

    remaining: int
    """Number of requests remaining in current window (-1 if unknown)."""

    reset_after: int
    """Seconds until the rate limit window resets."""

    limit: int
    """Maximum requests allowed per window."""


# ============================================================================
# Rate Limiter Service
# ============================================================================


class RateLimiter:
    """
    Rate limiter service using Redis.

    HOW: Uses Redis pipeline for increment + expire:
    1. INCR key (increments counter, creates with value 1 if new)
    2. EXPIRE key window_seconds
    3. Compare counter to limit
    """

    def __init__(
        self,
        redis_client: aioredis.Redis,
        config: Optional[RateLimitConfig] = None,
    ):
        self._redis = redis_client
        self._config = config or RateLimitConfig()

    def _build_key(self, identifier: str, endpoint: str, config: RateLimitConfig) -> str:
        """
        Build Redis key for rate limit counter.

        HOW: Format: {prefix}:{endpoint_normalized}:{identifier}
        """
        normalized_endpoint = endpoint.strip("/").replace("/", ":")
        return f"{config.key_prefix}:{normalized_endpoint}:{identifier}"

    async def check_rate_limit(
        self,
        identifier: str,
        endpoint: str,
        config: Optional[RateLimitConfig] = None,
    ) -> RateLimitResult:
        """
        Increment the counter for identifier+endpoint and compare to the limit.

        Args:
            identifier: Client identifier (IP address)
            endpoint: API endpoint being accessed
            config: Limit for this endpoint (defaults to the limiter's config)

        Returns:
            RateLimitResult with allowed status and metadata
        """
        config = config or self._config
        key = self._build_key(identifier, endpoint, config)

        try:
            pipe = self._redis.pipeline()
            pipe.incr(key)
            pipe.expire(key, config.window_seconds)

            results = await pipe.execute()
            current_count = results[0]

        except (RedisError, OSError) as e:
            # Fail-open: allow request if Redis is unavailable
            logger.error(
                f"Rate limit Redis error (allowing request): {e}",
                extra={
                    "identifier": identifier,
                    "endpoint": endpoint,
                    "error": str(e),
                },
            )
            return RateLimitResult(
                allowed=True,
                remaining=-1,
                reset_after=config.window_seconds,
                limit=config.requests_per_window,
            )

        return RateLimitResult(
            allowed=current_count <= config.requests_per_window,
            remaining=max(0, config.requests_per_window - current_count),
            reset_after=config.window_seconds,
            limit=config.requests_per_window,
        )


# ============================================================================
# Global Rate Limiter Instance
# ============================================================================


_rate_limiter: Optional[RateLimiter] = None


async def get_rate_limiter() -> RateLimiter:
    """
    Get or create global rate limiter instance.

    WHY: Single Redis connection pool for rate limiting; tests replace this
    function with one returning a mock limiter.
    """
    global _rate_limiter

    if _rate_limiter is None:
        redis_client = aioredis.from_url(
            settings.REDIS_URL,
            encoding="utf-8",
            decode_responses=True,
        )
        _rate_limiter = RateLimiter(redis_client=redis_client)

    return _rate_limiter


# ============================================================================
# Rate Limit Middleware
# ============================================================================


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Middleware applying RATE_LIMITS to matching POST requests.

    Usage:
        app.add_middleware(RateLimitMiddleware)
    """

    def __init__(self, app, limits: Optional[Dict[str, RateLimitConfig]] = None):
        super().__init__(app)
        self.limits = RATE_LIMITS if limits is None else limits

    async def dispatch(self, request: Request, call_next):
        path = request.url.path.rstrip("/") or "/"
        config = self.limits.get(path)

        if not settings.RATE_LIMIT_ENABLED or config is None or request.method != "POST":
            return await call_next(request)

        identifier = get_client_ip(request)
        limiter = await get_rate_limiter()
        result = await limiter.check_rate_limit(identifier, path, config)

        if not result.allowed:
            logger.warning(
                "Rate limit exceeded",
                extra={"identifier": identifier, "endpoint": path},
            )
            exc = RateLimitExceeded(
                message=f"Rate limit exceeded. Try again in {result.reset_after} seconds.",
                retry_after=result.reset_after,
            )
            return JSONResponse(
                status_code=exc.status_code,
                content=exc.to_dict(),
                headers={
                    "X-RateLimit-Limit": str(result.limit),
                    "X-RateLimit-Remaining": str(result.remaining),
                    "X-RateLimit-Reset": str(result.reset_after),
                    "Retry-After": str(result.reset_after),
                },
            )

        response = await call_next(request)

        response.headers["X-RateLimit-Limit"] = str(result.limit)
        response.headers["X-RateLimit-Remaining"] = str(result.remaining)
        response.headers["X-RateLimit-Reset"] = str(result.reset_after)

        return response
