"""
Middleware package.

WHY: Middleware provides cross-cutting concerns like request correlation
and rate limiting that apply to all requests.
"""

from muza_accounts.middleware.request_context import (
    RequestContextMiddleware,
    get_request_context,
    get_client_ip,
    RequestContext,
    RequestIdLogFilter,
)
from muza_accounts.middleware.rate_limiter import (
    RateLimitMiddleware,
    RateLimiter,
    RateLimitConfig,
    RateLimitResult,
    get_rate_limiter,
    RATE_LIMITS,
)

__all__ = [
    "RequestContextMiddleware",
    "get_request_context",
    "get_client_ip",
    "RequestContext",
    "RequestIdLogFilter",
    "RateLimitMiddleware",
    "RateLimiter",
    "RateLimitConfig",
    "RateLimitResult",
    "get_rate_limiter",
    "RATE_LIMITS",
]
