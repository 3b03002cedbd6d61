from .logging_middleware import RequestLoggingMiddleware
from .rate_limit import (
    RateLimiter,
    RateLimitExceeded,
    RateLimitMiddleware,
    get_rate_limiter,
)

__all__ = [
    "RequestLoggingMiddleware",
    "RateLimiter",
    "RateLimitExceeded",
    "RateLimitMiddleware",
    "get_rate_limiter",
]
