"""
Rate limiting middleware with in-process sliding windows.

Only session creation is throttled by default: it is the endpoint that runs
signature recovery for unauthenticated callers.
"""

import threading
import time
from collections import deque
from typing import Awaitable, Callable, Deque, Dict, Optional, Tuple

from fastapi import Request, status
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse, Response

from dapp_sso.config import settings


class RateLimitExceeded(Exception):
    """Rate limit has been exceeded."""
    def __init__(self, limit: int, window_seconds: int, retry_after: int):
        self.limit = limit
        self.window_seconds = window_seconds
        self.retry_after = retry_after
        super().__init__(f"Rate limit exceeded: {limit} requests per {window_seconds}s")


def default_limits() -> Dict[Tuple[str, str], Dict[str, int]]:
    # (method, path): {"limit": requests, "window": seconds}
    return {
        ("POST", "/sessions"): {
            "limit": settings.session_rate_limit,
            "window": settings.session_rate_window_seconds,
        },
    }


class RateLimiter:
    """
    Sliding window rate limiter keyed by path and client.

    Timestamps of accepted requests are kept per key and pruned on access.
    Keys whose window has emptied are swept at most once per
    ``sweep_interval`` seconds.
    """

    def __init__(
        self,
        limits: Optional[Dict[Tuple[str, str], Dict[str, int]]] = None,
        clock: Callable[[], float] = time.monotonic,
        sweep_interval: float = 60.0,
    ):
        self.limits = default_limits() if limits is None else limits
        self.clock = clock
        self.sweep_interval = sweep_interval
        self._hits: Dict[str, Deque[float]] = {}
        self._windows: Dict[str, int] = {}
        self._last_sweep = clock()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._hits)

    def limit_for(self, method: str, path: str) -> Optional[Dict[str, int]]:
        return self.limits.get((method.upper(), path.rstrip("/") or "/"))

    def check_limit(self, key: str, limit: int, window_seconds: int) -> bool:
        """
        Record a request for ``key``.

        Returns:
            True if within limits, raises RateLimitExceeded if exceeded
        """
        now = self.clock()
        window_start = now - window_seconds
        with self._lock:
            self._sweep(now)
            hits = self._hits.setdefault(key, deque())
            self._windows[key] = window_seconds
            while hits and hits[0] <= window_start:
                hits.popleft()
            if len(hits) >= limit:
                retry_after = max(1, int(hits[0] - window_start + 0.999))
                raise RateLimitExceeded(limit, window_seconds, retry_after)
            hits.append(now)
        return True

    def _sweep(self, now: float) -> None:
        if now - self._last_sweep < self.sweep_interval:
            return
        self._last_sweep = now
        stale = [
            key for key, hits in self._hits.items()
            if not hits or hits[-1] <= now - self._windows.get(key, 0)
        ]
        for key in stale:
            del self._hits[key]
            self._windows.pop(key, None)

    def check_request(self, request: Request, identifier: Optional[str] = None) -> bool:
        """
        Check rate limit for an HTTP request.

        Requests to paths without a configured limit always pass.
        """
        path = request.url.path
        limit_config = self.limit_for(request.method, path)
        if limit_config is None:
            return True

        if identifier is None:
            identifier = request.client.host if request.client else "unknown"

        return self.check_limit(
            key=f"{request.method}:{path}:{identifier}",
            limit=limit_config["limit"],
            window_seconds=limit_config["window"],
        )

    def reset(self) -> None:
        with self._lock:
            self._hits.clear()
            self._windows.clear()


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    FastAPI middleware for rate limiting.
    """

    def __init__(self, app, rate_limiter: Optional[RateLimiter] = None):
        super().__init__(app)
        self.rate_limiter = rate_limiter or get_rate_limiter()

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        try:
            self.rate_limiter.check_request(request)
        except RateLimitExceeded as e:
            return JSONResponse(
                content={"error": "Rate limit exceeded", "retry_after": e.retry_after},
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                headers={
                    "Retry-After": str(e.retry_after),
                    "X-RateLimit-Limit": str(e.limit),
                    "X-RateLimit-Window": str(e.window_seconds),
                },
            )
        return await call_next(request)


# Singleton instance
_rate_limiter: Optional[RateLimiter] = None


def get_rate_limiter() -> RateLimiter:
    """Get the singleton rate limiter instance."""
    global _rate_limiter
    if _rate_limiter is None:
        _rate_limiter = RateLimiter()
    return _rate_limiter
