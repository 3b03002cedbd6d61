"""
Tests for the sliding window rate limiter.
"""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from dapp_sso.middleware.rate_limit import (
    RateLimiter,
    RateLimitExceeded,
    RateLimitMiddleware,
)


class ManualClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def manual_clock():
    return ManualClock()


@pytest.fixture
def limiter(manual_clock):
    return RateLimiter(
        limits={("POST", "/sessions"): {"limit": 2, "window": 60}},
        clock=manual_clock,
    )


class TestRateLimiter:

    def test_allows_up_to_limit(self, limiter):
        assert limiter.check_limit("k", limit=2, window_seconds=60)
        assert limiter.check_limit("k", limit=2, window_seconds=60)

        with pytest.raises(RateLimitExceeded) as exc_info:
            limiter.check_limit("k", limit=2, window_seconds=60)

        assert exc_info.value.limit == 2
        assert exc_info.value.retry_after == 60

    def test_keys_are_independent(self, limiter):
        limiter.check_limit("a", limit=1, window_seconds=60)

        assert limiter.check_limit("b", limit=1, window_seconds=60)

    def test_window_slides(self, limiter, manual_clock):
        limiter.check_limit("k", limit=2, window_seconds=60)
        manual_clock.now += 30
        limiter.check_limit("k", limit=2, window_seconds=60)

        manual_clock.now += 30
        assert limiter.check_limit("k", limit=2, window_seconds=60)

        with pytest.raises(RateLimitExceeded) as exc_info:
            limiter.check_limit("k", limit=2, window_seconds=60)
        assert exc_info.value.retry_after == 30

    def test_rejected_requests_are_not_counted(self, limiter, manual_clock):
        limiter.check_limit("k", limit=1, window_seconds=60)
        for _ in range(3):
            with pytest.raises(RateLimitExceeded):
                limiter.check_limit("k", limit=1, window_seconds=60)

        manual_clock.now += 60
        assert limiter.check_limit("k", limit=1, window_seconds=60)

    def test_limit_lookup_ignores_trailing_slash(self, limiter):
        assert limiter.limit_for("post", "/sessions/") == {"limit": 2, "window": 60}
        assert limiter.limit_for("GET", "/sessions") is None

    def test_idle_clients_are_forgotten(self, limiter, manual_clock):
        for client in range(1000):
            limiter.check_limit(f"POST:/sessions:10.0.{client}", limit=2, window_seconds=60)
        assert len(limiter) == 1000

        manual_clock.now += 3600
        limiter.check_limit("POST:/sessions:10.1.0.1", limit=2, window_seconds=60)

        assert len(limiter) == 1

    def test_sweep_keeps_clients_inside_window(self, limiter, manual_clock):
        limiter.check_limit("old", limit=2, window_seconds=60)
        manual_clock.now += 30
        limiter.check_limit("recent", limit=2, window_seconds=60)

        manual_clock.now += 40
        limiter.check_limit("new", limit=2, window_seconds=60)

        assert len(limiter) == 2
        assert limiter.check_limit("recent", limit=2, window_seconds=60)
        with pytest.raises(RateLimitExceeded):
            limiter.check_limit("recent", limit=2, window_seconds=60)

    def test_reset(self, limiter):
        limiter.check_limit("k", limit=1, window_seconds=60)
        limiter.reset()

        assert limiter.check_limit("k", limit=1, window_seconds=60)


def test_middleware_returns_429(limiter):
    app = FastAPI()
    app.add_middleware(RateLimitMiddleware, rate_limiter=limiter)

    @app.post("/sessions")
    async def sessions():
        return {"ok": True}

    @app.get("/sessions")
    async def list_sessions():
        return {"ok": True}

    client = TestClient(app)

    assert client.post("/sessions").status_code == 200
    assert client.post("/sessions").status_code == 200

    resp = client.post("/sessions")
    assert resp.status_code == 429
    assert resp.headers["Retry-After"] == "60"
    assert resp.headers["X-RateLimit-Limit"] == "2"
    assert resp.json()["error"] == "Rate limit exceeded"

    assert client.get("/sessions").status_code == 200
