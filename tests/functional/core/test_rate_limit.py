# tests/functional/core/test_rate_limit.py

import httpx
import pytest
from fastapi import FastAPI

from school_api.core.rate_limit import FixedWindowRateLimiter, RateLimitMiddleware


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def test_limiter_allows_up_to_max_then_blocks():
    limiter = FixedWindowRateLimiter(window_ms=60_000, max_requests=3, clock=FakeClock())
    assert [limiter.hit("1.2.3.4") for _ in range(4)] == [True, True, True, False]


def test_limiter_counts_keys_separately():
    limiter = FixedWindowRateLimiter(window_ms=60_000, max_requests=1, clock=FakeClock())
    assert limiter.hit("a")
    assert limiter.hit("b")
    assert not limiter.hit("a")


def test_limiter_resets_after_window():
    clock = FakeClock()
    limiter = FixedWindowRateLimiter(window_ms=10_000, max_requests=1, clock=clock)
    assert limiter.hit("a")
    assert not limiter.hit("a")
    assert limiter.retry_after("a") == 11
    clock.now += 10
    assert limiter.hit("a")


def test_limiter_reset_clears_counts():
    limiter = FixedWindowRateLimiter(window_ms=10_000, max_requests=1, clock=FakeClock())
    limiter.hit("a")
    limiter.reset()
    assert limiter.hit("a")


@pytest.fixture
def limited_app() -> FastAPI:
    app = FastAPI()
    limiter = FixedWindowRateLimiter(window_ms=60_000, max_requests=2, clock=FakeClock())
    app.add_middleware(RateLimitMiddleware, limiter=limiter, path_prefix="/api")

    @app.get("/api/ping")
    async def ping():
        return {"ok": True}

    @app.get("/open")
    async def open_route():
        return {"ok": True}

    return app


@pytest.mark.asyncio
async def test_middleware_returns_429_envelope(limited_app):
    transport = httpx.ASGITransport(app=limited_app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        assert (await client.get("/api/ping")).status_code == 200
        assert (await client.get("/api/ping")).status_code == 200
        response = await client.get("/api/ping")

    assert response.status_code == 429
    assert response.headers["Retry-After"] == "61"
    assert response.json() == {
        "success": False,
        "message": "Too many requests from this IP, please try again later",
        "data": None,
    }


@pytest.mark.asyncio
async def test_middleware_ignores_paths_outside_prefix(limited_app):
    transport = httpx.ASGITransport(app=limited_app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        statuses = [(await client.get("/open")).status_code for _ in range(5)]
    assert statuses == [200] * 5
