# school_api/core/rate_limit.py
import logging
import time
from typing import Callable, Dict, Tuple

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from school_api.core.errors import RateLimitExceededError, error_body

logger = logging.getLogger(__name__)


class FixedWindowRateLimiter:
    """
    Counts hits per client key inside fixed windows of ``window_ms``.

    Only touched from the event loop thread, so no locking is needed.
    """

    def __init__(self, window_ms: int, max_requests: int, clock: Callable[[], float] = time.monotonic):
        self.window_seconds = window_ms / 1000.0
        self.max_requests = max_requests
        self._clock = clock
        self._hits: Dict[str, Tuple[float, int]] = {}

    def hit(self, key: str) -> bool:
        """Records a request for ``key``; returns False once the limit is exceeded."""
        now = self._clock()
        window_start, count = self._hits.get(key, (now, 0))
        if now - window_start >= self.window_seconds:
            window_start, count = now, 0
        count += 1
        self._hits[key] = (window_start, count)
        if len(self._hits) > 10_000:
            self._prune(now)
        return count <= self.max_requests

    def retry_after(self, key: str) -> int:
        window_start, _ = self._hits.get(key, (self._clock(), 0))
        remaining = self.window_seconds - (self._clock() - window_start)
        return max(int(remaining) + 1, 1)

    def reset(self) -> None:
        self._hits.clear()

    def _prune(self, now: float) -> None:
        expired = [key for key, (start, _) in self._hits.items() if now - start >= self.window_seconds]
        for key in expired:
            del self._hits[key]


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Applies ``limiter`` to every request whose path starts with ``path_prefix``."""

    def __init__(self, app, limiter: FixedWindowRateLimiter, path_prefix: str = "/api"):
        super().__init__(app)
        self.limiter = limiter
        self.path_prefix = path_prefix

    @staticmethod
    def client_key(request: Request) -> str:
        return request.client.host if request.client else "unknown"

    async def dispatch(self, request: Request, call_next):
        if not request.url.path.startswith(self.path_prefix):
            return await call_next(request)

        key = self.client_key(request)
        if not self.limiter.hit(key):
            logger.warning(f"Rate limit exceeded for {key} on {request.method} {request.url.path}")
            error = RateLimitExceededError()
            return JSONResponse(
                status_code=error.status_code,
                content=error_body(error.message),
                headers={"Retry-After": str(self.limiter.retry_after(key))},
            )
        return await call_next(request)
