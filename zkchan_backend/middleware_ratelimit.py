import logging
import threading
import time
from typing import Callable, Dict, List
from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger("zkchan.request")

EXEMPT_PATHS = {"/health"}


class RateLimiter:
    """Sliding-window limiter keyed by client address."""

    def __init__(self, max_requests: int = 120, window_seconds: float = 60.0,
                 clock: Callable[[], float] = time.monotonic):
        self.max_requests = max_requests
        self.window = window_seconds
        self._clock = clock
        self._buckets: Dict[str, List[float]] = {}
        self._last_prune = clock()
        self._lock = threading.Lock()

    def allow(self, key: str) -> bool:
        now = self._clock()
        with self._lock:
            if now - self._last_prune >= self.window:
                self._prune(now)
            bucket = self._buckets.setdefault(key, [])
            bucket[:] = [t for t in bucket if now - t < self.window]
            if len(bucket) >= self.max_requests:
                return False
            bucket.append(now)
            return True

    def _prune(self, now: float) -> None:
        # drop clients with nothing left inside the window
        for key in [k for k, b in self._buckets.items() if not b or now - b[-1] >= self.window]:
            del self._buckets[key]
        self._last_prune = now

    @property
    def tracked_clients(self) -> int:
        return len(self._buckets)

    def reset(self):
        with self._lock:
            self._buckets.clear()


class RateLimitMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, limiter: RateLimiter):
        super().__init__(app)
        self.limiter = limiter

    async def dispatch(self, request: Request, call_next: Callable):
        if request.url.path in EXEMPT_PATHS or request.method == "OPTIONS":
            return await call_next(request)
        client = request.client.host if request.client else "-"
        if not self.limiter.allow(client):
            logger.warning("rate limited client=%s path=%s", client, request.url.path)
            return JSONResponse({"error": "Too many requests"}, status_code=429)
        return await call_next(request)


def register_rate_limit(app, max_requests: int, window_seconds: float):
    # 0 disables
    if max_requests <= 0:
        return None
    limiter = RateLimiter(max_requests, window_seconds)
    app.add_middleware(RateLimitMiddleware, limiter=limiter)
    return limiter
