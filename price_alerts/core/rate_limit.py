import time
from collections import deque

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

from price_alerts.core.config import settings
from price_alerts.core.exceptions import rate_limited_body


GLOBAL_LIMIT_MESSAGE = "Too many requests, please try again later."
ALERT_LIMIT_MESSAGE = "Too many alerts created, please try again in an hour."


class SlidingWindowLimiter:
    """In-memory sliding window: at most `limit` hits per key within `window_seconds`."""

    def __init__(self, limit: int, window_seconds: int, message: str):
        self.limit = limit
        self.window_seconds = window_seconds
        self.message = message
        self.requests: dict[str, deque[float]] = {}
        self._last_sweep: float | None = None

    def _expire(self, bucket: deque[float], now: float) -> None:
        while bucket and now - bucket[0] >= self.window_seconds:
            bucket.popleft()

    def _sweep(self, now: float) -> None:
        """Drop keys with no hit left in the window, at most once per window."""
        if self._last_sweep is not None and now - self._last_sweep < self.window_seconds:
            return
        self._last_sweep = now
        for key in list(self.requests):
            self._expire(self.requests[key], now)
            if not self.requests[key]:
                del self.requests[key]

    def hit(self, key: str, now: float | None = None) -> bool:
        """Record a hit for `key`. Returns False (and records nothing) when over the limit."""
        now = time.monotonic() if now is None else now
        self._sweep(now)

        bucket = self.requests.setdefault(key, deque())
        self._expire(bucket, now)

        if len(bucket) >= self.limit:
            return False

        bucket.append(now)
        return True

    def reset(self) -> None:
        self.requests.clear()
        self._last_sweep = None


global_limiter = SlidingWindowLimiter(
    settings.GLOBAL_RATE_LIMIT, settings.GLOBAL_RATE_WINDOW_SECONDS, GLOBAL_LIMIT_MESSAGE
)
alert_limiter = SlidingWindowLimiter(
    settings.ALERT_RATE_LIMIT, settings.ALERT_RATE_WINDOW_SECONDS, ALERT_LIMIT_MESSAGE
)


def client_key(request: Request) -> str:
    return request.client.host if request.client else "unknown"


class RateLimitMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, limiter: SlidingWindowLimiter = global_limiter):
        super().__init__(app)
        self.limiter = limiter

    async def dispatch(self, request: Request, call_next):
        if request.method == "OPTIONS":
            return await call_next(request)
        if not self.limiter.hit(client_key(request)):
            return JSONResponse(
                status_code=429,
                content=rate_limited_body(self.limiter.message),
            )
        return await call_next(request)
