"""Per-client fixed-window rate limiter (in-memory)."""
import asyncio
import logging
import time
from dataclasses import dataclass

from app.config import settings

logger = logging.getLogger(__name__)


@dataclass
class ClientWindow:
    count: int
    reset_at: float


class RateLimiter:
    """Fixed-window counter keyed by client identity.

    Counts restart at fixed boundaries, so a client can get up to
    2x max_requests through around the edge of a window.
    """

    def __init__(self, window_seconds: float = 60.0, max_requests: int = 20) -> None:
        self.window_seconds = window_seconds
        self.max_requests = max_requests
        self._windows: dict[str, ClientWindow] = {}
        self._lock = asyncio.Lock()

    async def admit(self, client_id: str, now: float | None = None) -> bool:
        """Return True if the request is allowed, False if rate-limited.

        Denied requests still count against the window.
        """
        if now is None:
            now = time.monotonic()

        async with self._lock:
            window = self._windows.get(client_id)
            if window is None or now > window.reset_at:
                self._windows[client_id] = ClientWindow(count=1, reset_at=now + self.window_seconds)
                return True

            window.count += 1
            return window.count <= self.max_requests

    async def cleanup(self, now: float | None = None) -> None:
        """Remove expired windows (call periodically)."""
        if now is None:
            now = time.monotonic()
        async with self._lock:
            stale = [cid for cid, w in self._windows.items() if now > w.reset_at]
            for cid in stale:
                del self._windows[cid]
        logger.debug("Rate table sweep removed %d of %d windows", len(stale), len(stale) + len(self._windows))


rate_limiter = RateLimiter(
    window_seconds=settings.rate_limit_window_ms / 1000,
    max_requests=settings.rate_limit_max_requests,
)
