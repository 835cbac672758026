"""Fixed-window rate limiting for the back office API.

Each (client address, route) pair gets its own counter. The quota is
chosen by the caller per endpoint; the limiter knows nothing about verbs.
A single limiter instance is created by the application factory and kept
on ``app.state``.
"""

import asyncio
import threading
import time
from collections import OrderedDict
from typing import Callable, Optional

from fastapi import Request

from backoffice.app.core.logging import get_logger
from backoffice.app.middleware.rate_limit.models import RateLimitResult, RateWindow

logger = get_logger(__name__)

__all__ = [
    "RateLimitResult",
    "RateWindow",
    "FixedWindowRateLimiter",
    "RateLimitSweeper",
    "get_client_address",
    "get_client_identifier",
    "get_rate_limiter",
]

DEFAULT_WINDOW_SECONDS = 60


class FixedWindowRateLimiter:
    """In-memory fixed-window rate limiter.

    The window table is the only mutable state shared between requests.
    A lock makes the check-then-increment atomic, so the limiter is safe
    from both the event loop and FastAPI's worker threads.

    Memory is bounded two ways: ``sweep()`` drops expired windows and the
    table never holds more than ``max_entries`` identifiers (least recently
    seen are evicted first).
    """

    DEFAULT_MAX_ENTRIES = 10000

    def __init__(
        self,
        default_window_seconds: float = DEFAULT_WINDOW_SECONDS,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        clock: Callable[[], float] = time.time,
    ):
        """Initialize rate limiter.

        Args:
            default_window_seconds: Window length used when a check does not pass one
            max_entries: Maximum number of identifiers to track
            clock: Time source returning seconds
        """
        self.default_window_seconds = default_window_seconds
        self._max_entries = max_entries
        self._clock = clock
        self._windows: OrderedDict[str, RateWindow] = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._windows)

    def _enforce_max_entries(self) -> None:
        while len(self._windows) > self._max_entries:
            self._windows.popitem(last=False)

    def check(
        self,
        identifier: str,
        max_requests: int,
        window_seconds: Optional[float] = None,
    ) -> RateLimitResult:
        """Count a request against the identifier's current window.

        Args:
            identifier: Client identifier (usually "<address>:<route>")
            max_requests: Requests allowed per window
            window_seconds: Window length (defaults to the limiter's window)

        Returns:
            RateLimitResult with allowed status and quota metadata
        """
        window = window_seconds if window_seconds is not None else self.default_window_seconds

        with self._lock:
            now = self._clock()
            entry = self._windows.get(identifier)

            if entry is None or entry.is_expired(now):
                entry = RateWindow(count=1, reset_at=now + window)
                self._windows[identifier] = entry
                self._windows.move_to_end(identifier)
                self._enforce_max_entries()
                return RateLimitResult(
                    allowed=True,
                    limit=max_requests,
                    remaining=max(0, max_requests - 1),
                    reset_time=int(entry.reset_at),
                )

            self._windows.move_to_end(identifier)

            if entry.count >= max_requests:
                return RateLimitResult(
                    allowed=False,
                    limit=max_requests,
                    remaining=0,
                    reset_time=int(entry.reset_at),
                    retry_after=int(window),
                )

            entry.count += 1
            return RateLimitResult(
                allowed=True,
                limit=max_requests,
                remaining=max(0, max_requests - entry.count),
                reset_time=int(entry.reset_at),
            )

    def allow(
        self,
        identifier: str,
        max_requests: int,
        window_seconds: Optional[float] = None,
    ) -> bool:
        """Return True if the request fits in the identifier's window."""
        return self.check(identifier, max_requests, window_seconds).allowed

    def sweep(self) -> int:
        """Remove expired windows.

        Returns:
            Number of entries removed
        """
        with self._lock:
            now = self._clock()
            expired = [key for key, entry in self._windows.items() if entry.is_expired(now)]
            for key in expired:
                del self._windows[key]
        return len(expired)

    def reset(self) -> None:
        """Forget every window."""
        with self._lock:
            self._windows.clear()


class RateLimitSweeper:
    """Background task that periodically sweeps expired windows."""

    def __init__(self, limiter: FixedWindowRateLimiter, interval: float = 60.0):
        self._limiter = limiter
        self._interval = interval
        self._task: Optional[asyncio.Task] = None
        self._stop_event = asyncio.Event()

    @property
    def running(self) -> bool:
        return self._task is not None

    async def start(self) -> None:
        if self._task is not None:
            logger.debug("Rate limit sweeper already running")
            return

        self._stop_event.clear()
        self._task = asyncio.create_task(self._run())
        logger.info(f"Started rate limit sweeper (interval: {self._interval}s)")

    async def stop(self) -> None:
        if self._task is None:
            return

        self._stop_event.set()
        try:
            await asyncio.wait_for(self._task, timeout=5.0)
        except asyncio.TimeoutError:
            logger.warning("Rate limit sweeper did not stop gracefully, cancelling")
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        finally:
            self._task = None
            logger.info("Stopped rate limit sweeper")

    async def _run(self) -> None:
        while not self._stop_event.is_set():
            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=self._interval)
            except asyncio.TimeoutError:
                removed = self._limiter.sweep()
                if removed:
                    logger.debug(f"Swept {removed} expired rate limit windows")


def get_client_address(request: Request) -> str:
    """Resolve the client address from forwarding headers.

    Uses the first X-Forwarded-For entry, then X-Real-IP. An empty first
    entry counts as no forwarding header. Without either header every
    client shares the "unknown" bucket.
    """
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip.strip()
    return "unknown"


def get_client_identifier(request: Request) -> str:
    """Rate limit key: "<client address>:<route path>"."""
    return f"{get_client_address(request)}:{request.url.path}"


def get_rate_limiter(request: Request) -> FixedWindowRateLimiter:
    """Return the limiter owned by the running application."""
    return request.app.state.rate_limiter
