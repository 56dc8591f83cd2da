"""Sliding-window requests-per-minute limiter for async API calls.

Usage:
    limiter = AsyncRateLimiter(rpm=500, name="openai")
    await limiter.acquire()
    response = await client.post(...)
"""

import asyncio
import time
from collections import deque


class AsyncRateLimiter:
    """Blocks callers once ``rpm`` requests were started in the last 60s.

    Safe for concurrent use with asyncio.gather(): slot reservation is
    serialized through an asyncio.Lock.
    """

    WINDOW = 60.0

    def __init__(self, rpm: int, name: str = ""):
        if rpm < 1:
            raise ValueError("rpm must be at least 1")
        self.rpm = rpm
        self.name = name
        self._timestamps: deque[float] = deque()
        self._lock = asyncio.Lock()
        self._total_requests = 0
        self._total_wait_seconds = 0.0

    def _evict(self, now: float) -> None:
        while self._timestamps and now - self._timestamps[0] >= self.WINDOW:
            self._timestamps.popleft()

    async def acquire(self) -> None:
        """Wait until a request slot is free, then reserve it."""
        async with self._lock:
            now = time.monotonic()
            self._evict(now)

            if len(self._timestamps) >= self.rpm:
                wait = self.WINDOW - (now - self._timestamps[0]) + 0.01
                if wait > 0:
                    self._total_wait_seconds += wait
                    await asyncio.sleep(wait)
                self._evict(time.monotonic())

            self._timestamps.append(time.monotonic())
            self._total_requests += 1

    @property
    def stats(self) -> dict:
        return {
            "name": self.name,
            "rpm_limit": self.rpm,
            "total_requests": self._total_requests,
            "total_wait_seconds": round(self._total_wait_seconds, 2),
        }

    def __repr__(self) -> str:
        return (
            f"AsyncRateLimiter(name={self.name!r}, rpm={self.rpm}, "
            f"requests={self._total_requests}, waited={self._total_wait_seconds:.1f}s)"
        )
