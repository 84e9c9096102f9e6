"""Sliding-window request accounting per client identifier."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

DEFAULT_MAX_REQUESTS = 100
DEFAULT_WINDOW_MS = 60_000


def _monotonic_ms() -> float:
    return time.monotonic() * 1000


@dataclass(frozen=True)
class RateLimitResult:
    limited: bool
    remaining: int


class RateLimiter:
    """In-memory sliding-window limiter.

    State is local to this process; several gateway instances each enforce
    their own window. ``check_limit`` and ``cleanup`` hold one lock, so a
    prune/check/record sequence is atomic per call.
    """

    def __init__(
        self,
        max_requests: int = DEFAULT_MAX_REQUESTS,
        window_ms: int = DEFAULT_WINDOW_MS,
        clock: Callable[[], float] = _monotonic_ms,
    ) -> None:
        if max_requests < 1:
            raise ValueError("max_requests must be at least 1")
        if window_ms < 1:
            raise ValueError("window_ms must be at least 1")
        self.max_requests = max_requests
        self.window_ms = window_ms
        self._clock = clock
        self._requests: dict[str, list[float]] = {}
        self._lock = threading.Lock()

    def check_limit(self, identifier: str) -> RateLimitResult:
        """Record one request for ``identifier`` unless the window is full."""
        with self._lock:
            now = self._clock()
            window_start = now - self.window_ms
            timestamps = [ts for ts in self._requests.get(identifier, []) if ts > window_start]

            if len(timestamps) >= self.max_requests:
                self._requests[identifier] = timestamps
                return RateLimitResult(limited=True, remaining=0)

            timestamps.append(now)
            self._requests[identifier] = timestamps
            return RateLimitResult(limited=False, remaining=self.max_requests - len(timestamps))

    def cleanup(self) -> None:
        """Drop expired timestamps and identifiers with nothing left."""
        with self._lock:
            window_start = self._clock() - self.window_ms
            for identifier in list(self._requests):
                kept = [ts for ts in self._requests[identifier] if ts > window_start]
                if kept:
                    self._requests[identifier] = kept
                else:
                    del self._requests[identifier]

    def tracked(self) -> dict[str, int]:
        """Snapshot of identifier → stored timestamp count."""
        with self._lock:
            return {identifier: len(ts) for identifier, ts in self._requests.items()}

    @property
    def retry_after_seconds(self) -> int:
        return max(1, -(-self.window_ms // 1000))
