from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Callable

DEFAULT_MAX_REQUESTS = 10
DEFAULT_WINDOW_SECONDS = 60 * 60


@dataclass
class _Window:
    count: int
    resets_at: float


class RateLimiter:
    """Fixed-window request counter keyed by an arbitrary string (e.g. a domain)."""

    def __init__(
        self,
        max_requests: int = DEFAULT_MAX_REQUESTS,
        window_seconds: float = DEFAULT_WINDOW_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_requests <= 0:
            raise ValueError("max_requests must be positive")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._windows: dict[str, _Window] = {}
        self._lock = threading.Lock()
        self._next_sweep = clock() + window_seconds

    def check_and_consume(self, key: str) -> bool:
        """Record one request for ``key``; False once its window is exhausted."""
        now = self._clock()
        with self._lock:
            # expired windows are swept at most once per window length
            if now >= self._next_sweep:
                self._evict_locked(now)
                self._next_sweep = now + self.window_seconds
            window = self._windows.get(key)
            if window is None or now >= window.resets_at:
                self._windows[key] = _Window(count=1, resets_at=now + self.window_seconds)
                return True
            if window.count >= self.max_requests:
                return False
            window.count += 1
            return True

    def evict_expired(self) -> int:
        """Drop windows that have already reset. Returns how many were removed."""
        now = self._clock()
        with self._lock:
            return self._evict_locked(now)

    def _evict_locked(self, now: float) -> int:
        expired = [k for k, w in self._windows.items() if now >= w.resets_at]
        for key in expired:
            del self._windows[key]
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._windows)
