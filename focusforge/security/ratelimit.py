"""
Tool: Rate Limiter
Purpose: Throttle inbound requests per client with a fixed window

Each client key gets `max_requests` requests per `window_seconds`. The
window starts at the client's first request and resets once it expires.
Expired windows are swept lazily at the start of every check, so memory
stays bounded by the number of clients active within one window.

The limiter is a plain object: build one per process and hand it to
whatever serves requests. Tests build their own with a fake clock.

Usage:
    limiter = FixedWindowRateLimiter.from_config(config.rate_limit)
    if limiter.is_limited(client_key_from_headers(request.headers)):
        return 429
"""

import time
from dataclasses import dataclass
from typing import Callable, Dict, Mapping, Optional

from focusforge.config import RateLimitConfig
from focusforge.logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class WindowRecord:
    count: int
    reset_at: float


class FixedWindowRateLimiter:
    def __init__(
        self,
        max_requests: int = 3,
        window_seconds: float = 300.0,
        clock: Optional[Callable[[], float]] = None,
    ):
        if max_requests < 1:
            raise ValueError("max_requests must be at least 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")

        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock or time.monotonic
        self._windows: Dict[str, WindowRecord] = {}

    @classmethod
    def from_config(cls, config: RateLimitConfig, clock: Optional[Callable[[], float]] = None) -> "FixedWindowRateLimiter":
        return cls(max_requests=config.max_requests, window_seconds=config.window_seconds, clock=clock)

    def _sweep(self, now: float) -> None:
        expired = [key for key, record in self._windows.items() if record.reset_at <= now]
        for key in expired:
            del self._windows[key]

    def is_limited(self, client_key: str) -> bool:
        """
        Count a request from client_key.

        Returns:
            True if the client is over its limit (the request is not counted),
            False if the request is allowed
        """
        now = self._clock()
        self._sweep(now)

        record = self._windows.get(client_key)
        if record is None:
            self._windows[client_key] = WindowRecord(count=1, reset_at=now + self.window_seconds)
            return False

        if record.count >= self.max_requests:
            logger.info(f"Rate limited {client_key}")
            return True

        record.count += 1
        return False

    def retry_after(self, client_key: str) -> float:
        """Seconds until client_key's window resets (0 if it has none)."""
        record = self._windows.get(client_key)
        if record is None:
            return 0.0
        return max(0.0, record.reset_at - self._clock())

    def reset(self, client_key: Optional[str] = None) -> None:
        if client_key is None:
            self._windows.clear()
        else:
            self._windows.pop(client_key, None)

    @property
    def tracked_clients(self) -> int:
        return len(self._windows)


def client_key_from_headers(headers: Mapping[str, str]) -> str:
    """Client identity from proxy headers: first x-forwarded-for hop, then x-real-ip."""
    lowered = {key.lower(): value for key, value in headers.items()}

    forwarded_for = lowered.get("x-forwarded-for")
    if forwarded_for:
        first = forwarded_for.split(",")[0].strip()
        if first:
            return first

    return lowered.get("x-real-ip") or "unknown"


__all__ = ["FixedWindowRateLimiter", "WindowRecord", "client_key_from_headers"]
