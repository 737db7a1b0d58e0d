"""Adaptive per-channel rate limiting with request identity rotation."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass

logger = logging.getLogger(__name__)

# Rotated on the public channel to reduce fingerprinting
DEFAULT_USER_AGENTS: tuple[str, ...] = (
    "goalreplay:v1.0.0 (by /u/goalreplay_app)",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/119.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/119.0.0.0 Safari/537.36",
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/119.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/17.1 Safari/605.1.15",
)


@dataclass
class RateLimitConfig:
    """Configuration for rate limiting."""

    requests_per_minute: float = 5.0
    abuse_multiplier: float = 2.0
    abuse_cooldown: float = 600.0  # 10 minutes

    @property
    def min_interval(self) -> float:
        return 60.0 / self.requests_per_minute


@dataclass
class RateLimitState:
    """Tracks rate limit state for a channel."""

    last_request: float | None = None
    abuse_count: int = 0
    last_abuse: float | None = None
    identity_index: int = 0


class RateLimiter:
    """
    Minimum-interval rate limiter for one channel.

    ``wait()`` holds the lock while sleeping, so concurrent callers queue up
    and each is released at least one interval after the previous one.
    After a challenge page is observed the interval is multiplied for the
    cooldown window.
    """

    def __init__(
        self,
        config: RateLimitConfig | None = None,
        *,
        identities: Sequence[str] = DEFAULT_USER_AGENTS,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if not identities:
            raise ValueError("RateLimiter requires at least one identity")
        self.config = config or RateLimitConfig()
        self._identities = tuple(identities)
        self._state = RateLimitState()
        self._lock = threading.Lock()
        self._clock = clock
        self._sleep = sleep

    @property
    def min_interval(self) -> float:
        return self.config.min_interval

    @property
    def abuse_count(self) -> int:
        with self._lock:
            return self._state.abuse_count

    def current_interval(self) -> float:
        """Interval in effect right now, escalated during an abuse cooldown."""
        with self._lock:
            return self._current_interval(self._clock())

    def _current_interval(self, now: float) -> float:
        interval = self.config.min_interval
        last_abuse = self._state.last_abuse
        if (
            self._state.abuse_count > 0
            and last_abuse is not None
            and now - last_abuse < self.config.abuse_cooldown
        ):
            interval *= self.config.abuse_multiplier
        return interval

    def wait(self) -> None:
        """Block until a request is permitted, then record it."""
        with self._lock:
            now = self._clock()
            if self._state.last_request is not None:
                remaining = self._current_interval(now) - (now - self._state.last_request)
                if remaining > 0:
                    logger.debug(f"Rate limiter sleeping {remaining:.2f}s")
                    self._sleep(remaining)
            self._state.last_request = self._clock()

    def record_abuse_signal(self) -> None:
        """Mark that a challenge response was just observed."""
        with self._lock:
            self._state.abuse_count += 1
            self._state.last_abuse = self._clock()
            count = self._state.abuse_count
        logger.warning(
            f"Challenge page detected ({count} total); "
            f"doubling request interval for {self.config.abuse_cooldown:.0f}s"
        )

    def next_identity(self) -> str:
        """Return request identities in round-robin order."""
        with self._lock:
            identity = self._identities[self._state.identity_index]
            self._state.identity_index = (self._state.identity_index + 1) % len(self._identities)
            return identity
