"""Unauthenticated search channel (public JSON endpoints)."""

from __future__ import annotations

from typing import ClassVar

from goalreplay.config import GoalReplaySettings
from goalreplay.core.types import Channel
from goalreplay.search.base import FetcherConfig, SearchFetcher

# Browser-like headers sent alongside the rotated User-Agent
BROWSER_HEADERS: dict[str, str] = {
    "Accept": "application/json, text/javascript, */*; q=0.01",
    "Accept-Language": "en-US,en;q=0.9,*;q=0.5",
    "Accept-Encoding": "gzip, deflate, br",
    "DNT": "1",
    "Connection": "keep-alive",
    "Upgrade-Insecure-Requests": "1",
    "Sec-Fetch-Dest": "document",
    "Sec-Fetch-Mode": "navigate",
    "Sec-Fetch-Site": "none",
    "Cache-Control": "max-age=0",
}


class PublicFetcher(SearchFetcher):
    """
    Public JSON search (no credentials).

    Strict quota and challenge-page risk: 5 requests/minute, rotated request
    identities, and a doubled interval after any detected challenge.
    """

    CHANNEL: ClassVar[Channel] = Channel.PUBLIC
    BASE_URL: ClassVar[str] = "https://www.reddit.com"
    DEFAULT_REQUESTS_PER_MINUTE: ClassVar[float] = 5.0
    DEFAULT_TIMEOUT: ClassVar[float] = 10.0

    @classmethod
    def from_settings(cls, settings: GoalReplaySettings, **kwargs) -> PublicFetcher:
        config = FetcherConfig(
            subreddit=settings.subreddit,
            timeout=settings.public_timeout,
            requests_per_minute=settings.public_requests_per_minute,
            abuse_cooldown=settings.abuse_cooldown_seconds,
        )
        return cls(config, **kwargs)

    def _request_headers(self) -> dict[str, str]:
        headers = dict(BROWSER_HEADERS)
        headers["User-Agent"] = self._rate_limiter.next_identity()
        return headers

    def _on_challenge(self) -> None:
        self._rate_limiter.record_abuse_signal()
