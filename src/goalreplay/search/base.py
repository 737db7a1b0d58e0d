"""Abstract search fetcher with HTTP client management and rate limiting."""

from __future__ import annotations

import json
import logging
import threading
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import Any, ClassVar

import httpx
from pydantic import BaseModel, Field

from goalreplay.core.exceptions import (
    BlockedError,
    MalformedResponseError,
    RateLimitError,
    TransportError,
    UpstreamStatusError,
)
from goalreplay.core.models import MEDIA_FLAIR, SearchResult
from goalreplay.core.types import Channel
from goalreplay.search.antibot import AntiBotDetector
from goalreplay.search.rate_limiter import RateLimitConfig, RateLimiter

logger = logging.getLogger(__name__)

# Goals are posted close to the event; the window tolerates clock and posting skew
WINDOW_BEFORE = timedelta(hours=24)
WINDOW_AFTER = timedelta(hours=48)


class FetcherConfig(BaseModel):
    """Configuration for a search fetcher."""

    base_url: str | None = None
    subreddit: str = "soccer"
    timeout: float = 10.0
    requests_per_minute: float | None = None
    abuse_cooldown: float = Field(default=600.0, ge=0)


def search_window(match_time: datetime) -> tuple[int, int]:
    """Unix timestamp range ``[match_time - 24h, match_time + 48h]``."""
    if match_time.tzinfo is None:
        match_time = match_time.replace(tzinfo=timezone.utc)
    start = match_time - WINDOW_BEFORE
    end = match_time + WINDOW_AFTER
    return int(start.timestamp()), int(end.timestamp())


def build_search_query(query: str, match_time: datetime) -> str:
    """Combine free text with the media filter and a timestamp window."""
    start, end = search_window(match_time)
    return f"{query} flair:{MEDIA_FLAIR} timestamp:{start}..{end}"


class SearchFetcher(ABC):
    """
    Abstract base class for both search channels.

    Provides:
    - HTTP client management with connection pooling
    - Rate limiting before every request
    - Challenge page detection and typed errors
    - Listing decoding filtered to media posts
    """

    CHANNEL: ClassVar[Channel]
    BASE_URL: ClassVar[str]
    DEFAULT_REQUESTS_PER_MINUTE: ClassVar[float]
    DEFAULT_TIMEOUT: ClassVar[float]

    def __init__(
        self,
        config: FetcherConfig | None = None,
        *,
        rate_limiter: RateLimiter | None = None,
        detector: AntiBotDetector | None = None,
        http_client: httpx.Client | None = None,
    ) -> None:
        self.config = config or FetcherConfig(timeout=self.DEFAULT_TIMEOUT)
        self._rate_limiter = rate_limiter or RateLimiter(
            RateLimitConfig(
                requests_per_minute=self.config.requests_per_minute
                or self.DEFAULT_REQUESTS_PER_MINUTE,
                abuse_cooldown=self.config.abuse_cooldown,
            )
        )
        self._detector = detector or AntiBotDetector()
        self._client = http_client
        self._owns_client = http_client is None
        self._client_lock = threading.Lock()

    @property
    def channel(self) -> Channel:
        return self.CHANNEL

    @property
    def rate_limiter(self) -> RateLimiter:
        return self._rate_limiter

    @property
    def search_path(self) -> str:
        return f"/r/{self.config.subreddit}/search.json"

    def is_available(self) -> bool:
        """Whether the channel can serve a search right now."""
        return True

    def _get_client(self) -> httpx.Client:
        """Get or create HTTP client."""
        with self._client_lock:
            if self._client is None or self._client.is_closed:
                self._client = httpx.Client(
                    base_url=self.config.base_url or self.BASE_URL,
                    timeout=httpx.Timeout(self.config.timeout),
                    follow_redirects=True,
                )
                self._owns_client = True
            return self._client

    def close(self) -> None:
        """Close the HTTP client if this fetcher created it."""
        with self._client_lock:
            if self._client and self._owns_client and not self._client.is_closed:
                self._client.close()
            self._client = None

    def __enter__(self) -> SearchFetcher:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    # Hooks

    @abstractmethod
    def _request_headers(self) -> dict[str, str]:
        """Headers for the next search request."""
        ...

    def _before_request(self) -> None:
        """Called after the rate limiter releases and before the request."""

    def _on_challenge(self) -> None:
        """Called on a challenge page or any non-success status."""

    # Search

    def search(
        self,
        query: str,
        limit: int,
        match_time: datetime,
    ) -> list[SearchResult]:
        """
        Search for media posts matching ``query`` around ``match_time``.

        Args:
            query: Free-text search terms
            limit: Maximum number of posts requested
            match_time: Kickoff time used to derive the timestamp window

        Returns:
            Media-category results in the order returned upstream

        Raises:
            FetchError: a typed subclass describing the failure
        """
        self._rate_limiter.wait()
        self._before_request()

        params: dict[str, Any] = {
            "q": build_search_query(query, match_time),
            "restrict_sr": "on",
            "sort": "relevance",
            "limit": limit,
        }

        logger.debug(f"[{self.channel}] search: {params['q']!r} (limit {limit})")

        try:
            response = self._get_client().get(
                self.search_path,
                params=params,
                headers=self._request_headers(),
            )
        except httpx.TimeoutException as e:
            raise TransportError(f"Search timed out: {e}", self.channel) from e
        except httpx.HTTPError as e:
            raise TransportError(f"Search request failed: {e}", self.channel) from e

        return self._handle_response(response)

    def _handle_response(self, response: httpx.Response) -> list[SearchResult]:
        body = response.text
        content_type = response.headers.get("Content-Type")

        if response.status_code == 429:
            retry_after = response.headers.get("Retry-After")
            self._on_challenge()
            raise RateLimitError(
                "Search rate limit exceeded (status 429)",
                self.channel,
                retry_after=float(retry_after) if retry_after and _is_number(retry_after) else None,
            )

        if self._detector.is_challenge(body, content_type):
            self._on_challenge()
            raise BlockedError(
                f"Upstream is blocking requests (challenge page, status {response.status_code})",
                self.channel,
            )

        if response.status_code != 200:
            self._on_challenge()
            raise UpstreamStatusError(
                f"Search failed with status {response.status_code}: {body[:200]}",
                status_code=response.status_code,
                channel=self.channel,
            )

        return self._decode(body, content_type)

    def _decode(self, body: str, content_type: str | None) -> list[SearchResult]:
        try:
            payload = json.loads(body)
        except json.JSONDecodeError as e:
            if self._detector.looks_like_markup(body, content_type):
                self._on_challenge()
                raise BlockedError(
                    "Upstream returned HTML instead of JSON (likely challenge or rate limit)",
                    self.channel,
                ) from e
            raise MalformedResponseError(f"Could not parse search response: {e}", self.channel) from e

        try:
            children = payload["data"]["children"]
        except (KeyError, TypeError) as e:
            raise MalformedResponseError(
                "Search response is missing data.children", self.channel
            ) from e

        if not isinstance(children, list):
            raise MalformedResponseError("data.children is not a list", self.channel)

        results: list[SearchResult] = []
        for child in children:
            if not isinstance(child, dict):
                continue
            result = SearchResult.from_listing_child(child)
            if result is not None and result.is_media:
                results.append(result)

        logger.debug(f"[{self.channel}] {len(results)} media results of {len(children)}")
        return results


def _is_number(value: str) -> bool:
    try:
        float(value)
    except ValueError:
        return False
    return True

