"""Test doubles and payload builders shared across test modules."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from goalreplay.core.exceptions import FetchError
from goalreplay.core.models import SearchResult
from goalreplay.core.types import Channel

SEARCH_URL = "https://www.reddit.com/r/soccer/search.json"
OAUTH_SEARCH_URL = "https://oauth.reddit.com/r/soccer/search.json"
TOKEN_URL = "https://www.reddit.com/api/v1/access_token"


# ============================================================================
# Time Control
# ============================================================================


class FakeClock:
    """Monotonic clock that only advances when told to (or when slept on)."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds

    def advance(self, seconds: float) -> None:
        self.now += seconds

    @property
    def total_slept(self) -> float:
        return sum(self.sleeps)


# ============================================================================
# Listing Payloads
# ============================================================================


def listing_child(
    title: str,
    url: str,
    flair: str | None = "Media",
    permalink: str = "/r/soccer/comments/abc123/post/",
) -> dict[str, Any]:
    """One entry of a Reddit listing's ``data.children``."""
    return {
        "kind": "t3",
        "data": {
            "title": title,
            "url": url,
            "permalink": permalink,
            "link_flair_text": flair,
        },
    }


def listing(*children: dict[str, Any]) -> dict[str, Any]:
    """A Reddit search listing payload."""
    return {"kind": "Listing", "data": {"children": list(children), "after": None}}


def media(title: str, url: str) -> SearchResult:
    return SearchResult(url=url, title=title, post_url=f"{url}/post", flair="Media")


def token_payload(
    access_token: str = "access-1",
    refresh_token: str | None = "refresh-1",
    expires_in: int = 3600,
) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "access_token": access_token,
        "expires_in": expires_in,
        "token_type": "bearer",
    }
    if refresh_token is not None:
        payload["refresh_token"] = refresh_token
    return payload


# ============================================================================
# Scripted Fetchers
# ============================================================================


class ScriptedFetcher:
    """
    Fetcher double returning scripted results per call.

    Each script item is either a list of SearchResult or a FetchError to
    raise. Once the script runs out the last item repeats.
    """

    def __init__(
        self,
        script: list[list[SearchResult] | FetchError] | None = None,
        channel: Channel = Channel.PUBLIC,
    ) -> None:
        self.script = list(script or [[]])
        self.channel = channel
        self.calls: list[tuple[str, int, datetime]] = []
        self.closed = False

    @property
    def call_count(self) -> int:
        return len(self.calls)

    @property
    def queries(self) -> list[str]:
        return [query for query, _, _ in self.calls]

    def search(self, query: str, limit: int, match_time: datetime) -> list[SearchResult]:
        index = min(len(self.calls), len(self.script) - 1)
        self.calls.append((query, limit, match_time))
        item = self.script[index]
        if isinstance(item, FetchError):
            raise item
        return list(item)

    def is_available(self) -> bool:
        return True

    def close(self) -> None:
        self.closed = True


class ScriptedAuthFetcher(ScriptedFetcher):
    """Authenticated channel double with controllable availability."""

    def __init__(self, script=None, *, available: bool = True, failed: bool = False) -> None:
        super().__init__(script, channel=Channel.AUTHENTICATED)
        self.available = available
        self.failed = failed
        self.ensure_calls = 0
        self.ensure_error: FetchError | None = None

    def is_available(self) -> bool:
        return self.available

    def is_failed(self) -> bool:
        return self.failed

    def ensure_valid_token(self) -> None:
        self.ensure_calls += 1
        if self.ensure_error is not None:
            raise self.ensure_error
        self.available = True
