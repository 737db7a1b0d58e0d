"""Main library client: cached, rate-limited goal clip resolution."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable

from goalreplay.cache import GoalLinkCache, create_cache
from goalreplay.config import GoalReplaySettings
from goalreplay.core.exceptions import (
    CacheError,
    ChannelUnavailableError,
    FetchError,
    RetriesExhaustedError,
)
from goalreplay.core.models import Found, GoalEvent, GoalKey, NotFound
from goalreplay.core.types import Channel
from goalreplay.resolution.matcher import ResultMatcher
from goalreplay.resolution.retry import RetryPolicy, linear_backoff
from goalreplay.resolution.strategy import GoalSearchStrategy
from goalreplay.search.authenticated import AuthenticatedFetcher
from goalreplay.search.base import SearchFetcher
from goalreplay.search.public import PublicFetcher

logger = logging.getLogger(__name__)


class GoalReplayClient:
    """
    Resolves goal events to clip links and remembers the answer.

    Usage:
        with GoalReplayClient() as client:
            link = client.resolve_one(goal)
            links = client.resolve_many(goals)

    Channel selection prefers the authenticated fetcher whenever it is
    available. Errors there propagate without retry; the public fetcher
    retries challenge and rate-limit failures with linear backoff
    and reports "no result" once attempts run out. Found and NotFound
    outcomes are cached; fetch errors never are.
    """

    def __init__(
        self,
        settings: GoalReplaySettings | None = None,
        *,
        cache: GoalLinkCache | None = None,
        public_fetcher: SearchFetcher | None = None,
        authenticated_fetcher: AuthenticatedFetcher | None = None,
        matcher: ResultMatcher | None = None,
        retry_policy: RetryPolicy | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """
        Initialize the client.

        Args:
            settings: Application settings. If not provided, loaded from environment.
            cache: Goal link cache. Defaults to the backend named in settings.
            public_fetcher: Unauthenticated channel. Built from settings if omitted.
            authenticated_fetcher: OAuth channel. Built (and authenticated) from
                settings if omitted; stays None when credentials are absent or
                the initial authentication fails.
            matcher: Candidate selection strategy.
            retry_policy: Retry policy for the public channel.
            sleep: Sleeper used for the delay between batches.
        """
        self._settings = settings or GoalReplaySettings()
        self._cache = cache if cache is not None else create_cache(self._settings)
        self._public = public_fetcher or PublicFetcher.from_settings(self._settings)
        self._authenticated = (
            authenticated_fetcher
            if authenticated_fetcher is not None
            else self._init_authenticated(self._settings)
        )
        self._strategy = GoalSearchStrategy(matcher)
        self._retry_policy = retry_policy or RetryPolicy(
            max_attempts=self._settings.retry_attempts,
            backoff=linear_backoff(self._settings.retry_base_delay_seconds),
        )
        self._sleep = sleep

    @staticmethod
    def _init_authenticated(settings: GoalReplaySettings) -> AuthenticatedFetcher | None:
        fetcher = AuthenticatedFetcher.from_settings(settings)
        if fetcher is None:
            return None
        try:
            fetcher.authenticate()
        except ChannelUnavailableError as e:
            logger.warning(f"OAuth authentication failed, using public channel only: {e}")
            fetcher.close()
            return None
        return fetcher

    def __enter__(self) -> GoalReplayClient:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def close(self) -> None:
        """Close HTTP clients and the cache backend."""
        self._public.close()
        if self._authenticated is not None:
            self._authenticated.close()
        self._cache.close()

    @property
    def cache(self) -> GoalLinkCache:
        return self._cache

    @property
    def settings(self) -> GoalReplaySettings:
        return self._settings

    @property
    def has_authenticated_channel(self) -> bool:
        return self._authenticated is not None

    # Channel selection

    def select_fetcher(self) -> SearchFetcher:
        """Authenticated channel when usable, otherwise the public one."""
        auth = self._authenticated
        if auth is not None:
            if auth.is_available():
                return auth
            if not auth.is_failed():
                # Token lapsed between searches: renew it before falling back
                try:
                    auth.ensure_valid_token()
                    return auth
                except ChannelUnavailableError as e:
                    logger.warning(f"OAuth channel unavailable, falling back to public: {e}")
        return self._public

    # Resolution

    def resolve_one(self, goal: GoalEvent) -> Found | None:
        """
        Link for a goal, or None if none was found.

        A cached NotFound returns None without any network call. Errors on
        the authenticated channel, and non-retryable errors on the public
        channel, propagate as FetchError subclasses.
        """
        try:
            outcome = self.resolve_outcome(goal)
        except RetriesExhaustedError as e:
            logger.warning(f"Giving up on goal {goal.key}: {e}")
            return None
        return outcome if isinstance(outcome, Found) else None

    def resolve_outcome(self, goal: GoalEvent) -> Found | NotFound:
        """
        Tagged outcome for a goal.

        Unlike ``resolve_one`` this raises RetriesExhaustedError when the
        public channel kept failing, so callers can tell "tried and failed"
        from "tried and found nothing".
        """
        key = goal.key
        cached = self._cache_get(key)
        if cached is not None:
            logger.debug(f"Cache hit for goal {key}: {cached.status}")
            return cached

        link = self._search(goal)
        if link is not None:
            self._cache_write(lambda: self._cache.set_found(link), key)
            return link

        self._cache_write(lambda: self._cache.set_not_found(key), key)
        return NotFound(match_id=goal.match_id, minute=goal.minute)

    def resolve_many(self, goals: Iterable[GoalEvent]) -> dict[GoalKey, Found]:
        """
        Links for several goals, keyed by GoalKey.

        Input is de-duplicated by key (first occurrence wins). Cached goals
        are answered from the cache; the rest are resolved in batches with a
        pause between batches. A failing goal is logged and left out.
        """
        results: dict[GoalKey, Found] = {}
        seen: set[GoalKey] = set()
        pending: list[GoalEvent] = []

        for goal in goals:
            key = goal.key
            if key in seen:
                continue
            seen.add(key)

            cached = self._cache_get(key)
            if cached is not None:
                if isinstance(cached, Found):
                    results[key] = cached
                continue

            pending.append(goal)

        batch_size = self._settings.batch_size
        for start in range(0, len(pending), batch_size):
            if start > 0:
                self._sleep(self._settings.batch_delay_seconds)

            for goal in pending[start:start + batch_size]:
                try:
                    link = self.resolve_one(goal)
                except FetchError as e:
                    logger.warning(f"Failed to resolve goal {goal.key}: {e}")
                    continue
                if link is not None:
                    results[goal.key] = link

        logger.debug(
            f"Resolved {len(results)} links for {len(seen)} goals ({len(pending)} searched)"
        )
        return results

    def _search(self, goal: GoalEvent) -> Found | None:
        fetcher = self.select_fetcher()
        logger.debug(f"Using {fetcher.channel} channel for goal {goal.key}")

        if fetcher.channel == Channel.AUTHENTICATED:
            return self._strategy.search(goal, fetcher)

        return self._retry_policy.run(
            lambda: self._strategy.search(goal, fetcher),
            label=f"goal {goal.key}",
        )

    # Cache access (best-effort: failures only risk a redundant search)

    def _cache_get(self, key: GoalKey) -> Found | NotFound | None:
        try:
            return self._cache.get(key)
        except CacheError as e:
            logger.warning(f"Cache read failed for goal {key}: {e}")
            return None

    def _cache_write(self, write: Callable[[], bool], key: GoalKey) -> None:
        try:
            write()
        except CacheError as e:
            logger.warning(f"Cache write failed for goal {key}: {e}")

    def clear_goal(self, key: GoalKey) -> bool:
        """Forget one goal so it is searched again."""
        return self._cache.clear(key)

    def clear_cache(self) -> int:
        """Forget every goal."""
        return self._cache.clear_all()
