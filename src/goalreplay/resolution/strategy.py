"""Primary/secondary query strategy for one goal on one channel."""

from __future__ import annotations

import logging

from goalreplay.core.models import Found, GoalEvent, SearchResult
from goalreplay.resolution.matcher import ResultMatcher
from goalreplay.search.base import SearchFetcher

logger = logging.getLogger(__name__)

SEARCH_LIMIT = 15


def primary_query(goal: GoalEvent) -> str:
    """Both teams and the minute: most specific."""
    return f"{goal.home_team} {goal.away_team} {goal.minute}'"


def secondary_query(goal: GoalEvent) -> str:
    """Scoring team and the minute: broader."""
    return f"{goal.scoring_team} {goal.minute}'"


def dedupe_by_url(results: list[SearchResult]) -> list[SearchResult]:
    """Drop repeated links, keeping the first occurrence."""
    seen: set[str] = set()
    unique: list[SearchResult] = []
    for result in results:
        if result.url in seen:
            continue
        seen.add(result.url)
        unique.append(result)
    return unique


class GoalSearchStrategy:
    """
    One resolution attempt for a goal.

    The primary query runs first and a match there short-circuits the
    secondary query. Otherwise the secondary query's results are appended,
    de-duplicated by link, and matched again. Any fetch error aborts the
    attempt so nothing is concluded (or cached) from a partial search.
    """

    def __init__(self, matcher: ResultMatcher | None = None, limit: int = SEARCH_LIMIT) -> None:
        self.matcher = matcher or ResultMatcher()
        self.limit = limit

    def search(self, goal: GoalEvent, fetcher: SearchFetcher) -> Found | None:
        """Return the matched link, or None when the search found nothing."""
        primary = fetcher.search(primary_query(goal), self.limit, goal.match_time)
        match = self.matcher.select_best(primary, goal)
        if match is not None:
            return Found.from_result(goal, match)

        secondary = fetcher.search(secondary_query(goal), self.limit, goal.match_time)
        merged = dedupe_by_url(primary + secondary)
        match = self.matcher.select_best(merged, goal)
        if match is None:
            logger.debug(
                f"No match for goal {goal.key} among {len(merged)} candidates ({fetcher.channel})"
            )
            return None
        return Found.from_result(goal, match)
