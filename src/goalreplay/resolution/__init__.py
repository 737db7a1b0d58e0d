"""Resolution of goals to clip links."""

from goalreplay.resolution.matcher import KeywordMatcher, MatchStrategy, ResultMatcher
from goalreplay.resolution.retry import RetryPolicy, linear_backoff
from goalreplay.resolution.strategy import (
    SEARCH_LIMIT,
    GoalSearchStrategy,
    dedupe_by_url,
    primary_query,
    secondary_query,
)

__all__ = [
    # Matching
    "KeywordMatcher",
    "MatchStrategy",
    "ResultMatcher",
    # Retry
    "RetryPolicy",
    "linear_backoff",
    # Strategy
    "SEARCH_LIMIT",
    "GoalSearchStrategy",
    "dedupe_by_url",
    "primary_query",
    "secondary_query",
]
