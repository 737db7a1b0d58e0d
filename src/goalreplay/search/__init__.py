"""Search channels against the upstream discussion site."""

from goalreplay.search.antibot import AntiBotDetector
from goalreplay.search.authenticated import AuthenticatedFetcher
from goalreplay.search.base import FetcherConfig, SearchFetcher, build_search_query, search_window
from goalreplay.search.public import PublicFetcher
from goalreplay.search.rate_limiter import RateLimitConfig, RateLimiter
from goalreplay.search.token import OAuthCredentials, ReadWriteLock, TokenManager, TokenState

__all__ = [
    # Base
    "FetcherConfig",
    "SearchFetcher",
    "build_search_query",
    "search_window",
    # Channels
    "AuthenticatedFetcher",
    "PublicFetcher",
    # Support
    "AntiBotDetector",
    "RateLimitConfig",
    "RateLimiter",
    # Tokens
    "OAuthCredentials",
    "ReadWriteLock",
    "TokenManager",
    "TokenState",
]
