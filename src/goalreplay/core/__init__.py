"""Core types, models, and utilities."""

from .exceptions import (
    AuthenticationError,
    BlockedError,
    CacheError,
    ChannelUnavailableError,
    ConfigurationError,
    FetchError,
    GoalReplayError,
    MalformedResponseError,
    NotConfiguredError,
    RateLimitError,
    RetriesExhaustedError,
    TransportError,
    UpstreamStatusError,
)
from .models import (
    MEDIA_FLAIR,
    Found,
    GoalEvent,
    GoalKey,
    GoalLink,
    NotFound,
    ResolutionOutcome,
    SearchResult,
)
from .normalization import contains_phrase, minute_pattern, normalize_text, team_tokens
from .types import CacheBackend, Channel, ResolutionStatus, TokenStatus

__all__ = [
    # Types
    "CacheBackend",
    "Channel",
    "ResolutionStatus",
    "TokenStatus",
    # Models
    "MEDIA_FLAIR",
    "Found",
    "GoalEvent",
    "GoalKey",
    "GoalLink",
    "NotFound",
    "ResolutionOutcome",
    "SearchResult",
    # Normalization
    "contains_phrase",
    "minute_pattern",
    "normalize_text",
    "team_tokens",
    # Exceptions
    "AuthenticationError",
    "BlockedError",
    "CacheError",
    "ChannelUnavailableError",
    "ConfigurationError",
    "FetchError",
    "GoalReplayError",
    "MalformedResponseError",
    "NotConfiguredError",
    "RateLimitError",
    "RetriesExhaustedError",
    "TransportError",
    "UpstreamStatusError",
]
