"""Goalreplay - Cached resolution of football goals to highlight clip links."""

from goalreplay.client import GoalReplayClient
from goalreplay.config import GoalReplaySettings, get_settings
from goalreplay.core.models import Found, GoalEvent, GoalKey, GoalLink, NotFound, SearchResult
from goalreplay.core.types import Channel, ResolutionStatus

__version__ = "0.1.0"
__all__ = [
    # Client
    "GoalReplayClient",
    # Config
    "GoalReplaySettings",
    "get_settings",
    # Types
    "Channel",
    "ResolutionStatus",
    # Models
    "Found",
    "GoalEvent",
    "GoalKey",
    "GoalLink",
    "NotFound",
    "SearchResult",
    # Version
    "__version__",
]
