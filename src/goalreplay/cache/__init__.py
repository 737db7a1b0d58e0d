"""Goal link caching with file, Redis and in-memory backends."""

from __future__ import annotations

from goalreplay.cache.base import GoalLinkCache
from goalreplay.cache.file import JsonFileGoalLinkCache
from goalreplay.cache.keys import CacheKeys
from goalreplay.cache.memory import InMemoryGoalLinkCache
from goalreplay.config import GoalReplaySettings
from goalreplay.core.exceptions import NotConfiguredError
from goalreplay.core.types import CacheBackend


def create_cache(settings: GoalReplaySettings) -> GoalLinkCache:
    """Build the cache backend selected in settings."""
    if settings.cache_backend == CacheBackend.MEMORY:
        return InMemoryGoalLinkCache()

    if settings.cache_backend == CacheBackend.REDIS:
        if not settings.redis_url:
            raise NotConfiguredError("cache_backend is 'redis' but redis_url is not set")
        from goalreplay.cache.redis import RedisGoalLinkCache

        return RedisGoalLinkCache(str(settings.redis_url))

    return JsonFileGoalLinkCache(settings.cache_path)


__all__ = [
    "CacheKeys",
    "GoalLinkCache",
    "InMemoryGoalLinkCache",
    "JsonFileGoalLinkCache",
    "create_cache",
]
