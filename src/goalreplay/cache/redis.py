"""Redis goal link cache."""

from __future__ import annotations

import logging

import redis
from pydantic import ValidationError

from goalreplay.cache.base import GoalLinkCache
from goalreplay.cache.keys import CacheKeys
from goalreplay.core.exceptions import CacheError
from goalreplay.core.models import Found, GoalKey, NotFound, outcome_adapter

logger = logging.getLogger(__name__)


class RedisGoalLinkCache(GoalLinkCache):
    """
    Goal links stored as JSON strings under ``goalreplay:goal:{match}:{minute}``.

    Write-once is enforced server-side with ``SET NX``. Entries never expire.
    """

    def __init__(
        self,
        redis_url: str | None = None,
        *,
        client: redis.Redis | None = None,
    ) -> None:
        if client is None and redis_url is None:
            raise ValueError("RedisGoalLinkCache requires redis_url or client")
        self._redis_url = redis_url
        self._redis = client

    def _client(self) -> redis.Redis:
        if self._redis is None:
            pool = redis.ConnectionPool.from_url(
                self._redis_url,
                max_connections=20,
                decode_responses=True,
            )
            self._redis = redis.Redis(connection_pool=pool)
        return self._redis

    def get(self, key: GoalKey) -> Found | NotFound | None:
        try:
            value = self._client().get(CacheKeys.goal(key))
        except redis.RedisError as e:
            raise CacheError(f"Redis get failed for {key}: {e}") from e
        if value is None:
            return None
        try:
            return outcome_adapter.validate_json(value)
        except ValidationError as e:
            logger.warning(f"Ignoring invalid cache entry for {key}: {e}")
            return None

    def set_found(self, link: Found) -> bool:
        return self._set_once(link)

    def set_not_found(self, key: GoalKey) -> bool:
        return self._set_once(NotFound(match_id=key.match_id, minute=key.minute))

    def _set_once(self, outcome: Found | NotFound) -> bool:
        try:
            written = self._client().set(
                CacheKeys.goal(outcome.key),
                outcome.model_dump_json(),
                nx=True,
            )
        except redis.RedisError as e:
            raise CacheError(f"Redis set failed for {outcome.key}: {e}") from e
        return bool(written)

    def clear(self, key: GoalKey) -> bool:
        try:
            return self._client().delete(CacheKeys.goal(key)) > 0
        except redis.RedisError as e:
            raise CacheError(f"Redis delete failed for {key}: {e}") from e

    def clear_all(self) -> int:
        try:
            client = self._client()
            raw_keys = list(client.scan_iter(match=CacheKeys.goal_pattern()))
            if not raw_keys:
                return 0
            return client.delete(*raw_keys)
        except redis.RedisError as e:
            raise CacheError(f"Redis clear failed: {e}") from e

    def keys(self) -> list[GoalKey]:
        try:
            raw_keys = list(self._client().scan_iter(match=CacheKeys.goal_pattern()))
        except redis.RedisError as e:
            raise CacheError(f"Redis scan failed: {e}") from e

        keys = []
        for raw in raw_keys:
            try:
                keys.append(CacheKeys.parse(raw))
            except ValueError:
                logger.debug(f"Skipping foreign key {raw!r}")
        return sorted(keys, key=lambda k: (k.match_id, k.minute))

    def close(self) -> None:
        if self._redis is not None:
            self._redis.close()
            self._redis = None
