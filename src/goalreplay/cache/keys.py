"""Cache key builders for consistent key formatting."""

from goalreplay.core.models import GoalKey


class CacheKeys:
    """Cache key builders for consistent key formatting."""

    PREFIX = "goalreplay"

    @classmethod
    def goal(cls, key: GoalKey) -> str:
        """Namespaced key for a goal link (shared stores such as Redis)."""
        return f"{cls.PREFIX}:goal:{key.match_id}:{key.minute}"

    @classmethod
    def goal_pattern(cls) -> str:
        """Glob matching every goal link key."""
        return f"{cls.PREFIX}:goal:*"

    @classmethod
    def entry(cls, key: GoalKey) -> str:
        """Compact key used inside a single-file store."""
        return f"{key.match_id}:{key.minute}"

    @classmethod
    def parse(cls, raw: str) -> GoalKey:
        """Inverse of ``goal()`` and ``entry()``."""
        parts = raw.rsplit(":", 2)
        if len(parts) < 2:
            raise ValueError(f"Not a goal cache key: {raw!r}")
        try:
            return GoalKey(match_id=int(parts[-2]), minute=int(parts[-1]))
        except ValueError as e:
            raise ValueError(f"Not a goal cache key: {raw!r}") from e
