"""Goal link cache contract."""

from __future__ import annotations

from abc import ABC, abstractmethod

from goalreplay.core.models import Found, GoalKey, NotFound


class GoalLinkCache(ABC):
    """
    Durable ``GoalKey -> Found | NotFound`` store.

    Entries are write-once: ``set_found``/``set_not_found`` on a key that
    already holds an outcome leave it untouched and return False. Only
    ``clear`` and ``clear_all`` remove entries. Implementations must be safe
    for concurrent callers.
    """

    @abstractmethod
    def get(self, key: GoalKey) -> Found | NotFound | None:
        """Cached outcome, or None if the goal was never resolved."""
        ...

    @abstractmethod
    def set_found(self, link: Found) -> bool:
        """Store a positive result. Returns whether it was written."""
        ...

    @abstractmethod
    def set_not_found(self, key: GoalKey) -> bool:
        """Store the negative marker. Returns whether it was written."""
        ...

    @abstractmethod
    def clear(self, key: GoalKey) -> bool:
        """Remove one entry. Returns whether it existed."""
        ...

    @abstractmethod
    def clear_all(self) -> int:
        """Remove every entry. Returns how many were removed."""
        ...

    @abstractmethod
    def keys(self) -> list[GoalKey]:
        """Every cached key, sorted."""
        ...

    def contains(self, key: GoalKey) -> bool:
        return self.get(key) is not None

    def __contains__(self, key: object) -> bool:
        return isinstance(key, GoalKey) and self.contains(key)

    def close(self) -> None:
        """Release resources held by the backend."""
