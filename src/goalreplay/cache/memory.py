"""Process-local goal link cache."""

from __future__ import annotations

import threading

from goalreplay.cache.base import GoalLinkCache
from goalreplay.core.models import Found, GoalKey, NotFound


class InMemoryGoalLinkCache(GoalLinkCache):
    """Dictionary-backed cache; contents are lost with the process."""

    def __init__(self) -> None:
        self._entries: dict[GoalKey, Found | NotFound] = {}
        self._lock = threading.RLock()

    def get(self, key: GoalKey) -> Found | NotFound | None:
        with self._lock:
            return self._entries.get(key)

    def set_found(self, link: Found) -> bool:
        return self._set_once(link)

    def set_not_found(self, key: GoalKey) -> bool:
        return self._set_once(NotFound(match_id=key.match_id, minute=key.minute))

    def _set_once(self, outcome: Found | NotFound) -> bool:
        with self._lock:
            if outcome.key in self._entries:
                return False
            self._entries[outcome.key] = outcome
            return True

    def clear(self, key: GoalKey) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear_all(self) -> int:
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
            return count

    def keys(self) -> list[GoalKey]:
        with self._lock:
            return sorted(self._entries, key=lambda k: (k.match_id, k.minute))

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
