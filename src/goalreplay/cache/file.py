"""JSON file goal link cache (the default durable backend)."""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from goalreplay.cache.base import GoalLinkCache
from goalreplay.cache.keys import CacheKeys
from goalreplay.core.exceptions import CacheError
from goalreplay.core.models import Found, GoalKey, NotFound, outcome_adapter

logger = logging.getLogger(__name__)

FORMAT_VERSION = 1


class JsonFileGoalLinkCache(GoalLinkCache):
    """
    Goal links persisted to a single JSON document.

    The file is read lazily and rewritten atomically (temporary file +
    rename) after every mutation. Every access re-reads the document when
    its modification stamp changed, so entries written or cleared by another
    process are seen before the next read or write. An unreadable file is
    treated as an empty cache.
    """

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path).expanduser()
        self._entries: dict[GoalKey, Found | NotFound] | None = None
        self._stamp: tuple[int, int, int] | None = None
        self._lock = threading.RLock()

    @property
    def path(self) -> Path:
        return self._path

    def get(self, key: GoalKey) -> Found | NotFound | None:
        with self._lock:
            return self._load().get(key)

    def set_found(self, link: Found) -> bool:
        return self._set_once(link)

    def set_not_found(self, key: GoalKey) -> bool:
        return self._set_once(NotFound(match_id=key.match_id, minute=key.minute))

    def _set_once(self, outcome: Found | NotFound) -> bool:
        with self._lock:
            entries = self._load()
            if outcome.key in entries:
                return False
            entries[outcome.key] = outcome
            try:
                self._save(entries)
            except CacheError:
                # Keep memory and disk consistent
                del entries[outcome.key]
                raise
            return True

    def clear(self, key: GoalKey) -> bool:
        with self._lock:
            entries = self._load()
            outcome = entries.pop(key, None)
            if outcome is None:
                return False
            try:
                self._save(entries)
            except CacheError:
                entries[key] = outcome
                raise
            return True

    def clear_all(self) -> int:
        with self._lock:
            entries = self._load()
            removed = dict(entries)
            entries.clear()
            try:
                self._save(entries)
            except CacheError:
                entries.update(removed)
                raise
            return len(removed)

    def keys(self) -> list[GoalKey]:
        with self._lock:
            return sorted(self._load(), key=lambda k: (k.match_id, k.minute))

    def _file_stamp(self) -> tuple[int, int, int] | None:
        try:
            stat = self._path.stat()
        except OSError:
            return None
        # Atomic replacement gives every write a new inode
        return stat.st_ino, stat.st_mtime_ns, stat.st_size

    def _load(self) -> dict[GoalKey, Found | NotFound]:
        stamp = self._file_stamp()
        if self._entries is not None and stamp == self._stamp:
            return self._entries

        self._entries = {}
        self._stamp = stamp
        if stamp is None:
            return self._entries

        try:
            document = json.loads(self._path.read_text(encoding="utf-8"))
            raw_entries: dict[str, Any] = document.get("entries", {})
        except (OSError, json.JSONDecodeError, AttributeError) as e:
            logger.warning(f"Ignoring unreadable goal link cache {self._path}: {e}")
            return self._entries

        for raw_key, raw_outcome in raw_entries.items():
            try:
                key = CacheKeys.parse(raw_key)
                self._entries[key] = outcome_adapter.validate_python(raw_outcome)
            except (ValueError, ValidationError) as e:
                logger.warning(f"Skipping invalid cache entry {raw_key!r}: {e}")

        logger.debug(f"Loaded {len(self._entries)} goal links from {self._path}")
        return self._entries

    def _save(self, entries: dict[GoalKey, Found | NotFound]) -> None:
        document = {
            "version": FORMAT_VERSION,
            "entries": {
                CacheKeys.entry(key): outcome.model_dump(mode="json")
                for key, outcome in entries.items()
            },
        }
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self._path.name}.", suffix=".tmp", dir=self._path.parent
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    json.dump(document, fh, indent=2, sort_keys=True)
                os.replace(tmp_name, self._path)
                self._stamp = self._file_stamp()
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise CacheError(f"Failed to write goal link cache {self._path}: {e}") from e
