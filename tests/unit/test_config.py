"""Tests for settings and logging setup."""

from __future__ import annotations

import logging

import pytest
from pydantic import ValidationError

from goalreplay.cache import InMemoryGoalLinkCache, JsonFileGoalLinkCache, create_cache
from goalreplay.config import GoalReplaySettings
from goalreplay.core.exceptions import NotConfiguredError
from goalreplay.core.types import CacheBackend
from goalreplay.log import configure_logging


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("CLIENT_ID", "CLIENT_SECRET", "USERNAME", "PASSWORD"):
        monkeypatch.delenv(f"GOALREPLAY_REDDIT_{name}", raising=False)


class TestSettings:
    """Tests for GoalReplaySettings."""

    def test_defaults(self):
        settings = GoalReplaySettings(_env_file=None)

        assert settings.subreddit == "soccer"
        assert settings.public_requests_per_minute == 5
        assert settings.oauth_requests_per_minute == 10
        assert settings.batch_size == 5
        assert settings.batch_delay_seconds == 2
        assert settings.retry_attempts == 3
        assert settings.retry_base_delay_seconds == 30
        assert settings.cache_backend == CacheBackend.FILE
        assert settings.cache_path.name == "goal_links.json"
        assert not settings.oauth_configured

    def test_environment(self, monkeypatch):
        monkeypatch.setenv("GOALREPLAY_BATCH_SIZE", "10")
        monkeypatch.setenv("GOALREPLAY_CACHE_BACKEND", "memory")

        settings = GoalReplaySettings(_env_file=None)

        assert settings.batch_size == 10
        assert settings.cache_backend == CacheBackend.MEMORY

    def test_oauth_configured(self, oauth_settings):
        assert oauth_settings.oauth_configured
        assert "hunter2" not in repr(oauth_settings)

    def test_partial_oauth_is_not_configured(self, settings):
        partial = GoalReplaySettings(
            **{**settings.model_dump(), "reddit_client_id": "id", "reddit_username": "me"},
            _env_file=None,
        )
        assert not partial.oauth_configured

    def test_invalid_rate(self):
        with pytest.raises(ValidationError):
            GoalReplaySettings(_env_file=None, public_requests_per_minute=0)


class TestCreateCache:
    """Tests for backend selection."""

    def test_memory(self, settings):
        assert isinstance(create_cache(settings), InMemoryGoalLinkCache)

    def test_file(self, settings):
        file_settings = settings.model_copy(update={"cache_backend": CacheBackend.FILE})
        cache = create_cache(file_settings)
        assert isinstance(cache, JsonFileGoalLinkCache)
        assert cache.path == settings.cache_path

    def test_redis_requires_url(self, settings):
        redis_settings = settings.model_copy(update={"cache_backend": CacheBackend.REDIS})
        with pytest.raises(NotConfiguredError):
            create_cache(redis_settings)

    def test_redis(self, settings):
        from goalreplay.cache.redis import RedisGoalLinkCache

        redis_settings = GoalReplaySettings(
            **{
                **settings.model_dump(),
                "cache_backend": "redis",
                "redis_url": "redis://localhost:6379/0",
            },
            _env_file=None,
        )
        assert isinstance(create_cache(redis_settings), RedisGoalLinkCache)


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_level_from_settings(self, settings):
        configure_logging(settings.model_copy(update={"log_level": "warning"}))

        assert logging.getLogger().level == logging.WARNING
        assert logging.getLogger("httpx").level == logging.WARNING

    def test_debug(self, settings):
        configure_logging(settings.model_copy(update={"debug": True}))

        assert logging.getLogger().level == logging.DEBUG
