"""Shared test fixtures for all tests."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
from helpers import FakeClock

from goalreplay.config import GoalReplaySettings
from goalreplay.core.models import GoalEvent, SearchResult
from goalreplay.core.types import CacheBackend

MATCH_TIME = datetime(2024, 3, 2, 15, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def clock() -> FakeClock:
    """Create a fake monotonic clock."""
    return FakeClock()


# ============================================================================
# Sample Data Fixtures
# ============================================================================


@pytest.fixture
def match_time() -> datetime:
    return MATCH_TIME


@pytest.fixture
def sample_goal() -> GoalEvent:
    """Arsenal score against Chelsea in the 23rd minute."""
    return GoalEvent(
        match_id=555,
        minute=23,
        home_team="Arsenal",
        away_team="Chelsea",
        is_home_team=True,
        match_time=MATCH_TIME,
    )


@pytest.fixture
def away_goal() -> GoalEvent:
    """Away side scores in first-half stoppage time."""
    return GoalEvent(
        match_id=777,
        minute=45,
        home_team="Manchester United",
        away_team="Brighton & Hove Albion",
        is_home_team=False,
        match_time=MATCH_TIME,
    )


@pytest.fixture
def sample_result() -> SearchResult:
    """Media hit for the sample goal."""
    return SearchResult(
        url="https://streamin.one/v/arsenal23",
        title="Arsenal 1-0 Chelsea - Bukayo Saka 23' GOAL",
        post_url="https://www.reddit.com/r/soccer/comments/abc123/arsenal_10_chelsea/",
        flair="Media",
    )


@pytest.fixture
def settings(tmp_path) -> GoalReplaySettings:
    """Settings isolated from the environment, with no OAuth credentials."""
    return GoalReplaySettings(
        _env_file=None,
        cache_backend=CacheBackend.MEMORY,
        cache_path=tmp_path / "goal_links.json",
        reddit_client_id=None,
        reddit_client_secret=None,
        reddit_username=None,
        reddit_password=None,
        redis_url=None,
    )


@pytest.fixture
def oauth_settings(settings: GoalReplaySettings) -> GoalReplaySettings:
    """Settings with a complete set of OAuth credentials."""
    return GoalReplaySettings(
        **{
            **settings.model_dump(),
            "reddit_client_id": "client-id",
            "reddit_client_secret": "client-secret",
            "reddit_username": "golazo_bot",
            "reddit_password": "hunter2",
        },
        _env_file=None,
    )
