"""Domain models for goal events, search hits and resolution outcomes."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

MEDIA_FLAIR = "Media"
REDDIT_BASE_URL = "https://www.reddit.com"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class GoalKey(BaseModel):
    """Identity of a resolution request."""

    model_config = ConfigDict(frozen=True)

    match_id: int = Field(..., description="Upstream match identifier")
    minute: int = Field(..., description="Period-relative goal minute")

    def __str__(self) -> str:
        return f"{self.match_id}:{self.minute}"


class GoalEvent(BaseModel):
    """A scoring event supplied by the match-data layer."""

    model_config = ConfigDict(frozen=True)

    match_id: int = Field(..., description="Upstream match identifier")
    minute: int = Field(..., ge=0, description="Period-relative goal minute")
    home_team: str = Field(..., min_length=1, description="Home team name")
    away_team: str = Field(..., min_length=1, description="Away team name")
    is_home_team: bool = Field(..., description="Whether the home side scored")
    match_time: datetime = Field(..., description="Kickoff timestamp")

    @property
    def key(self) -> GoalKey:
        return GoalKey(match_id=self.match_id, minute=self.minute)

    @property
    def scoring_team(self) -> str:
        return self.home_team if self.is_home_team else self.away_team

    @property
    def conceding_team(self) -> str:
        return self.away_team if self.is_home_team else self.home_team


class SearchResult(BaseModel):
    """A candidate post returned by a search."""

    model_config = ConfigDict(frozen=True)

    url: str = Field(..., description="Canonical link URL (the clip)")
    title: str = Field(default="", description="Post title")
    post_url: str = Field(default="", description="Discussion post URL")
    flair: str | None = Field(default=None, description="Category tag")

    @property
    def is_media(self) -> bool:
        return self.flair == MEDIA_FLAIR

    @classmethod
    def from_listing_child(cls, child: dict[str, Any]) -> SearchResult | None:
        """Build a result from one ``data.children`` entry of a listing."""
        data = child.get("data") or {}
        url = data.get("url")
        if not url:
            return None

        permalink = data.get("permalink") or ""
        post_url = f"{REDDIT_BASE_URL}{permalink}" if permalink.startswith("/") else permalink

        return cls(
            url=url,
            title=data.get("title") or "",
            post_url=post_url,
            flair=data.get("link_flair_text"),
        )


class Found(BaseModel):
    """Positive resolution: a clip link was matched to the goal."""

    model_config = ConfigDict(frozen=True)

    status: Literal["found"] = "found"
    match_id: int
    minute: int
    url: str = Field(..., description="Clip link")
    title: str = Field(default="", description="Post title")
    post_url: str = Field(default="", description="Discussion post URL")
    resolved_at: datetime = Field(default_factory=utcnow)

    @property
    def key(self) -> GoalKey:
        return GoalKey(match_id=self.match_id, minute=self.minute)

    @classmethod
    def from_result(cls, goal: GoalEvent, result: SearchResult) -> Found:
        return cls(
            match_id=goal.match_id,
            minute=goal.minute,
            url=result.url,
            title=result.title,
            post_url=result.post_url,
        )


class NotFound(BaseModel):
    """Negative marker: searched and nothing matched."""

    model_config = ConfigDict(frozen=True)

    status: Literal["not_found"] = "not_found"
    match_id: int
    minute: int
    resolved_at: datetime = Field(default_factory=utcnow)

    @property
    def key(self) -> GoalKey:
        return GoalKey(match_id=self.match_id, minute=self.minute)


# Positive results are what callers display; the alias keeps call sites readable
GoalLink = Found

ResolutionOutcome = Annotated[Found | NotFound, Field(discriminator="status")]

outcome_adapter: TypeAdapter[Found | NotFound] = TypeAdapter(ResolutionOutcome)
