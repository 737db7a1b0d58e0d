"""Application configuration using Pydantic Settings."""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, RedisDsn, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from goalreplay.core.types import CacheBackend


def _default_cache_path() -> Path:
    return Path.home() / ".cache" / "goalreplay" / "goal_links.json"


class GoalReplaySettings(BaseSettings):
    """Application configuration from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_prefix="GOALREPLAY_",
    )

    # Reddit OAuth (all four are required to enable the authenticated channel)
    reddit_client_id: str | None = Field(
        default=None,
        description="Reddit app client ID",
    )
    reddit_client_secret: SecretStr | None = Field(
        default=None,
        description="Reddit app client secret",
    )
    reddit_username: str | None = Field(
        default=None,
        description="Reddit account username (script app)",
    )
    reddit_password: SecretStr | None = Field(
        default=None,
        description="Reddit account password (script app)",
    )

    subreddit: str = Field(
        default="soccer",
        description="Subreddit searched for goal clips",
    )

    # Rate limiting
    public_requests_per_minute: float = Field(
        default=5.0,
        gt=0,
        description="Request rate on the unauthenticated channel",
    )
    oauth_requests_per_minute: float = Field(
        default=10.0,
        gt=0,
        description="Request rate on the authenticated channel (hourly ceiling is 600)",
    )
    abuse_cooldown_seconds: float = Field(
        default=600.0,
        ge=0,
        description="How long the doubled interval applies after a challenge page",
    )

    # Timeouts
    public_timeout: float = Field(default=10.0, gt=0, description="Public search timeout (s)")
    oauth_timeout: float = Field(default=15.0, gt=0, description="OAuth search timeout (s)")
    token_timeout: float = Field(default=15.0, gt=0, description="Token exchange timeout (s)")

    # Batching and retry
    batch_size: int = Field(
        default=5,
        ge=1,
        description="Goals resolved per batch in resolve_many",
    )
    batch_delay_seconds: float = Field(
        default=2.0,
        ge=0,
        description="Pause between batches",
    )
    retry_attempts: int = Field(
        default=3,
        ge=1,
        description="Total attempts per goal on the public channel",
    )
    retry_base_delay_seconds: float = Field(
        default=30.0,
        ge=0,
        description="Linear backoff step between public channel attempts",
    )

    # Cache
    cache_backend: CacheBackend = Field(
        default=CacheBackend.FILE,
        description="Goal link cache backend",
    )
    cache_path: Path = Field(
        default_factory=_default_cache_path,
        description="JSON file used by the file cache backend",
    )
    redis_url: RedisDsn | None = Field(
        default=None,
        description="Redis connection URL (redis cache backend)",
    )

    # App settings
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )

    @property
    def oauth_configured(self) -> bool:
        """Whether every OAuth credential is present (partial counts as none)."""
        return all(
            (
                self.reddit_client_id,
                self.reddit_client_secret and self.reddit_client_secret.get_secret_value(),
                self.reddit_username,
                self.reddit_password and self.reddit_password.get_secret_value(),
            )
        )


@lru_cache
def get_settings() -> GoalReplaySettings:
    """Get cached settings instance."""
    return GoalReplaySettings()
