"""Authenticated search channel (OAuth bearer token)."""

from __future__ import annotations

import logging
from typing import ClassVar

import httpx

from goalreplay.config import GoalReplaySettings
from goalreplay.core.exceptions import NotConfiguredError
from goalreplay.core.types import Channel
from goalreplay.search.base import FetcherConfig, SearchFetcher
from goalreplay.search.token import OAuthCredentials, TokenManager

logger = logging.getLogger(__name__)


class AuthenticatedFetcher(SearchFetcher):
    """
    OAuth search against ``oauth.reddit.com``.

    Generous quota (10 requests/minute, far below the 600/hour ceiling) and
    no challenge pages in practice. Usable only while ``is_available()``.
    """

    CHANNEL: ClassVar[Channel] = Channel.AUTHENTICATED
    BASE_URL: ClassVar[str] = "https://oauth.reddit.com"
    DEFAULT_REQUESTS_PER_MINUTE: ClassVar[float] = 10.0
    DEFAULT_TIMEOUT: ClassVar[float] = 15.0

    def __init__(
        self,
        token_manager: TokenManager,
        config: FetcherConfig | None = None,
        **kwargs,
    ) -> None:
        super().__init__(config, **kwargs)
        self._tokens = token_manager

    @classmethod
    def from_settings(
        cls,
        settings: GoalReplaySettings,
        *,
        token_http_client: httpx.Client | None = None,
        **kwargs,
    ) -> AuthenticatedFetcher | None:
        """
        Build the authenticated channel, or return None when not configured.

        Partial credentials count as none. The token is not acquired here;
        call ``authenticate()`` before first use.
        """
        try:
            credentials = OAuthCredentials.from_settings(settings)
        except NotConfiguredError:
            logger.debug("Reddit OAuth not configured; using public channel only")
            return None

        tokens = TokenManager(
            credentials,
            http_client=token_http_client,
            timeout=settings.token_timeout,
        )
        config = FetcherConfig(
            subreddit=settings.subreddit,
            timeout=settings.oauth_timeout,
            requests_per_minute=settings.oauth_requests_per_minute,
            abuse_cooldown=settings.abuse_cooldown_seconds,
        )
        return cls(tokens, config, **kwargs)

    @property
    def token_manager(self) -> TokenManager:
        return self._tokens

    def authenticate(self) -> None:
        self._tokens.authenticate()

    def is_available(self) -> bool:
        return self._tokens.is_available()

    def is_failed(self) -> bool:
        return self._tokens.is_failed()

    def ensure_valid_token(self) -> None:
        self._tokens.ensure_valid_token()

    def _before_request(self) -> None:
        self._tokens.ensure_valid_token()

    def _request_headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._tokens.bearer_token()}",
            "User-Agent": self._tokens.credentials.user_agent,
            "Accept": "application/json",
        }

    def close(self) -> None:
        super().close()
        self._tokens.close()
