"""OAuth token lifecycle for the authenticated channel."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass

import httpx
from pydantic import BaseModel, Field, ValidationError

from goalreplay.config import GoalReplaySettings
from goalreplay.core.exceptions import AuthenticationError, ChannelUnavailableError, NotConfiguredError
from goalreplay.core.types import TokenStatus

logger = logging.getLogger(__name__)

TOKEN_URL = "https://www.reddit.com/api/v1/access_token"

# Tokens are renewed this long before they actually expire
REFRESH_MARGIN = 5 * 60.0


@dataclass(frozen=True)
class OAuthCredentials:
    """Long-lived credentials for a Reddit script app."""

    client_id: str
    client_secret: str
    username: str
    password: str

    @classmethod
    def from_settings(cls, settings: GoalReplaySettings) -> OAuthCredentials:
        """Build credentials, raising NotConfiguredError unless all four are set."""
        if not settings.oauth_configured:
            raise NotConfiguredError("Reddit OAuth credentials are not configured")
        return cls(
            client_id=settings.reddit_client_id,
            client_secret=settings.reddit_client_secret.get_secret_value(),
            username=settings.reddit_username,
            password=settings.reddit_password.get_secret_value(),
        )

    @property
    def user_agent(self) -> str:
        return f"{self.username}:v1.0.0 (by /u/{self.username})"


class TokenResponse(BaseModel):
    """Token endpoint response body."""

    access_token: str = Field(..., min_length=1)
    refresh_token: str | None = None
    expires_in: int = Field(..., gt=0)
    token_type: str = "bearer"


@dataclass
class TokenState:
    """Current access token, refresh token and expiry (monotonic seconds)."""

    access_token: str | None = None
    refresh_token: str | None = None
    expires_at: float = 0.0


class ReadWriteLock:
    """
    Reader/writer lock: many concurrent readers or one writer.

    Writers are preferred once waiting so a refresh is not starved by a
    stream of availability checks.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    @contextmanager
    def read(self) -> Iterator[None]:
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


class TokenManager:
    """
    Owns the token state machine for the authenticated channel.

    UNAUTHENTICATED -> AUTHENTICATING -> AUTHENTICATED -> REFRESHING ->
    AUTHENTICATED. A failed refresh falls back to AUTHENTICATING; a failed
    authentication is terminal (FAILED) for the process lifetime.
    """

    def __init__(
        self,
        credentials: OAuthCredentials,
        *,
        http_client: httpx.Client | None = None,
        timeout: float = 15.0,
        token_url: str = TOKEN_URL,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._credentials = credentials
        self._http = http_client
        self._owns_http = http_client is None
        self._timeout = timeout
        self._token_url = token_url
        self._clock = clock
        self._state = TokenState()
        self._status = TokenStatus.UNAUTHENTICATED
        self._lock = ReadWriteLock()

    @property
    def status(self) -> TokenStatus:
        with self._lock.read():
            return self._status

    @property
    def credentials(self) -> OAuthCredentials:
        return self._credentials

    def is_available(self) -> bool:
        """True iff a token is present and not yet expired."""
        with self._lock.read():
            return self._has_token(margin=0.0)

    def is_failed(self) -> bool:
        with self._lock.read():
            return self._status == TokenStatus.FAILED

    def bearer_token(self) -> str:
        """Current access token, for the Authorization header."""
        with self._lock.read():
            if not self._state.access_token:
                raise ChannelUnavailableError("No OAuth access token")
            return self._state.access_token

    def seconds_until_expiry(self) -> float:
        with self._lock.read():
            return self._state.expires_at - self._clock()

    def _has_token(self, margin: float) -> bool:
        return bool(self._state.access_token) and self._clock() < self._state.expires_at - margin

    # State transitions

    def authenticate(self) -> None:
        """Exchange account credentials for a new token pair."""
        with self._lock.write():
            self._authenticate_locked()

    def refresh_token(self) -> None:
        """Exchange the refresh token for a new access token.

        Raises AuthenticationError on failure; callers fall back to
        ``authenticate()``.
        """
        with self._lock.write():
            self._refresh_locked()

    def ensure_valid_token(self) -> None:
        """
        Make sure a token valid for at least five more minutes is held.

        Double-checked: the cheap check runs under the shared lock, the
        renewal re-checks under the exclusive lock so concurrent callers do
        not each hit the token endpoint.
        """
        with self._lock.read():
            if self._status == TokenStatus.FAILED:
                raise ChannelUnavailableError(
                    "OAuth channel is permanently unavailable", details={"status": "failed"}
                )
            if self._has_token(margin=REFRESH_MARGIN):
                return

        logger.debug("OAuth token expired or missing, attempting to refresh/re-authenticate")
        with self._lock.write():
            if self._status == TokenStatus.FAILED:
                raise ChannelUnavailableError("OAuth channel is permanently unavailable")
            if self._has_token(margin=REFRESH_MARGIN):
                return

            if self._state.refresh_token:
                try:
                    self._refresh_locked()
                    return
                except AuthenticationError as e:
                    logger.info(f"OAuth token refresh failed, attempting full authentication: {e}")
            else:
                logger.debug("No refresh token available, attempting full OAuth authentication")

            self._authenticate_locked()

    def _authenticate_locked(self) -> None:
        self._status = TokenStatus.AUTHENTICATING
        logger.debug("Starting Reddit OAuth authentication")
        try:
            token = self._request_token(
                {
                    "grant_type": "password",
                    "username": self._credentials.username,
                    "password": self._credentials.password,
                }
            )
        except AuthenticationError:
            self._status = TokenStatus.FAILED
            self._state = TokenState()
            logger.warning("OAuth authentication failed; authenticated channel disabled")
            raise

        self._state = TokenState(
            access_token=token.access_token,
            refresh_token=token.refresh_token,
            expires_at=self._clock() + token.expires_in,
        )
        self._status = TokenStatus.AUTHENTICATED
        logger.info("OAuth authentication successful")

    def _refresh_locked(self) -> None:
        if not self._state.refresh_token:
            raise AuthenticationError("No refresh token available")

        self._status = TokenStatus.REFRESHING
        logger.debug("Refreshing OAuth access token")
        try:
            token = self._request_token(
                {
                    "grant_type": "refresh_token",
                    "refresh_token": self._state.refresh_token,
                }
            )
        except AuthenticationError:
            self._status = TokenStatus.AUTHENTICATING
            raise

        self._state = TokenState(
            access_token=token.access_token,
            # The refresh token is only rotated when the endpoint sends one
            refresh_token=token.refresh_token or self._state.refresh_token,
            expires_at=self._clock() + token.expires_in,
        )
        self._status = TokenStatus.AUTHENTICATED
        logger.debug("OAuth token refresh successful")

    def _request_token(self, data: dict[str, str]) -> TokenResponse:
        grant = data["grant_type"]
        try:
            response = self._get_http().post(
                self._token_url,
                data=data,
                auth=(self._credentials.client_id, self._credentials.client_secret),
                headers={"User-Agent": self._credentials.user_agent},
                timeout=self._timeout,
            )
        except httpx.HTTPError as e:
            raise AuthenticationError(f"Token request ({grant}) failed: {e}") from e

        if response.status_code != 200:
            raise AuthenticationError(
                f"Token request ({grant}) failed with status {response.status_code}: "
                f"{response.text[:200]}",
                status_code=response.status_code,
            )

        try:
            return TokenResponse.model_validate_json(response.content)
        except ValidationError as e:
            raise AuthenticationError(f"Could not parse token response ({grant}): {e}") from e

    def _get_http(self) -> httpx.Client:
        if self._http is None or self._http.is_closed:
            self._http = httpx.Client(timeout=httpx.Timeout(self._timeout))
            self._owns_http = True
        return self._http

    def close(self) -> None:
        if self._http and self._owns_http and not self._http.is_closed:
            self._http.close()
        self._http = None
