"""Tests for the OAuth token lifecycle."""

from __future__ import annotations

import threading

import httpx
import pytest
import respx
from helpers import TOKEN_URL, FakeClock, token_payload

from goalreplay.core.exceptions import AuthenticationError, ChannelUnavailableError, NotConfiguredError
from goalreplay.core.types import TokenStatus
from goalreplay.search.token import OAuthCredentials, ReadWriteLock, TokenManager

CREDENTIALS = OAuthCredentials(
    client_id="client-id",
    client_secret="client-secret",
    username="golazo_bot",
    password="hunter2",
)


@pytest.fixture
def manager(clock: FakeClock):
    manager = TokenManager(CREDENTIALS, clock=clock)
    yield manager
    manager.close()


def form(request: httpx.Request) -> dict[str, str]:
    return dict(httpx.QueryParams(request.content.decode()))


class TestOAuthCredentials:
    """Tests for credential loading."""

    def test_from_settings(self, oauth_settings):
        creds = OAuthCredentials.from_settings(oauth_settings)
        assert creds == CREDENTIALS

    def test_missing_credentials(self, settings):
        with pytest.raises(NotConfiguredError):
            OAuthCredentials.from_settings(settings)

    def test_user_agent(self):
        assert CREDENTIALS.user_agent == "golazo_bot:v1.0.0 (by /u/golazo_bot)"


class TestAuthenticate:
    """Tests for the password grant."""

    @respx.mock
    def test_success(self, manager: TokenManager):
        route = respx.post(TOKEN_URL).mock(return_value=httpx.Response(200, json=token_payload()))

        manager.authenticate()

        assert manager.status == TokenStatus.AUTHENTICATED
        assert manager.is_available()
        assert manager.bearer_token() == "access-1"
        assert manager.seconds_until_expiry() == 3600

        request = route.calls.last.request
        assert form(request) == {
            "grant_type": "password",
            "username": "golazo_bot",
            "password": "hunter2",
        }
        assert request.headers["Authorization"].startswith("Basic ")
        assert request.headers["User-Agent"] == CREDENTIALS.user_agent

    @respx.mock
    def test_failure_is_terminal(self, manager: TokenManager):
        """A rejected password grant moves the manager to FAILED."""
        route = respx.post(TOKEN_URL).mock(
            return_value=httpx.Response(401, json={"error": "invalid_grant"})
        )

        with pytest.raises(AuthenticationError) as exc_info:
            manager.authenticate()

        assert exc_info.value.status_code == 401
        assert manager.status == TokenStatus.FAILED
        assert manager.is_failed()
        assert not manager.is_available()

        with pytest.raises(ChannelUnavailableError):
            manager.ensure_valid_token()
        assert route.call_count == 1

    @respx.mock
    def test_unparseable_response(self, manager: TokenManager):
        respx.post(TOKEN_URL).mock(return_value=httpx.Response(200, json={"error": "nope"}))

        with pytest.raises(AuthenticationError):
            manager.authenticate()
        assert manager.is_failed()

    @respx.mock
    def test_transport_failure(self, manager: TokenManager):
        respx.post(TOKEN_URL).mock(side_effect=httpx.ConnectError("refused"))

        with pytest.raises(AuthenticationError):
            manager.authenticate()

    def test_bearer_without_token(self, manager: TokenManager):
        with pytest.raises(ChannelUnavailableError):
            manager.bearer_token()


class TestRefresh:
    """Tests for the refresh grant."""

    @respx.mock
    def test_refresh_keeps_old_refresh_token(self, manager: TokenManager):
        route = respx.post(TOKEN_URL).mock(
            side_effect=[
                httpx.Response(200, json=token_payload()),
                httpx.Response(200, json=token_payload("access-2", refresh_token=None)),
            ]
        )
        manager.authenticate()

        manager.refresh_token()

        assert manager.bearer_token() == "access-2"
        assert form(route.calls.last.request) == {
            "grant_type": "refresh_token",
            "refresh_token": "refresh-1",
        }
        # Old refresh token still usable
        route.side_effect = [httpx.Response(200, json=token_payload("access-3"))]
        manager.refresh_token()
        assert form(route.calls.last.request)["refresh_token"] == "refresh-1"

    @respx.mock
    def test_refresh_failure(self, manager: TokenManager):
        """A rejected refresh leaves the manager ready to re-authenticate."""
        respx.post(TOKEN_URL).mock(
            side_effect=[
                httpx.Response(200, json=token_payload()),
                httpx.Response(400, json={"error": "invalid_grant"}),
            ]
        )
        manager.authenticate()

        with pytest.raises(AuthenticationError):
            manager.refresh_token()
        assert manager.status == TokenStatus.AUTHENTICATING

    def test_refresh_without_token(self, manager: TokenManager):
        with pytest.raises(AuthenticationError):
            manager.refresh_token()


class TestEnsureValidToken:
    """Tests for pre-request token validation."""

    @respx.mock
    def test_fresh_token_is_not_refreshed(self, manager: TokenManager, clock: FakeClock):
        """More than five minutes of validity left: no network call."""
        route = respx.post(TOKEN_URL).mock(return_value=httpx.Response(200, json=token_payload()))
        manager.authenticate()
        clock.advance(3600 - 6 * 60)

        manager.ensure_valid_token()

        assert route.call_count == 1

    @respx.mock
    def test_expiring_token_refreshed_once(self, manager: TokenManager, clock: FakeClock):
        """Four minutes from expiry: exactly one refresh before the search."""
        route = respx.post(TOKEN_URL).mock(
            side_effect=[
                httpx.Response(200, json=token_payload()),
                httpx.Response(200, json=token_payload("access-2")),
            ]
        )
        manager.authenticate()
        clock.advance(3600 - 4 * 60)

        manager.ensure_valid_token()
        manager.ensure_valid_token()

        assert route.call_count == 2
        assert form(route.calls.last.request)["grant_type"] == "refresh_token"
        assert manager.bearer_token() == "access-2"

    @respx.mock
    def test_authenticates_when_no_token(self, manager: TokenManager):
        route = respx.post(TOKEN_URL).mock(return_value=httpx.Response(200, json=token_payload()))

        manager.ensure_valid_token()

        assert form(route.calls.last.request)["grant_type"] == "password"
        assert manager.is_available()

    @respx.mock
    def test_refresh_failure_falls_back_to_authenticate(
        self, manager: TokenManager, clock: FakeClock
    ):
        route = respx.post(TOKEN_URL).mock(
            side_effect=[
                httpx.Response(200, json=token_payload()),
                httpx.Response(400, json={"error": "invalid_grant"}),
                httpx.Response(200, json=token_payload("access-3")),
            ]
        )
        manager.authenticate()
        clock.advance(3600)

        manager.ensure_valid_token()

        grants = [form(call.request)["grant_type"] for call in route.calls]
        assert grants == ["password", "refresh_token", "password"]
        assert manager.bearer_token() == "access-3"
        assert manager.status == TokenStatus.AUTHENTICATED

    @respx.mock
    def test_failed_reauthentication_disables_channel(
        self, manager: TokenManager, clock: FakeClock
    ):
        respx.post(TOKEN_URL).mock(
            side_effect=[
                httpx.Response(200, json=token_payload(refresh_token=None)),
                httpx.Response(401, json={"error": "invalid_grant"}),
            ]
        )
        manager.authenticate()
        clock.advance(3600)

        with pytest.raises(AuthenticationError):
            manager.ensure_valid_token()

        assert manager.is_failed()
        with pytest.raises(ChannelUnavailableError):
            manager.ensure_valid_token()

    def test_expired_token_is_unavailable(self, clock: FakeClock):
        with respx.mock:
            respx.post(TOKEN_URL).mock(return_value=httpx.Response(200, json=token_payload()))
            manager = TokenManager(CREDENTIALS, clock=clock)
            manager.authenticate()

        clock.advance(3601)
        assert not manager.is_available()
        manager.close()

    @respx.mock
    def test_concurrent_callers_refresh_once(self, clock: FakeClock):
        """Concurrent validation hits the token endpoint a single time."""
        route = respx.post(TOKEN_URL).mock(return_value=httpx.Response(200, json=token_payload()))
        manager = TokenManager(CREDENTIALS, clock=clock)
        barrier = threading.Barrier(8)

        def worker():
            barrier.wait()
            manager.ensure_valid_token()

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert route.call_count == 1
        manager.close()


class TestReadWriteLock:
    """Tests for the reader/writer lock."""

    def test_readers_share(self):
        lock = ReadWriteLock()
        inside = threading.Barrier(2, timeout=2)

        def reader():
            with lock.read():
                inside.wait()

        threads = [threading.Thread(target=reader) for _ in range(2)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

    def test_writer_excludes_readers(self):
        lock = ReadWriteLock()
        events: list[str] = []
        writer_in = threading.Event()

        def writer():
            with lock.write():
                writer_in.set()
                events.append("write-start")
                threading.Event().wait(0.05)
                events.append("write-end")

        def reader():
            writer_in.wait()
            with lock.read():
                events.append("read")

        w = threading.Thread(target=writer)
        r = threading.Thread(target=reader)
        w.start()
        r.start()
        w.join()
        r.join()

        assert events == ["write-start", "write-end", "read"]
