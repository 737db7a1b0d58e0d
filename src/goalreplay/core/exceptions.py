"""Custom exception hierarchy for goalreplay."""

from typing import Any

from .types import Channel


class GoalReplayError(Exception):
    """Base exception for all goalreplay errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(GoalReplayError):
    """Invalid configuration."""

    pass


class NotConfiguredError(ConfigurationError):
    """An optional feature is disabled because its configuration is absent."""

    pass


class FetchError(GoalReplayError):
    """A search request against the upstream service failed.

    ``retryable`` marks failures the public channel may retry with backoff.
    """

    retryable: bool = False

    def __init__(
        self,
        message: str,
        channel: Channel | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.channel = channel


class ChannelUnavailableError(FetchError):
    """Channel cannot be used (credentials absent or token unobtainable)."""

    pass


class AuthenticationError(ChannelUnavailableError):
    """Credential exchange with the token endpoint failed."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, Channel.AUTHENTICATED, details)
        self.status_code = status_code


class BlockedError(FetchError):
    """Upstream served a challenge or bot-detection page instead of data."""

    retryable = True


class RateLimitError(FetchError):
    """Upstream rejected the request for exceeding its quota."""

    retryable = True

    def __init__(
        self,
        message: str,
        channel: Channel | None = None,
        retry_after: float | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, channel, details)
        self.retry_after = retry_after


class TransportError(FetchError):
    """Network-level failure (connection, timeout, read)."""

    pass


class UpstreamStatusError(FetchError):
    """Upstream answered with an unexpected HTTP status."""

    def __init__(
        self,
        message: str,
        status_code: int,
        channel: Channel | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, channel, details)
        self.status_code = status_code


class MalformedResponseError(FetchError):
    """Payload failed structured decoding and carried no markup.

    Undecodable markup is reported as BlockedError instead.
    """

    pass


class RetriesExhaustedError(FetchError):
    """All retry attempts on the public channel failed."""

    def __init__(
        self,
        message: str,
        attempts: int,
        last_error: FetchError,
        channel: Channel | None = None,
    ) -> None:
        super().__init__(message, channel)
        self.attempts = attempts
        self.last_error = last_error


class CacheError(GoalReplayError):
    """Cache operation failed."""

    pass
