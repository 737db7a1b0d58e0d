"""Core enums and type definitions."""

from enum import StrEnum


class Channel(StrEnum):
    """Access modes to the upstream search surface."""

    AUTHENTICATED = "authenticated"
    PUBLIC = "public"


class ResolutionStatus(StrEnum):
    """Status of a goal link resolution."""

    FOUND = "found"
    NOT_FOUND = "not_found"


class TokenStatus(StrEnum):
    """Lifecycle states of the OAuth token for the authenticated channel."""

    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATING = "authenticating"
    AUTHENTICATED = "authenticated"
    REFRESHING = "refreshing"
    FAILED = "failed"  # Terminal for the process lifetime


class CacheBackend(StrEnum):
    """Available goal link cache backends."""

    FILE = "file"
    REDIS = "redis"
    MEMORY = "memory"
