"""Unit test fixtures with HTTP mocking."""

from __future__ import annotations

import pytest
import respx

from goalreplay.search.rate_limiter import RateLimitConfig, RateLimiter


# ============================================================================
# HTTP Mocking Fixtures
# ============================================================================


@pytest.fixture
def respx_mock():
    """Provide a respx mock router for HTTP mocking.

    Use this when you need fine-grained control over mocked responses.
    The mock is automatically started and stopped by respx.
    """
    with respx.mock(assert_all_called=False) as router:
        yield router


# ============================================================================
# Rate Limiter Fixtures
# ============================================================================


@pytest.fixture
def public_limiter(clock) -> RateLimiter:
    """Public channel limiter (5/min) on the fake clock."""
    return RateLimiter(RateLimitConfig(requests_per_minute=5), clock=clock, sleep=clock.sleep)


@pytest.fixture
def oauth_limiter(clock) -> RateLimiter:
    """Authenticated channel limiter (10/min) on the fake clock."""
    return RateLimiter(RateLimitConfig(requests_per_minute=10), clock=clock, sleep=clock.sleep)
