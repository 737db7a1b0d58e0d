"""Bounded retry with an injectable sleeper."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TypeVar

from goalreplay.core.exceptions import FetchError, RetriesExhaustedError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def linear_backoff(base_delay: float) -> Callable[[int], float]:
    """Delay of ``attempt_index * base_delay`` before retry ``attempt_index``."""

    def backoff(attempt_index: int) -> float:
        return attempt_index * base_delay

    return backoff


def is_retryable(error: FetchError) -> bool:
    return error.retryable


@dataclass
class RetryPolicy:
    """Configuration for retrying a fetch."""

    max_attempts: int = 3
    backoff: Callable[[int], float] = field(default_factory=lambda: linear_backoff(30.0))
    should_retry: Callable[[FetchError], bool] = is_retryable
    sleep: Callable[[float], None] = time.sleep

    @classmethod
    def no_retry(cls) -> RetryPolicy:
        return cls(max_attempts=1)

    def run(self, operation: Callable[[], T], *, label: str = "operation") -> T:
        """
        Run ``operation`` until it succeeds or attempts run out.

        Non-retryable FetchErrors propagate immediately. When every attempt
        failed with a retryable error, RetriesExhaustedError is raised.
        """
        last_error: FetchError | None = None

        for attempt in range(self.max_attempts):
            if attempt > 0:
                delay = self.backoff(attempt)
                logger.debug(
                    f"Retrying {label} in {delay:.0f}s (attempt {attempt + 1}/{self.max_attempts})"
                )
                if delay > 0:
                    self.sleep(delay)

            try:
                return operation()
            except FetchError as e:
                if not self.should_retry(e):
                    logger.debug(f"Non-retryable error for {label}: {e}")
                    raise
                logger.info(
                    f"Retryable error for {label} (attempt {attempt + 1}/{self.max_attempts}): {e}"
                )
                last_error = e

        assert last_error is not None
        raise RetriesExhaustedError(
            f"Max retries exceeded for {label}: {last_error}",
            attempts=self.max_attempts,
            last_error=last_error,
            channel=last_error.channel,
        )
