"""Heuristic classification of challenge / bot-detection pages."""

from __future__ import annotations

from typing import ClassVar


class AntiBotDetector:
    """
    Decides whether a response body is a challenge page instead of data.

    Phrase matching is case-insensitive. A body declared as JSON that is
    shaped like a JSON document is never matched: post titles such as
    "blocked shot" would otherwise trip the phrase list. False negatives are
    accepted; an undetected challenge that still decodes yields no results.
    """

    INDICATORS: ClassVar[tuple[str, ...]] = (
        "prove your humanity",
        "captcha",
        "robot",
        "automated",
        "blocked",
        "rate limit",
        "too many requests",
    )
    MARKUP_MARKERS: ClassVar[tuple[str, ...]] = ("<html", "<!doctype html")

    def __init__(self, indicators: tuple[str, ...] | None = None) -> None:
        self._indicators = tuple(i.lower() for i in (indicators or self.INDICATORS))

    def is_challenge(self, body: str, content_type: str | None = None) -> bool:
        """Whether the body is a bot-detection page."""
        if not body:
            return False
        if self._is_structured(body, content_type):
            return False
        lowered = body.lower()
        return any(indicator in lowered for indicator in self._indicators)

    def looks_like_markup(self, body: str, content_type: str | None = None) -> bool:
        """Whether the body is an HTML document rather than structured data."""
        if content_type and "text/html" in content_type.lower():
            return True
        if not body:
            return False
        lowered = body.lower()
        return any(marker in lowered for marker in self.MARKUP_MARKERS)

    @staticmethod
    def _is_structured(body: str, content_type: str | None) -> bool:
        if not content_type or "json" not in content_type.lower():
            return False
        return body.lstrip()[:1] in ("{", "[")
