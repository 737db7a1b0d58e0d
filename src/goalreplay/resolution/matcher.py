"""Selection of the best search hit for a goal."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Protocol

from goalreplay.core.models import GoalEvent, SearchResult
from goalreplay.core.normalization import contains_phrase, minute_pattern, normalize_text, team_tokens

logger = logging.getLogger(__name__)


class MatchStrategy(Protocol):
    """Scores a candidate against a goal; ``None`` rejects it."""

    def score(self, result: SearchResult, goal: GoalEvent) -> float | None: ...


class KeywordMatcher:
    """
    Title keyword scoring.

    A candidate must carry the goal's minute marker and mention at least one
    of the two teams. Scoring favours the scoring team:

    - scoring team full name: +2, or a distinctive word of it: +1
    - conceding team full name / word: +0.5
    - minute marker: +2
    """

    def score(self, result: SearchResult, goal: GoalEvent) -> float | None:
        title = normalize_text(result.title)
        if not title:
            return None

        if not minute_pattern(goal.minute).search(title):
            return None

        scoring = self._team_score(title, goal.scoring_team)
        conceding = self._team_score(title, goal.conceding_team)
        if not scoring and not conceding:
            return None

        return 2.0 + scoring + 0.5 * bool(conceding)

    @staticmethod
    def _team_score(title: str, team: str) -> float:
        if contains_phrase(title, team):
            return 2.0
        if any(contains_phrase(title, token) for token in team_tokens(team)):
            return 1.0
        return 0.0


class ResultMatcher:
    """
    Picks the best media candidate for a goal using a pluggable strategy.

    Ties keep the earliest candidate, so results of the primary query
    outrank those of the secondary one when the lists are concatenated.
    """

    def __init__(self, strategy: MatchStrategy | None = None) -> None:
        self.strategy = strategy or KeywordMatcher()

    def select_best(
        self,
        candidates: Sequence[SearchResult],
        goal: GoalEvent,
    ) -> SearchResult | None:
        best: SearchResult | None = None
        best_score = float("-inf")

        for candidate in candidates:
            if not candidate.is_media:
                continue
            score = self.strategy.score(candidate, goal)
            if score is None:
                continue
            if score > best_score:
                best, best_score = candidate, score

        if best is not None:
            logger.debug(f"Matched goal {goal.key} to {best.title!r} (score {best_score})")
        return best
