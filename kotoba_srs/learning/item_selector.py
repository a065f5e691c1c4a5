"""
Item Selection for Adaptive Review Sessions.

Ranks candidate items by a weighted priority built from:
- Due-ness (overdue and soon-due items first)
- Learner weakness (weak categories and poorly answered items)
- Curriculum priority (authored order of importance)
- Variety (avoid repeating the content type just studied)
- Novelty (new items for learners who prefer them)
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from loguru import logger

from kotoba_srs.config import SelectorWeights, get_settings
from kotoba_srs.core.errors import InvalidInput, NoEligibleItems
from kotoba_srs.core.models import CandidateItem, ScoredItem, UserLearningState, utcnow

DUE_SCORE = 100.0
DUE_HORIZON_DAYS = 50.0
WEAKNESS_ITEM_BONUS = 30.0
MAX_FACTOR = 100.0
VARIETY_BASE = 30.0
VARIETY_PENALTY = 10.0
NOVELTY_BONUS = 20.0


class ItemSelector:
    """
    Select items for study sessions.

    Selection is deterministic: identical inputs give identical output,
    with ties kept in catalog (input) order.
    """

    def __init__(
        self,
        weights: SelectorWeights | None = None,
        default_weakness: float | None = None,
    ):
        """
        Args:
            weights: Factor weights (settings defaults if None)
            default_weakness: Weakness for categories missing from the profile
        """
        settings = get_settings()
        self.weights = weights or settings.selector_weights
        self.default_weakness = (
            settings.default_category_weakness if default_weakness is None else default_weakness
        )

    def select_items(
        self,
        user_state: UserLearningState,
        candidates: Sequence[CandidateItem],
        count: int,
        now: datetime | None = None,
    ) -> list[ScoredItem]:
        """
        Rank candidates and return the top ``count``.

        Args:
            user_state: Learner aggregate
            candidates: Candidate items in catalog order
            count: Maximum number of items to return
            now: Reference time for due-ness (defaults to current UTC time)

        Returns:
            Up to ``count`` ScoredItems, highest priority first

        Raises:
            InvalidInput: count is not positive
            NoEligibleItems: there are no candidates
        """
        if isinstance(count, bool) or not isinstance(count, int) or count <= 0:
            raise InvalidInput(f"Item count must be a positive integer, got {count!r}")
        if not candidates:
            raise NoEligibleItems(user_state.user_id)

        moment = now or utcnow()
        scored = [self.score(user_state, candidate, moment) for candidate in candidates]

        # sorted() is stable, so equal scores keep catalog order
        ranked = sorted(scored, key=lambda item: -item.priority_score)
        selected = ranked[:count]

        logger.info(
            f"Selected {len(selected)}/{len(candidates)} items for {user_state.user_id} "
            f"(requested {count})"
        )
        return selected

    def score(
        self,
        user_state: UserLearningState,
        candidate: CandidateItem,
        now: datetime | None = None,
    ) -> ScoredItem:
        """Compute the weighted priority for one candidate."""
        moment = now or utcnow()
        w = self.weights

        factors = {
            "due": w.due_for_review * self._due_score(candidate, moment),
            "weakness": w.user_weakness * self._weakness_score(user_state, candidate),
            "curriculum": w.curriculum_priority * self._curriculum_score(candidate),
            "variety": w.variety_balance * self._variety_score(user_state, candidate),
            "novelty": w.novelty_preference * self._novelty_score(user_state, candidate),
        }
        return ScoredItem(
            candidate=candidate,
            priority_score=sum(factors.values()),
            factors=factors,
        )

    def _due_score(self, candidate: CandidateItem, now: datetime) -> float:
        item = candidate.review_item
        if item is None or item.is_due(now):
            return DUE_SCORE
        # Decays to zero for items 50+ days out
        return max(0.0, DUE_HORIZON_DAYS - item.days_until_due(now))

    def _weakness_score(self, user_state: UserLearningState, candidate: CandidateItem) -> float:
        content_type = candidate.entry.content_type
        score = user_state.weakness_for(content_type, self.default_weakness)

        performance = candidate.performance
        if performance is not None and performance.attempts > 0:
            score += (1 - performance.accuracy_rate) * WEAKNESS_ITEM_BONUS

        return min(MAX_FACTOR, score)

    @staticmethod
    def _curriculum_score(candidate: CandidateItem) -> float:
        return candidate.entry.curriculum_priority

    @staticmethod
    def _variety_score(user_state: UserLearningState, candidate: CandidateItem) -> float:
        same_type = user_state.recent_count(candidate.entry.content_type)
        return max(0.0, VARIETY_BASE - VARIETY_PENALTY * same_type)

    @staticmethod
    def _novelty_score(user_state: UserLearningState, candidate: CandidateItem) -> float:
        if user_state.prefer_novelty and candidate.is_new:
            return NOVELTY_BONUS
        return 0.0
