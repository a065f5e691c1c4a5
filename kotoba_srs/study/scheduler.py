"""
SM-2 Spaced Repetition Scheduler.

Implements the modified SuperMemo-2 schedule used for characters, words and
grammar points. Scheduling is pure: the scheduler computes the superseding
state and the caller persists it.

SM-2 Quality Scale:
0 - Complete blackout
1 - Incorrect response
2 - Incorrect response with hesitation
3 - Correct response with difficulty
4 - Correct response with slight hesitation
5 - Perfect response
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, replace
from datetime import datetime, timedelta

from loguru import logger

from kotoba_srs.config import get_settings
from kotoba_srs.core.errors import InvalidInput
from kotoba_srs.core.models import ContentType, ReviewItem, utcnow

MIN_QUALITY = 0
MAX_QUALITY = 5
PASSING_QUALITY = 3

# =============================================================================
# SM-2 Algorithm
# =============================================================================


@dataclass
class SM2Config:
    """Configuration for SM-2 algorithm."""

    initial_easiness: float = 2.5
    minimum_easiness: float = 1.3
    first_interval: int = 1  # Days for first review
    second_interval: int = 6  # Days for second review

    @classmethod
    def from_settings(cls) -> SM2Config:
        settings = get_settings()
        return cls(
            initial_easiness=settings.sm2_initial_ease,
            minimum_easiness=settings.sm2_minimum_ease,
            first_interval=settings.sm2_first_interval,
            second_interval=settings.sm2_second_interval,
        )


@dataclass(frozen=True)
class ScheduleResult:
    """Outcome of scheduling one review."""

    interval: int
    repetitions: int
    ease_factor: float
    next_review_at: datetime


def validate_quality(quality: int) -> int:
    """Reject anything that is not an integer grade 0-5."""
    if isinstance(quality, bool) or not isinstance(quality, int):
        raise InvalidInput(f"Quality must be an integer 0-5, got {quality!r}")
    if not MIN_QUALITY <= quality <= MAX_QUALITY:
        raise InvalidInput(f"Quality must be between 0 and 5, got {quality}")
    return quality


class SM2Scheduler:
    """
    Implements the SM-2 spaced repetition algorithm.

    The SuperMemo 2 algorithm calculates review intervals from recall
    quality. Each review item has:
    - Ease Factor (EF): How fast intervals grow (2.5 default, min 1.3)
    - Interval: Days until next review
    - Repetitions: Consecutive successful recalls
    """

    def __init__(self, config: SM2Config | None = None):
        """
        Initialize SM-2 scheduler.

        Args:
            config: Custom configuration (uses settings defaults if None)
        """
        self.config = config or SM2Config.from_settings()

    def schedule(
        self,
        quality: int,
        repetitions: int,
        interval: int,
        ease_factor: float,
        now: datetime | None = None,
    ) -> ScheduleResult:
        """
        Calculate the next interval, repetitions and ease factor.

        Args:
            quality: Recall quality (0-5)
            repetitions: Consecutive successful reviews so far
            interval: Current interval in days
            ease_factor: Current ease factor
            now: Review time (defaults to current UTC time)

        Returns:
            ScheduleResult with the new SM-2 fields and next review time

        Raises:
            InvalidInput: quality outside 0-5 or malformed prior state
        """
        validate_quality(quality)
        if repetitions < 0:
            raise InvalidInput(f"Repetitions cannot be negative, got {repetitions}")
        if interval < 0:
            raise InvalidInput(f"Interval cannot be negative, got {interval}")
        if ease_factor < self.config.minimum_easiness:
            raise InvalidInput(
                f"Ease factor {ease_factor} is below the minimum {self.config.minimum_easiness}"
            )

        # EF' = EF + (0.1 - (5 - q) * (0.08 + (5 - q) * 0.02))
        ef_delta = 0.1 - (5 - quality) * (0.08 + (5 - quality) * 0.02)
        new_ef = max(self.config.minimum_easiness, ease_factor + ef_delta)

        if quality < PASSING_QUALITY:
            # Failed - reset the streak
            new_repetitions = 0
            new_interval = self.config.first_interval
        else:
            new_repetitions = repetitions + 1

            if new_repetitions == 1:
                new_interval = self.config.first_interval
            elif new_repetitions == 2:
                new_interval = self.config.second_interval
            else:
                new_interval = round(interval * new_ef)

        reviewed_at = now or utcnow()
        return ScheduleResult(
            interval=new_interval,
            repetitions=new_repetitions,
            ease_factor=new_ef,
            next_review_at=reviewed_at + timedelta(days=new_interval),
        )

    def review(
        self,
        item: ReviewItem,
        quality: int,
        now: datetime | None = None,
    ) -> ReviewItem:
        """
        Apply a review to an item and return the superseding record.

        Args:
            item: Current review state
            quality: Recall quality (0-5)
            now: Review time (defaults to current UTC time)

        Returns:
            New ReviewItem; the input is left untouched
        """
        reviewed_at = now or utcnow()
        result = self.schedule(
            quality,
            item.repetitions,
            item.interval,
            item.ease_factor,
            now=reviewed_at,
        )

        logger.debug(
            f"Scheduled {item.content_type.value}:{item.content_id} for {item.user_id}: "
            f"quality={quality}, interval={result.interval}d, reps={result.repetitions}, "
            f"ef={result.ease_factor:.2f}"
        )

        return replace(
            item,
            ease_factor=result.ease_factor,
            interval=result.interval,
            repetitions=result.repetitions,
            next_review_at=result.next_review_at,
            last_reviewed_at=reviewed_at,
        )

    def new_review_item(
        self,
        user_id: str,
        content_type: ContentType | str,
        content_id: int,
        now: datetime | None = None,
    ) -> ReviewItem:
        """
        Create the first review record for an item.

        New items are due immediately so they can enter the next session.
        """
        return ReviewItem(
            user_id=user_id,
            content_type=ContentType.parse(content_type),
            content_id=content_id,
            ease_factor=self.config.initial_easiness,
            interval=0,
            repetitions=0,
            next_review_at=now or utcnow(),
            last_reviewed_at=None,
        )

    def grade_from_response(
        self,
        is_correct: bool,
        response_ms: float,
        expected_ms: float = 10000,
    ) -> int:
        """
        Convert a response to an SM-2 grade.

        Args:
            is_correct: Whether the answer was correct
            response_ms: Time taken to respond
            expected_ms: Expected response time

        Returns:
            Grade 0-5
        """
        if response_ms < 0:
            raise InvalidInput(f"Response time cannot be negative, got {response_ms}")

        if not is_correct:
            # Incorrect responses: 0-2
            if response_ms < expected_ms * 0.5:
                return 2  # Quick wrong = almost knew it
            elif response_ms < expected_ms:
                return 1  # Wrong but remembered when shown
            else:
                return 0  # Complete blackout

        # Correct responses: 3-5
        if response_ms < expected_ms * 0.5:
            return 5  # Quick and correct = perfect recall
        elif response_ms < expected_ms:
            return 4  # Correct with some hesitation
        else:
            return 3  # Correct but struggled


def due_items(items: Iterable[ReviewItem], now: datetime | None = None) -> list[ReviewItem]:
    """
    Items whose next review time has passed, earliest first.

    Never-scheduled items are excluded; they have no review time yet.
    """
    moment = now or utcnow()
    due = [
        item for item in items
        if item.next_review_at is not None and item.next_review_at <= moment
    ]
    due.sort(key=lambda item: item.next_review_at)
    return due
