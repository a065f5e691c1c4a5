"""
Domain models for the review engine.

Records here are plain dataclasses passed between the engine and its
external collaborators (content catalog, performance store, learner
profile). The engine never persists them; callers receive updated
records and store them.

Design:
- ContentType: the three kinds of study content
- ReviewItem: SM-2 state per user and content item
- PerformanceRecord: running attempt counts per user and content item
- CatalogEntry / ContentMetadata: authored and derived content attributes
- UserLearningState: learner aggregate supplied by the profile store
- CandidateItem / SessionPlan: what a study session is built from
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from enum import Enum

from kotoba_srs.core.errors import InvalidInput


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)


class ContentType(str, Enum):
    """Kind of study content."""

    CHARACTER = "character"  # Kana and kanji
    WORD = "word"
    GRAMMAR = "grammar"

    @classmethod
    def parse(cls, value: ContentType | str) -> ContentType:
        """Coerce a raw value into a ContentType."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise InvalidInput(f"Unknown content type: {value!r}") from None


ContentKey = tuple[ContentType, int]


# =============================================================================
# Scheduling & Performance State
# =============================================================================


@dataclass(frozen=True)
class ReviewItem:
    """SM-2 scheduling state for one user and content item."""

    user_id: str
    content_type: ContentType
    content_id: int
    ease_factor: float = 2.5  # Never below 1.3
    interval: int = 0  # Days
    repetitions: int = 0  # Consecutive successful reviews
    next_review_at: datetime | None = None
    last_reviewed_at: datetime | None = None

    @property
    def key(self) -> ContentKey:
        return (self.content_type, self.content_id)

    @property
    def is_new(self) -> bool:
        """True until the first review has been recorded."""
        return self.last_reviewed_at is None

    def is_due(self, now: datetime | None = None) -> bool:
        """Check if this item is due. Never-scheduled items are due."""
        if self.next_review_at is None:
            return True
        return self.next_review_at <= (now or utcnow())

    def days_until_due(self, now: datetime | None = None) -> float:
        """Fractional days until the next review (negative when overdue)."""
        if self.next_review_at is None:
            return 0.0
        delta = self.next_review_at - (now or utcnow())
        return delta / timedelta(days=1)


@dataclass(frozen=True)
class PerformanceRecord:
    """Running attempt counts for one user and content item."""

    user_id: str
    content_type: ContentType
    content_id: int
    attempts: int = 0
    correct_attempts: int = 0
    avg_response_time_ms: float = 0.0
    last_attempt_at: datetime | None = None

    @property
    def key(self) -> ContentKey:
        return (self.content_type, self.content_id)

    @property
    def accuracy_rate(self) -> float:
        """Correct attempts over attempts (0.0 before the first attempt)."""
        if self.attempts <= 0:
            return 0.0
        return self.correct_attempts / self.attempts


# =============================================================================
# Content
# =============================================================================


@dataclass(frozen=True)
class CatalogEntry:
    """Authored attributes of a catalog item."""

    content_type: ContentType
    content_id: int
    base_difficulty: float = 50.0  # 0-100
    frequency_rank: int | None = None  # 1 = most frequent
    prerequisite_ids: tuple[int, ...] = ()
    curriculum_priority: float = 50.0  # 0-100
    jlpt_level: int | None = None  # 5 (easiest) to 1 (hardest)

    @property
    def key(self) -> ContentKey:
        return (self.content_type, self.content_id)


@dataclass(frozen=True)
class RetentionPredictors:
    """Modality sub-scores (0-1) describing how an item tends to be retained."""

    visual: float
    phonetic: float
    semantic: float
    contextual: float

    def to_dict(self) -> dict[str, float]:
        return {
            "visual": self.visual,
            "phonetic": self.phonetic,
            "semantic": self.semantic,
            "contextual": self.contextual,
        }


@dataclass(frozen=True)
class ReviewPattern:
    """Default review spacing for an item."""

    initial_interval: int = 1
    second_interval: int = 3
    expansion_factor: float = 2.0
    min_interval: int = 1
    max_interval: int = 365


@dataclass(frozen=True)
class MasteryCriteria:
    """Thresholds an item must meet to count as mastered."""

    min_accuracy: float = 0.90
    min_repetitions: int = 3
    timing_consistency: float = 0.80


@dataclass(frozen=True)
class ContentMetadata:
    """Derived, cacheable metrics for a catalog item."""

    content_type: ContentType
    content_id: int
    base_difficulty: float
    frequency_rank: int | None
    prerequisite_ids: tuple[int, ...]
    complexity_score: int  # 0-100
    retention_predictors: RetentionPredictors
    optimal_review_pattern: ReviewPattern
    mastery_criteria: MasteryCriteria

    @property
    def key(self) -> ContentKey:
        return (self.content_type, self.content_id)


# =============================================================================
# Learner & Session
# =============================================================================


@dataclass(frozen=True)
class UserLearningState:
    """Learner aggregate supplied by the profile store. Read-only here."""

    user_id: str
    accuracy_rate: float = 0.0  # 0-1
    weakness_by_category: dict[ContentType, float] = field(default_factory=dict)
    recent_items: tuple[ContentKey, ...] = ()
    prefer_novelty: bool = False
    current_streak: int = 0

    def weakness_for(self, content_type: ContentType, default: float = 50.0) -> float:
        return self.weakness_by_category.get(content_type, default)

    def recent_count(self, content_type: ContentType) -> int:
        """How many recent items share this content type."""
        return sum(1 for recent_type, _ in self.recent_items if recent_type == content_type)


@dataclass(frozen=True)
class CandidateItem:
    """A catalog entry with the learner's current state for it."""

    entry: CatalogEntry
    review_item: ReviewItem | None = None
    performance: PerformanceRecord | None = None

    @property
    def key(self) -> ContentKey:
        return self.entry.key

    @property
    def is_new(self) -> bool:
        """Never reviewed by this learner."""
        return self.review_item is None or self.review_item.is_new


@dataclass(frozen=True)
class ScoredItem:
    """A candidate with its selection priority."""

    candidate: CandidateItem
    priority_score: float
    factors: dict[str, float] = field(default_factory=dict)

    @property
    def key(self) -> ContentKey:
        return self.candidate.key


@dataclass(frozen=True)
class PlannedItem:
    """A selected item enriched with its content metadata."""

    candidate: CandidateItem
    metadata: ContentMetadata
    priority_score: float
    factors: dict[str, float] = field(default_factory=dict)

    @property
    def key(self) -> ContentKey:
        return self.candidate.key


@dataclass
class SessionPlan:
    """Ordered items for one study session. Not persisted."""

    session_id: str
    user_id: str
    items: list[PlannedItem]
    estimated_minutes: int
    recommendations: list[str] = field(default_factory=list)
    created_at: datetime = field(default_factory=utcnow)

    @property
    def total_items(self) -> int:
        return len(self.items)

    def find(self, key: ContentKey) -> PlannedItem | None:
        for item in self.items:
            if item.key == key:
                return item
        return None


@dataclass(frozen=True)
class ReviewResponse:
    """A learner's answer to one planned item."""

    content_type: ContentType
    content_id: int
    response_time_ms: float
    quality: int | None = None  # 0-5; derived from is_correct when omitted
    is_correct: bool | None = None

    @property
    def key(self) -> ContentKey:
        return (ContentType.parse(self.content_type), self.content_id)
