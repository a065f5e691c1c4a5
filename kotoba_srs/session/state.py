"""
Study session state.

A StudySession is an explicit object handed back and forth between the
caller and the SessionCoordinator. It carries the plan, the records
updated so far, and running statistics. Nothing here is process-global.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from kotoba_srs.core.models import (
    ContentKey,
    ContentType,
    PerformanceRecord,
    PlannedItem,
    ReviewItem,
    SessionPlan,
    UserLearningState,
    utcnow,
)
from kotoba_srs.study.difficulty import DifficultyAdjustment


class SessionStatus(str, Enum):
    """Lifecycle of a study session."""

    IDLE = "idle"
    BUILDING = "building"
    ACTIVE = "active"
    COMPLETE = "complete"  # Terminal


@dataclass(frozen=True)
class SessionStats:
    """Running statistics for a session."""

    answered: int = 0
    correct: int = 0
    total_response_time_ms: float = 0.0
    difficulty_factor: float = 1.0
    remaining: int = 0

    @property
    def accuracy(self) -> float:
        if self.answered == 0:
            return 0.0
        return self.correct / self.answered

    @property
    def avg_response_time_ms(self) -> float:
        if self.answered == 0:
            return 0.0
        return self.total_response_time_ms / self.answered


@dataclass(frozen=True)
class ResponseFeedback:
    """What to tell the learner about one response."""

    is_correct: bool
    quality: int
    interval_days: int
    next_review_at: datetime
    mastered: bool
    message: str


@dataclass(frozen=True)
class ResponseOutcome:
    """Everything computed for one response."""

    key: ContentKey
    next_item: PlannedItem | None
    updated_stats: SessionStats
    feedback: ResponseFeedback
    review_item: ReviewItem
    performance: PerformanceRecord
    difficulty: DifficultyAdjustment
    predicted_recall: float  # At the next scheduled review
    recommended_interval_days: float


@dataclass(frozen=True)
class SessionSummary:
    """Result of ending a session."""

    session_id: str
    user_id: str
    stats: SessionStats
    retention_score: float
    accuracy_by_category: dict[ContentType, float]
    proposed_weakness: dict[ContentType, float]
    focus_areas: list[ContentType]
    recommendations: list[str]
    review_items: list[ReviewItem]
    performance_records: list[PerformanceRecord]
    started_at: datetime
    ended_at: datetime


@dataclass
class StudySession:
    """One learner's study session."""

    user_id: str
    session_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    status: SessionStatus = SessionStatus.IDLE
    plan: SessionPlan | None = None
    user_state: UserLearningState | None = None
    stats: SessionStats = field(default_factory=SessionStats)
    started_at: datetime = field(default_factory=utcnow)
    ended_at: datetime | None = None

    # Records superseded during this session, keyed by content
    review_items: dict[ContentKey, ReviewItem] = field(default_factory=dict)
    performance: dict[ContentKey, PerformanceRecord] = field(default_factory=dict)
    difficulty_deltas: dict[ContentKey, float] = field(default_factory=dict)
    answered: set[ContentKey] = field(default_factory=set)
    outcomes: list[ResponseOutcome] = field(default_factory=list)

    @property
    def is_active(self) -> bool:
        return self.status == SessionStatus.ACTIVE

    def next_item(self) -> PlannedItem | None:
        """First planned item without a response yet."""
        if self.plan is None:
            return None
        for item in self.plan.items:
            if item.key not in self.answered:
                return item
        return None

    def remaining_count(self) -> int:
        if self.plan is None:
            return 0
        return sum(1 for item in self.plan.items if item.key not in self.answered)
