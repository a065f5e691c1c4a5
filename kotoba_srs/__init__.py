"""
kotoba-srs: adaptive review engine for Japanese study content.

Schedules characters, words and grammar points with modified SM-2,
predicts recall, calibrates difficulty, and plans study sessions.
The engine is computation-only; catalog, performance store and learner
profile are supplied by the host application.
"""

from kotoba_srs.content.metadata import ContentMetadataEnricher
from kotoba_srs.core.errors import (
    ConvergenceFallback,
    InvalidInput,
    KotobaSRSError,
    NoEligibleItems,
    SessionStateError,
)
from kotoba_srs.core.models import (
    CandidateItem,
    CatalogEntry,
    ContentMetadata,
    ContentType,
    PerformanceRecord,
    ReviewItem,
    ReviewResponse,
    SessionPlan,
    UserLearningState,
)
from kotoba_srs.learning.item_selector import ItemSelector
from kotoba_srs.session.coordinator import SessionCoordinator
from kotoba_srs.session.state import SessionStatus, StudySession
from kotoba_srs.study.difficulty import DifficultyAdjuster, PerformanceSample
from kotoba_srs.study.retention_predictor import RecallFeatures, RetentionPredictor
from kotoba_srs.study.scheduler import SM2Scheduler

__version__ = "1.0.0"

__all__ = [
    "SessionCoordinator",
    "StudySession",
    "SessionStatus",
    "SM2Scheduler",
    "RetentionPredictor",
    "RecallFeatures",
    "DifficultyAdjuster",
    "PerformanceSample",
    "ItemSelector",
    "ContentMetadataEnricher",
    "ContentType",
    "ReviewItem",
    "PerformanceRecord",
    "CatalogEntry",
    "ContentMetadata",
    "CandidateItem",
    "UserLearningState",
    "SessionPlan",
    "ReviewResponse",
    "KotobaSRSError",
    "InvalidInput",
    "SessionStateError",
    "NoEligibleItems",
    "ConvergenceFallback",
]
