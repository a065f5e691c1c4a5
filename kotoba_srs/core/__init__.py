"""
Core Module - Shared domain models, errors and collaborator interfaces.

Components:
- models: Review/performance state, catalog entries, session plans
- errors: InvalidInput, NoEligibleItems, SessionStateError
- ports: ContentCatalog, PerformanceStore, ProfileProvider protocols
"""

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
    MasteryCriteria,
    PerformanceRecord,
    PlannedItem,
    RetentionPredictors,
    ReviewItem,
    ReviewPattern,
    ReviewResponse,
    ScoredItem,
    SessionPlan,
    UserLearningState,
    utcnow,
)
from kotoba_srs.core.ports import ContentCatalog, PerformanceStore, ProfileProvider

__all__ = [
    # Errors
    "KotobaSRSError",
    "InvalidInput",
    "SessionStateError",
    "NoEligibleItems",
    "ConvergenceFallback",
    # Models
    "ContentType",
    "ReviewItem",
    "PerformanceRecord",
    "CatalogEntry",
    "ContentMetadata",
    "RetentionPredictors",
    "ReviewPattern",
    "MasteryCriteria",
    "UserLearningState",
    "CandidateItem",
    "ScoredItem",
    "PlannedItem",
    "SessionPlan",
    "ReviewResponse",
    "utcnow",
    # Ports
    "ContentCatalog",
    "PerformanceStore",
    "ProfileProvider",
]
