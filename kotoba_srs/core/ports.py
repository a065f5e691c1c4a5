"""
Collaborator interfaces.

The engine never talks to a database. Callers inject objects satisfying
these protocols; tests use in-memory fakes.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol

from kotoba_srs.core.models import (
    CatalogEntry,
    ContentType,
    PerformanceRecord,
    ReviewItem,
    UserLearningState,
)


class ContentCatalog(Protocol):
    """Read-only access to authored content."""

    def get_entry(self, content_type: ContentType, content_id: int) -> CatalogEntry | None:
        """Return the catalog entry, or None if it does not exist."""
        ...

    def list_entries(
        self, content_types: Iterable[ContentType] | None = None
    ) -> list[CatalogEntry]:
        """Return entries in stable catalog order."""
        ...


class PerformanceStore(Protocol):
    """Current scheduling and performance state for a learner."""

    def get_review_item(
        self, user_id: str, content_type: ContentType, content_id: int
    ) -> ReviewItem | None:
        ...

    def get_performance(
        self, user_id: str, content_type: ContentType, content_id: int
    ) -> PerformanceRecord | None:
        ...


class ProfileProvider(Protocol):
    """Learner profile and analytics aggregate."""

    def get_learning_state(self, user_id: str) -> UserLearningState:
        ...
