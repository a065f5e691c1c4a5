"""
Content Metadata Enricher.

Derives per-item metrics from catalog entries and caches them:
- Complexity score (difficulty, frequency, prerequisite load)
- Retention predictors (visual / phonetic / semantic / contextual)
- Default review pattern and mastery criteria

Metadata is immutable between catalog updates. The cache is read-through
with coalesced misses: concurrent first requests for the same key wait on
a single computation.
"""

from __future__ import annotations

import threading
from concurrent.futures import Future

from loguru import logger

from kotoba_srs.core.errors import InvalidInput
from kotoba_srs.core.models import (
    CatalogEntry,
    ContentKey,
    ContentMetadata,
    ContentType,
    MasteryCriteria,
    PerformanceRecord,
    RetentionPredictors,
    ReviewItem,
    ReviewPattern,
)
from kotoba_srs.core.ports import ContentCatalog

# Complexity weights
WEIGHT_DIFFICULTY = 0.5
WEIGHT_FREQUENCY = 0.3
WEIGHT_PREREQUISITES = 0.2
PREREQUISITE_POINTS = 5

# Modality profiles per content type (before complexity scaling)
RETENTION_PROFILES: dict[ContentType, RetentionPredictors] = {
    ContentType.CHARACTER: RetentionPredictors(
        visual=0.8, phonetic=0.6, semantic=0.4, contextual=0.2
    ),
    ContentType.WORD: RetentionPredictors(
        visual=0.4, phonetic=0.7, semantic=0.8, contextual=0.6
    ),
    ContentType.GRAMMAR: RetentionPredictors(
        visual=0.2, phonetic=0.3, semantic=0.7, contextual=0.9
    ),
}

DEFAULT_REVIEW_PATTERN = ReviewPattern()
DEFAULT_MASTERY_CRITERIA = MasteryCriteria()


def complexity_score(entry: CatalogEntry) -> int:
    """
    Weighted blend of difficulty, frequency and prerequisite count.

    Formula:
        0.5 × base_difficulty +
        0.3 × max(0, 100 - frequency_rank / 10) +
        0.2 × (5 × prerequisite_count)

    An unknown frequency rank contributes nothing.
    """
    if entry.frequency_rank is None:
        frequency_component = 0.0
    else:
        frequency_component = max(0.0, 100 - entry.frequency_rank / 10)

    prerequisite_component = PREREQUISITE_POINTS * len(entry.prerequisite_ids)

    score = (
        WEIGHT_DIFFICULTY * entry.base_difficulty
        + WEIGHT_FREQUENCY * frequency_component
        + WEIGHT_PREREQUISITES * prerequisite_component
    )
    return int(round(score))


def retention_predictors(content_type: ContentType, complexity: int) -> RetentionPredictors:
    """Scale the content type's modality profile down as complexity rises."""
    profile = RETENTION_PROFILES[content_type]
    scale = max(0.0, 1.0 - complexity / 200)
    return RetentionPredictors(
        visual=round(profile.visual * scale, 3),
        phonetic=round(profile.phonetic * scale, 3),
        semantic=round(profile.semantic * scale, 3),
        contextual=round(profile.contextual * scale, 3),
    )


def build_metadata(entry: CatalogEntry) -> ContentMetadata:
    """Compute metadata for a catalog entry (uncached)."""
    if not 0 <= entry.base_difficulty <= 100:
        raise InvalidInput(
            f"Base difficulty must be 0-100, got {entry.base_difficulty} "
            f"for {entry.content_type.value}:{entry.content_id}"
        )

    complexity = complexity_score(entry)
    return ContentMetadata(
        content_type=entry.content_type,
        content_id=entry.content_id,
        base_difficulty=entry.base_difficulty,
        frequency_rank=entry.frequency_rank,
        prerequisite_ids=tuple(entry.prerequisite_ids),
        complexity_score=complexity,
        retention_predictors=retention_predictors(entry.content_type, complexity),
        optimal_review_pattern=DEFAULT_REVIEW_PATTERN,
        mastery_criteria=DEFAULT_MASTERY_CRITERIA,
    )


def is_mastered(
    metadata: ContentMetadata,
    review_item: ReviewItem | None,
    performance: PerformanceRecord | None,
    timing_consistency: float,
) -> bool:
    """
    Check an item against its mastery criteria.

    Requires accuracy, a repetition streak and consistent response times.
    """
    if review_item is None or performance is None or performance.attempts == 0:
        return False
    criteria = metadata.mastery_criteria
    return (
        performance.accuracy_rate >= criteria.min_accuracy
        and review_item.repetitions >= criteria.min_repetitions
        and timing_consistency >= criteria.timing_consistency
    )


class ContentMetadataEnricher:
    """
    Read-through metadata cache over a content catalog.

    Thread-safe. Each key is computed at most once per cache lifetime;
    a failed computation is not cached and will be retried on next access.
    """

    def __init__(self, catalog: ContentCatalog | None = None):
        """
        Args:
            catalog: Source of catalog entries for ``get_metadata``
        """
        self.catalog = catalog
        self._lock = threading.Lock()
        self._cache: dict[ContentKey, Future] = {}

    def get_metadata(self, content_type: ContentType | str, content_id: int) -> ContentMetadata:
        """
        Metadata for a catalog item, computed on first access.

        Raises:
            InvalidInput: the catalog has no such item
        """
        key = (ContentType.parse(content_type), content_id)
        return self._get_or_compute(key, lambda: self._load_entry(key))

    def metadata_for(self, entry: CatalogEntry) -> ContentMetadata:
        """Metadata for an entry the caller already holds."""
        return self._get_or_compute(entry.key, lambda: entry)

    def clear_cache(self) -> None:
        """Drop all cached metadata (after an external catalog reload)."""
        with self._lock:
            count = len(self._cache)
            self._cache.clear()
        logger.info(f"Metadata cache cleared ({count} entries)")

    @property
    def cache_size(self) -> int:
        with self._lock:
            return len(self._cache)

    def _load_entry(self, key: ContentKey) -> CatalogEntry:
        if self.catalog is None:
            raise InvalidInput("No content catalog configured for metadata lookups")
        content_type, content_id = key
        entry = self.catalog.get_entry(content_type, content_id)
        if entry is None:
            raise InvalidInput(f"Unknown content {content_type.value}:{content_id}")
        return entry

    def _get_or_compute(self, key: ContentKey, loader) -> ContentMetadata:
        with self._lock:
            future = self._cache.get(key)
            owner = future is None
            if owner:
                future = Future()
                self._cache[key] = future

        if not owner:
            return future.result()

        try:
            metadata = build_metadata(loader())
        except BaseException as exc:
            with self._lock:
                if self._cache.get(key) is future:
                    del self._cache[key]
            future.set_exception(exc)
            raise

        future.set_result(metadata)
        logger.debug(
            f"Computed metadata for {key[0].value}:{key[1]} "
            f"(complexity={metadata.complexity_score})"
        )
        return metadata
