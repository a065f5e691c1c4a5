"""
Content Module - Derived per-item metadata.

- metadata: complexity score, retention predictors, review pattern,
  mastery criteria, and the cached ContentMetadataEnricher
"""

from kotoba_srs.content.metadata import (
    ContentMetadataEnricher,
    build_metadata,
    complexity_score,
    is_mastered,
)

__all__ = [
    "ContentMetadataEnricher",
    "build_metadata",
    "complexity_score",
    "is_mastered",
]
