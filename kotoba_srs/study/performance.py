"""
Per-item performance tracking.

Accuracy and average response time are maintained from running counts;
full history is never replayed.
"""

from __future__ import annotations

import math
from dataclasses import replace
from datetime import datetime

from kotoba_srs.core.errors import InvalidInput
from kotoba_srs.core.models import ContentType, PerformanceRecord, utcnow


def new_performance_record(
    user_id: str, content_type: ContentType | str, content_id: int
) -> PerformanceRecord:
    """Empty record for an item the learner has not attempted yet."""
    return PerformanceRecord(
        user_id=user_id,
        content_type=ContentType.parse(content_type),
        content_id=content_id,
    )


def record_attempt(
    record: PerformanceRecord,
    is_correct: bool,
    response_time_ms: float,
    now: datetime | None = None,
) -> PerformanceRecord:
    """
    Fold one attempt into the running counts.

    Args:
        record: Current record
        is_correct: Whether the attempt counts as correct (quality >= 3)
        response_time_ms: Time taken for this attempt

    Returns:
        Updated PerformanceRecord
    """
    if not math.isfinite(response_time_ms) or response_time_ms < 0:
        raise InvalidInput(f"Response time must be a non-negative number, got {response_time_ms}")

    attempts = record.attempts + 1
    total_time = record.avg_response_time_ms * record.attempts + response_time_ms

    return replace(
        record,
        attempts=attempts,
        correct_attempts=record.correct_attempts + (1 if is_correct else 0),
        avg_response_time_ms=total_time / attempts,
        last_attempt_at=now or utcnow(),
    )


def timing_consistency(response_time_ms: float, avg_response_time_ms: float) -> float:
    """
    Similarity (0-1) between one response time and the running average.

    1.0 means identical; 0.0 means one of the two is zero.
    """
    longest = max(response_time_ms, avg_response_time_ms)
    if longest <= 0:
        return 1.0
    return min(response_time_ms, avg_response_time_ms) / longest
