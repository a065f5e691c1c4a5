"""
Session-level metrics.
"""

from __future__ import annotations


def calculate_retention_score(items_reviewed: int, correct: int, avg_interval_days: float) -> float:
    """
    Calculate overall retention effectiveness score (0-1).

    Combines:
    - Accuracy (40%)
    - Interval growth (40%)
    - Volume (20%)
    """
    if items_reviewed == 0:
        return 0.0

    accuracy = correct / items_reviewed
    interval_factor = min(1.0, avg_interval_days / 30)  # 30 days = max
    volume_factor = min(1.0, items_reviewed / 20)  # 20 items = good session

    return (accuracy * 0.4) + (interval_factor * 0.4) + (volume_factor * 0.2)


def estimate_study_time(
    item_count: int,
    avg_difficulty: float = 0.5,
    seconds_per_item: int = 30,
) -> int:
    """Estimate study time in minutes."""
    if item_count <= 0:
        return 0
    # Base time per item, adjusted by difficulty (0-1)
    difficulty_factor = 1 + max(0.0, min(1.0, avg_difficulty))
    total_seconds = item_count * seconds_per_item * difficulty_factor
    return max(1, round(total_seconds / 60))


def blend_weakness(previous: float, accuracy: float, weight: float = 0.3) -> float:
    """
    Move a category weakness (0-100) toward this session's error rate.
    """
    observed = (1 - accuracy) * 100
    return round((1 - weight) * previous + weight * observed, 1)
