"""
Difficulty Adjuster.

Turns rolling accuracy and response times into difficulty signals:
- Per-item difficulty delta (raise challenge when strong, ease off when weak)
- Time-pressure delta (from response time against the learner's average)
- Session-level multiplier for pacing the whole session
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass

from loguru import logger

from kotoba_srs.config import get_settings
from kotoba_srs.core.errors import InvalidInput
from kotoba_srs.core.models import ReviewItem

MAX_INCREASE = 0.30
MAX_DECREASE = -0.40


@dataclass(frozen=True)
class PerformanceSample:
    """Accuracy and timing observed for an item."""

    accuracy: float  # 0-1
    response_time_ms: float
    prior_avg_response_time_ms: float | None = None

    @property
    def time_ratio(self) -> float | None:
        """Response time relative to the prior average, if one exists."""
        if not self.prior_avg_response_time_ms or self.prior_avg_response_time_ms <= 0:
            return None
        return self.response_time_ms / self.prior_avg_response_time_ms


@dataclass(frozen=True)
class DifficultyAdjustment:
    """Signals produced for one response."""

    difficulty_delta: float
    time_pressure_delta: float

    @property
    def direction(self) -> str:
        if self.difficulty_delta > 0:
            return "increase"
        if self.difficulty_delta < 0:
            return "decrease"
        return "hold"


class DifficultyAdjuster:
    """
    Calibrates challenge from performance.

    Thresholds:
    - accuracy >= 0.9: eligible for an increase (capped at +0.30)
    - accuracy <= 0.5: eligible for a decrease (capped at -0.40)
    - in between: hold
    """

    HIGH_ACCURACY = 0.9
    VERY_HIGH_ACCURACY = 0.95
    LOW_ACCURACY = 0.5
    VERY_LOW_ACCURACY = 0.3

    FAST_RATIO = 0.7
    SLOW_RATIO = 1.5

    PRESSURE_SLOW_RATIO = 2.0
    PRESSURE_FAST_RATIO = 0.5
    PRESSURE_STEP = 0.1

    SESSION_HIGH_ACCURACY = 0.9
    SESSION_LOW_ACCURACY = 0.6

    def __init__(self, session_min: float | None = None, session_max: float | None = None):
        settings = get_settings()
        self.session_min = settings.session_factor_min if session_min is None else session_min
        self.session_max = settings.session_factor_max if session_max is None else session_max

    def adjust(self, item: ReviewItem | None, sample: PerformanceSample) -> DifficultyAdjustment:
        """
        Compute difficulty and time-pressure deltas for an item.

        Args:
            item: Review state of the item (used for logging only)
            sample: Observed accuracy and timing

        Returns:
            DifficultyAdjustment with delta in [-0.40, +0.30]
        """
        self._validate(sample)
        ratio = sample.time_ratio

        delta = 0.0
        if sample.accuracy >= self.HIGH_ACCURACY:
            delta = 0.10
            if sample.accuracy > self.VERY_HIGH_ACCURACY:
                delta += 0.05
            if ratio is not None and ratio < self.FAST_RATIO:
                delta += 0.05
            delta = min(delta, MAX_INCREASE)
        elif sample.accuracy <= self.LOW_ACCURACY:
            delta = -0.15
            if sample.accuracy < self.VERY_LOW_ACCURACY:
                delta -= 0.10
            if ratio is not None and ratio > self.SLOW_RATIO:
                delta -= 0.10
            delta = max(delta, MAX_DECREASE)

        pressure = 0.0
        if ratio is not None:
            if ratio > self.PRESSURE_SLOW_RATIO:
                pressure = -self.PRESSURE_STEP  # Struggling - ease off
            elif ratio < self.PRESSURE_FAST_RATIO:
                pressure = self.PRESSURE_STEP  # Quick - add challenge

        adjustment = DifficultyAdjustment(
            difficulty_delta=round(delta, 4),
            time_pressure_delta=pressure,
        )

        if item is not None and adjustment.difficulty_delta:
            logger.debug(
                f"Difficulty {adjustment.direction} for {item.content_type.value}:"
                f"{item.content_id}: delta={adjustment.difficulty_delta:+.2f}, "
                f"accuracy={sample.accuracy:.2f}"
            )

        return adjustment

    def adjust_session_difficulty(
        self,
        recent_samples: Iterable[PerformanceSample | float],
        current_factor: float = 1.0,
    ) -> float:
        """
        Session-level difficulty multiplier.

        Args:
            recent_samples: Samples (or bare accuracies) from the session
            current_factor: Factor in effect before these samples

        Returns:
            Factor clamped to [session_min, session_max]
        """
        accuracies = [
            s.accuracy if isinstance(s, PerformanceSample) else float(s)
            for s in recent_samples
        ]
        if not accuracies:
            return self._clamp(current_factor)

        for value in accuracies:
            if not math.isfinite(value) or not 0.0 <= value <= 1.0:
                raise InvalidInput(f"Accuracy must be in [0, 1], got {value}")

        mean_accuracy = sum(accuracies) / len(accuracies)
        if mean_accuracy > self.SESSION_HIGH_ACCURACY:
            factor = current_factor * 1.1
        elif mean_accuracy < self.SESSION_LOW_ACCURACY:
            factor = current_factor * 0.9
        else:
            factor = current_factor

        return self._clamp(factor)

    def _clamp(self, factor: float) -> float:
        return max(self.session_min, min(self.session_max, factor))

    @staticmethod
    def _validate(sample: PerformanceSample) -> None:
        if not math.isfinite(sample.accuracy) or not 0.0 <= sample.accuracy <= 1.0:
            raise InvalidInput(f"Accuracy must be in [0, 1], got {sample.accuracy}")
        if not math.isfinite(sample.response_time_ms) or sample.response_time_ms < 0:
            raise InvalidInput(
                f"Response time must be a non-negative number, got {sample.response_time_ms}"
            )
