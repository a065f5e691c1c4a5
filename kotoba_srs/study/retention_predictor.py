"""
Retention Predictor - Probability of Recall.

Logistic model over five review features:
- time since last review (days)
- ease factor
- learner's historical accuracy
- content difficulty (0-1)
- daily load (0-1)

The weights are a configurable starting point, not a trained model. The
``update_model`` hook only gathers calibration counts so a future offline
retraining job has something to compare against.
"""

from __future__ import annotations

import math
import threading
from dataclasses import dataclass, fields

from loguru import logger

from kotoba_srs.config import PredictorWeights, get_settings
from kotoba_srs.core.errors import ConvergenceFallback, InvalidInput


@dataclass(frozen=True)
class RecallFeatures:
    """Inputs to the recall model."""

    time_since_last_review: float  # Days
    ease_factor: float
    user_historical_accuracy: float  # 0-1
    content_difficulty: float  # 0-1
    daily_load_factor: float  # 0-1

    def validate(self) -> RecallFeatures:
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise InvalidInput(f"Feature {f.name} must be numeric, got {value!r}")
            if not math.isfinite(value):
                raise InvalidInput(f"Feature {f.name} must be finite, got {value}")
        return self

    def with_elapsed(self, days: float) -> RecallFeatures:
        return RecallFeatures(
            time_since_last_review=days,
            ease_factor=self.ease_factor,
            user_historical_accuracy=self.user_historical_accuracy,
            content_difficulty=self.content_difficulty,
            daily_load_factor=self.daily_load_factor,
        )


@dataclass(frozen=True)
class CalibrationStats:
    """Observed recall versus predicted recall."""

    observations: int
    recalls: int
    mean_predicted: float

    @property
    def observed_rate(self) -> float:
        if self.observations == 0:
            return 0.0
        return self.recalls / self.observations

    @property
    def calibration_gap(self) -> float:
        """Observed minus predicted recall rate."""
        return self.observed_rate - self.mean_predicted


def sigmoid(z: float) -> float:
    """Logistic function that stays in [0, 1] for any finite input."""
    if math.isnan(z):
        return 0.5
    if z >= 0:
        return 1.0 / (1.0 + math.exp(-z))
    ez = math.exp(z)
    return ez / (1.0 + ez)


class RetentionPredictor:
    """
    Estimates recall probability and recommends review timing.

    Thread-safe: the only mutable state is the calibration counters.
    """

    def __init__(
        self,
        weights: PredictorWeights | None = None,
        min_days: float | None = None,
        max_days: float | None = None,
        max_iterations: int | None = None,
        tolerance: float | None = None,
    ):
        settings = get_settings()
        self.weights = weights or settings.predictor_weights
        self.min_days = settings.timing_min_days if min_days is None else min_days
        self.max_days = settings.timing_max_days if max_days is None else max_days
        self.max_iterations = (
            settings.timing_max_iterations if max_iterations is None else max_iterations
        )
        self.tolerance = settings.timing_tolerance if tolerance is None else tolerance
        self.default_target = settings.target_retention

        self._lock = threading.Lock()
        self._observations = 0
        self._recalls = 0
        self._predicted_sum = 0.0

    def predict_recall(self, features: RecallFeatures) -> float:
        """
        Probability (0-1) that the learner recalls the item.

        Raises:
            InvalidInput: a feature is missing, non-numeric or non-finite
        """
        features.validate()
        w = self.weights
        z = (
            w.bias
            + w.time_since_last_review * features.time_since_last_review
            + w.ease_factor * features.ease_factor
            + w.user_historical_accuracy * features.user_historical_accuracy
            + w.content_difficulty * features.content_difficulty
            + w.daily_load_factor * features.daily_load_factor
        )
        return sigmoid(z)

    def recommend_timing(
        self,
        features: RecallFeatures,
        target_retention: float | None = None,
    ) -> float:
        """
        Days until predicted recall falls to the target retention.

        Bisects over [min_days, max_days]. If the iterations run out before the
        prediction is within tolerance of the target, the midpoint of the
        final bracket is returned as a best-effort estimate.

        Args:
            features: Current review features (elapsed time is ignored)
            target_retention: Desired recall probability (defaults to settings)

        Returns:
            Recommended interval in days
        """
        target = self.default_target if target_retention is None else target_retention
        if not 0.0 < target < 1.0:
            raise InvalidInput(f"Target retention must be in (0, 1), got {target}")
        features.validate()

        low, high = self.min_days, self.max_days
        for iteration in range(1, self.max_iterations + 1):
            mid = (low + high) / 2
            predicted = self.predict_recall(features.with_elapsed(mid))

            if abs(predicted - target) < self.tolerance:
                logger.debug(
                    f"Timing converged after {iteration} iterations: {mid:.2f}d "
                    f"(p={predicted:.3f}, target={target})"
                )
                return mid

            # Recall decays with elapsed time: above target means wait longer
            if predicted > target:
                low = mid
            else:
                high = mid

        estimate = (low + high) / 2
        logger.warning(
            f"{ConvergenceFallback.__name__}: no interval within {self.tolerance} of "
            f"target {target} after {self.max_iterations} iterations; "
            f"using {estimate:.2f}d"
        )
        return estimate

    def update_model(self, features: RecallFeatures, was_recalled: bool) -> None:
        """
        Record an observed outcome.

        Weights are not changed online; the counters feed ``calibration()``.
        """
        predicted = self.predict_recall(features)
        with self._lock:
            self._observations += 1
            self._recalls += int(bool(was_recalled))
            self._predicted_sum += predicted

        logger.debug(f"Recall observation: predicted={predicted:.3f}, recalled={was_recalled}")

    def calibration(self) -> CalibrationStats:
        """Snapshot of observed versus predicted recall."""
        with self._lock:
            mean = self._predicted_sum / self._observations if self._observations else 0.0
            return CalibrationStats(
                observations=self._observations,
                recalls=self._recalls,
                mean_predicted=mean,
            )
