"""
Study Module - Review scheduling and learner signals.

Provides:
- SM-2 scheduling (SM2Scheduler)
- Recall probability and review timing (RetentionPredictor)
- Difficulty calibration (DifficultyAdjuster)
- Running performance counts (record_attempt)
"""

from kotoba_srs.study.difficulty import (
    DifficultyAdjuster,
    DifficultyAdjustment,
    PerformanceSample,
)
from kotoba_srs.study.performance import (
    new_performance_record,
    record_attempt,
    timing_consistency,
)
from kotoba_srs.study.retention_predictor import (
    CalibrationStats,
    RecallFeatures,
    RetentionPredictor,
)
from kotoba_srs.study.scheduler import SM2Config, SM2Scheduler, ScheduleResult, due_items

__all__ = [
    "SM2Config",
    "SM2Scheduler",
    "ScheduleResult",
    "due_items",
    "RetentionPredictor",
    "RecallFeatures",
    "CalibrationStats",
    "DifficultyAdjuster",
    "DifficultyAdjustment",
    "PerformanceSample",
    "new_performance_record",
    "record_attempt",
    "timing_consistency",
]
