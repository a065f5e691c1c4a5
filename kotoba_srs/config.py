"""
Configuration settings for the kotoba-srs review engine.

Uses Pydantic Settings for environment variable management with .env file support.
Nested groups are set with a double underscore, e.g.
``KOTOBA_SRS_PREDICTOR_WEIGHTS__EASE_FACTOR=0.35``.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class PredictorWeights(BaseModel):
    """
    Signed weights of the recall model.

    Starting defaults, not a calibrated model.
    """

    time_since_last_review: float = -0.05
    ease_factor: float = 0.3
    user_historical_accuracy: float = 0.4
    content_difficulty: float = -0.2
    daily_load_factor: float = -0.1
    bias: float = 0.0


class SelectorWeights(BaseModel):
    """Weights of the five item-selection factors (sum to 1.0)."""

    due_for_review: float = 0.30
    user_weakness: float = 0.25
    curriculum_priority: float = 0.20
    variety_balance: float = 0.15
    novelty_preference: float = 0.10


class Settings(BaseSettings):
    """Engine settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="KOTOBA_SRS_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # SM-2 Scheduling
    # ========================================
    sm2_initial_ease: float = Field(
        default=2.5,
        description="Ease factor for newly added review items",
    )
    sm2_minimum_ease: float = Field(
        default=1.3,
        description="Floor for the ease factor",
    )
    sm2_first_interval: int = Field(
        default=1,
        description="Days until review after the first successful recall",
    )
    sm2_second_interval: int = Field(
        default=6,
        description="Days until review after the second successful recall",
    )

    # ========================================
    # Retention Prediction
    # ========================================
    predictor_weights: PredictorWeights = Field(default_factory=PredictorWeights)
    target_retention: float = Field(
        default=0.8,
        description="Recall probability the timing recommendation aims for",
    )
    timing_min_days: float = Field(default=0.1, description="Lower search bound (days)")
    timing_max_days: float = Field(default=365.0, description="Upper search bound (days)")
    timing_max_iterations: int = Field(default=20, description="Maximum bisection iterations")
    timing_tolerance: float = Field(
        default=0.01,
        description="Convergence tolerance on predicted recall",
    )

    # ========================================
    # Item Selection
    # ========================================
    selector_weights: SelectorWeights = Field(default_factory=SelectorWeights)
    default_category_weakness: float = Field(
        default=50.0,
        description="Weakness (0-100) assumed for categories without profile data",
    )
    default_session_size: int = Field(default=20, description="Items per session")

    # ========================================
    # Difficulty & Pacing
    # ========================================
    session_factor_min: float = Field(default=0.7)
    session_factor_max: float = Field(default=1.3)
    daily_review_target: int = Field(
        default=20,
        description="Daily review goal; drives the predictor's load feature",
    )
    expected_response_ms: int = Field(
        default=10000,
        description="Response time treated as normal when deriving quality",
    )
    seconds_per_item: int = Field(
        default=30,
        description="Base study time per item for session estimates",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: Literal["TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR"] = Field(
        default="INFO",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
