"""
Unit tests for DifficultyAdjuster.

Focused on threshold boundaries, caps and the session multiplier.
"""

import pytest

from kotoba_srs.core.errors import InvalidInput
from kotoba_srs.study.difficulty import DifficultyAdjuster, PerformanceSample


@pytest.fixture
def adjuster():
    return DifficultyAdjuster(session_min=0.7, session_max=1.3)


class TestItemAdjustment:
    def test_strong_and_fast_gets_full_increase(self, adjuster):
        result = adjuster.adjust(None, PerformanceSample(1.0, 400, 1000))
        assert result.difficulty_delta == pytest.approx(0.20)
        assert result.time_pressure_delta == pytest.approx(0.1)
        assert result.direction == "increase"

    def test_high_accuracy_boundary_is_inclusive(self, adjuster):
        result = adjuster.adjust(None, PerformanceSample(0.9, 1000, None))
        assert result.difficulty_delta == pytest.approx(0.10)

    def test_very_high_accuracy_bonus(self, adjuster):
        result = adjuster.adjust(None, PerformanceSample(0.96, 1000, 1000))
        assert result.difficulty_delta == pytest.approx(0.15)

    def test_weak_and_slow_gets_full_decrease(self, adjuster):
        result = adjuster.adjust(None, PerformanceSample(0.2, 3000, 1000))
        assert result.difficulty_delta == pytest.approx(-0.35)
        assert result.time_pressure_delta == pytest.approx(-0.1)
        assert result.direction == "decrease"

    def test_low_accuracy_boundary_is_inclusive(self, adjuster):
        result = adjuster.adjust(None, PerformanceSample(0.5, 1000, 1000))
        assert result.difficulty_delta == pytest.approx(-0.15)

    @pytest.mark.parametrize("accuracy", [0.51, 0.7, 0.89])
    def test_middle_band_holds(self, adjuster, accuracy):
        result = adjuster.adjust(None, PerformanceSample(accuracy, 100, 1000))
        assert result.difficulty_delta == 0.0
        assert result.direction == "hold"

    def test_no_prior_average_skips_time_signals(self, adjuster):
        result = adjuster.adjust(None, PerformanceSample(0.2, 90000, None))
        assert result.difficulty_delta == pytest.approx(-0.25)
        assert result.time_pressure_delta == 0.0

    @pytest.mark.parametrize(
        "response_ms,expected",
        [(2500, -0.1), (2000, 0.0), (1000, 0.0), (500, 0.0), (400, 0.1)],
    )
    def test_time_pressure(self, adjuster, response_ms, expected):
        result = adjuster.adjust(None, PerformanceSample(0.7, response_ms, 1000))
        assert result.time_pressure_delta == pytest.approx(expected)

    @pytest.mark.parametrize("accuracy", [0.0, 0.1, 0.29, 0.3, 0.5, 0.6, 0.9, 0.95, 0.96, 1.0])
    @pytest.mark.parametrize("response_ms", [0, 100, 699, 1000, 1501, 5000])
    def test_delta_always_within_caps(self, adjuster, accuracy, response_ms):
        result = adjuster.adjust(None, PerformanceSample(accuracy, response_ms, 1000))
        assert -0.40 <= result.difficulty_delta <= 0.30

    @pytest.mark.parametrize(
        "sample",
        [
            PerformanceSample(1.2, 1000, 1000),
            PerformanceSample(-0.1, 1000, 1000),
            PerformanceSample(0.5, -1, 1000),
            PerformanceSample(float("nan"), 1000, 1000),
        ],
    )
    def test_rejects_invalid_sample(self, adjuster, sample):
        with pytest.raises(InvalidInput):
            adjuster.adjust(None, sample)


class TestSessionDifficulty:
    def test_strong_session_raises_factor(self, adjuster):
        assert adjuster.adjust_session_difficulty([1.0, 1.0, 1.0, 1.0, 1.0]) == pytest.approx(1.1)

    def test_weak_session_lowers_factor(self, adjuster):
        assert adjuster.adjust_session_difficulty([0.0, 1.0, 0.0]) == pytest.approx(0.9)

    def test_steady_session_keeps_factor(self, adjuster):
        assert adjuster.adjust_session_difficulty([1.0, 0.5, 0.75], current_factor=1.2) == pytest.approx(1.2)

    def test_factor_clamped(self, adjuster):
        assert adjuster.adjust_session_difficulty([1.0], current_factor=1.25) == pytest.approx(1.3)
        assert adjuster.adjust_session_difficulty([0.0], current_factor=0.75) == pytest.approx(0.7)

    def test_accepts_samples(self, adjuster):
        samples = [PerformanceSample(0.95, 1000, 1000), PerformanceSample(0.99, 900, 1000)]
        assert adjuster.adjust_session_difficulty(samples) == pytest.approx(1.1)

    def test_no_samples_keeps_current(self, adjuster):
        assert adjuster.adjust_session_difficulty([], current_factor=0.8) == pytest.approx(0.8)

    def test_rejects_out_of_range_accuracy(self, adjuster):
        with pytest.raises(InvalidInput):
            adjuster.adjust_session_difficulty([1.4])
