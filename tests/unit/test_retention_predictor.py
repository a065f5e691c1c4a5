"""
Unit tests for the RetentionPredictor.

Tests:
- Logistic output stays in [0, 1]
- Recall decays with elapsed time
- Timing search convergence and best-effort fallback
- Calibration hook
"""

import math

import pytest

from kotoba_srs.config import PredictorWeights
from kotoba_srs.core.errors import InvalidInput
from kotoba_srs.study.retention_predictor import RecallFeatures, RetentionPredictor, sigmoid


def features(**overrides):
    values = {
        "time_since_last_review": 3.0,
        "ease_factor": 2.5,
        "user_historical_accuracy": 0.9,
        "content_difficulty": 0.5,
        "daily_load_factor": 0.5,
    }
    values.update(overrides)
    return RecallFeatures(**values)


@pytest.fixture
def predictor():
    return RetentionPredictor(weights=PredictorWeights())


@pytest.fixture
def biased_predictor():
    """Predictor whose curve crosses 0.8 inside the search range."""
    return RetentionPredictor(weights=PredictorWeights(bias=2.0))


class TestPredictRecall:
    def test_zero_features_is_even_odds(self, predictor):
        zero = RecallFeatures(0.0, 0.0, 0.0, 0.0, 0.0)
        assert predictor.predict_recall(zero) == pytest.approx(0.5)

    def test_matches_logistic_of_weighted_sum(self, predictor):
        f = features()
        z = -0.05 * 3.0 + 0.3 * 2.5 + 0.4 * 0.9 - 0.2 * 0.5 - 0.1 * 0.5
        assert predictor.predict_recall(f) == pytest.approx(1 / (1 + math.exp(-z)))

    def test_recall_decays_over_time(self, predictor):
        probabilities = [
            predictor.predict_recall(features(time_since_last_review=days))
            for days in (0, 1, 7, 30, 180)
        ]
        assert probabilities == sorted(probabilities, reverse=True)

    @pytest.mark.parametrize(
        "values",
        [
            (1e308, 1e308, 1e308, 1e308, 1e308),
            (-1e308, -1e308, -1e308, -1e308, -1e308),
            (1e308, -1e308, 1e308, -1e308, 1e308),
            (0.0, 1e6, 0.0, 0.0, 0.0),
            (1e6, 0.0, 0.0, 0.0, 0.0),
        ],
    )
    def test_bounded_for_extreme_finite_inputs(self, predictor, values):
        p = predictor.predict_recall(RecallFeatures(*values))
        assert 0.0 <= p <= 1.0

    @pytest.mark.parametrize("bad", [math.nan, math.inf, -math.inf, "3", None])
    def test_rejects_malformed_features(self, predictor, bad):
        with pytest.raises(InvalidInput):
            predictor.predict_recall(features(time_since_last_review=bad))

    def test_sigmoid_handles_extremes(self):
        assert sigmoid(-1000) == pytest.approx(0.0)
        assert sigmoid(1000) == pytest.approx(1.0)
        assert sigmoid(math.nan) == 0.5


class TestRecommendTiming:
    def test_converges_near_target(self, biased_predictor):
        f = features()
        days = biased_predictor.recommend_timing(f, target_retention=0.8)

        # z = 2.96 - 0.05 t crosses logit(0.8) at t ≈ 31.5 days
        expected = (2.96 - math.log(0.8 / 0.2)) / 0.05
        assert days == pytest.approx(expected, abs=1.5)
        assert abs(biased_predictor.predict_recall(f.with_elapsed(days)) - 0.8) < 0.01

    def test_stays_within_search_bounds(self, biased_predictor):
        for target in (0.55, 0.7, 0.9, 0.95):
            days = biased_predictor.recommend_timing(features(), target_retention=target)
            assert 0.1 <= days <= 365

    def test_unreachable_target_falls_back_to_bracket_midpoint(self, predictor, log_messages):
        # Without a bias recall never reaches 0.8, so the bracket shrinks toward 0.1
        days = predictor.recommend_timing(features(), target_retention=0.8)

        assert 0.1 <= days < 0.2
        assert any("ConvergenceFallback" in m and "WARNING" in m for m in log_messages)

    def test_uses_configured_default_target(self, biased_predictor):
        assert biased_predictor.recommend_timing(features()) == pytest.approx(
            biased_predictor.recommend_timing(features(), target_retention=0.8)
        )

    @pytest.mark.parametrize("target", [0.0, 1.0, -0.2, 1.5])
    def test_rejects_invalid_target(self, predictor, target):
        with pytest.raises(InvalidInput):
            predictor.recommend_timing(features(), target_retention=target)


class TestUpdateModel:
    def test_update_does_not_change_predictions(self, predictor):
        f = features()
        before = predictor.predict_recall(f)
        predictor.update_model(f, was_recalled=False)
        assert predictor.predict_recall(f) == before

    def test_calibration_counts(self, predictor):
        f = features()
        predictor.update_model(f, was_recalled=True)
        predictor.update_model(f, was_recalled=True)
        predictor.update_model(f, was_recalled=False)

        stats = predictor.calibration()
        assert stats.observations == 3
        assert stats.recalls == 2
        assert stats.observed_rate == pytest.approx(2 / 3)
        assert stats.mean_predicted == pytest.approx(predictor.predict_recall(f))

    def test_empty_calibration(self, predictor):
        stats = predictor.calibration()
        assert stats.observations == 0
        assert stats.observed_rate == 0.0
