"""
Unit tests for settings and logging setup.
"""

import io

import pytest
from loguru import logger

from kotoba_srs.config import Settings, get_settings
from kotoba_srs.logging_setup import configure_logging


@pytest.fixture
def fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestSettings:
    def test_defaults(self):
        settings = Settings()
        assert settings.sm2_initial_ease == 2.5
        assert settings.sm2_minimum_ease == 1.3
        assert settings.target_retention == 0.8
        assert settings.daily_review_target == 20
        assert settings.selector_weights.due_for_review == 0.30
        assert settings.predictor_weights.bias == 0.0

    def test_selector_weights_sum_to_one(self):
        w = Settings().selector_weights
        total = (
            w.due_for_review
            + w.user_weakness
            + w.curriculum_priority
            + w.variety_balance
            + w.novelty_preference
        )
        assert total == pytest.approx(1.0)

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("KOTOBA_SRS_DEFAULT_SESSION_SIZE", "12")
        monkeypatch.setenv("KOTOBA_SRS_PREDICTOR_WEIGHTS__BIAS", "1.5")

        settings = Settings()
        assert settings.default_session_size == 12
        assert settings.predictor_weights.bias == 1.5

    def test_get_settings_is_cached(self, fresh_settings):
        assert get_settings() is get_settings()


class TestLogging:
    def test_configure_logging_uses_project_format(self):
        sink = io.StringIO()
        handler_id = configure_logging(level="DEBUG", sink=sink)
        try:
            logger.debug("scheduler ready")
        finally:
            logger.remove(handler_id)

        output = sink.getvalue()
        assert "DEBUG" in output
        assert "scheduler ready" in output

    def test_level_filters_lower_messages(self):
        sink = io.StringIO()
        handler_id = configure_logging(level="WARNING", sink=sink)
        try:
            logger.info("hidden")
            logger.warning("shown")
        finally:
            logger.remove(handler_id)

        assert "hidden" not in sink.getvalue()
        assert "shown" in sink.getvalue()
