"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests,
including in-memory stand-ins for the catalog, performance store and
learner profile collaborators.
"""
import sys
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from kotoba_srs.core.models import (  # noqa: E402
    CatalogEntry,
    ContentType,
    PerformanceRecord,
    ReviewItem,
    UserLearningState,
)


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Session flow tests with in-memory collaborators")
    config.addinivalue_line("markers", "slow: Slow tests")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)


# =============================================================================
# In-memory collaborators
# =============================================================================


class InMemoryCatalog:
    """Catalog backed by a list, preserving insertion order."""

    def __init__(self, entries=None):
        self.entries = list(entries or [])
        self.lookups = 0

    def get_entry(self, content_type, content_id):
        self.lookups += 1
        for entry in self.entries:
            if entry.content_type == content_type and entry.content_id == content_id:
                return entry
        return None

    def list_entries(self, content_types=None):
        if content_types is None:
            return list(self.entries)
        wanted = set(content_types)
        return [e for e in self.entries if e.content_type in wanted]


class InMemoryStore:
    """Review and performance state keyed by (user, type, id)."""

    def __init__(self):
        self.review_items = {}
        self.performance = {}

    def add_review_item(self, item):
        self.review_items[(item.user_id, item.content_type, item.content_id)] = item

    def add_performance(self, record):
        self.performance[(record.user_id, record.content_type, record.content_id)] = record

    def get_review_item(self, user_id, content_type, content_id):
        return self.review_items.get((user_id, content_type, content_id))

    def get_performance(self, user_id, content_type, content_id):
        return self.performance.get((user_id, content_type, content_id))


class InMemoryProfile:
    """Learner states keyed by user id."""

    def __init__(self, states=None):
        self.states = dict(states or {})

    def get_learning_state(self, user_id):
        return self.states.get(user_id) or UserLearningState(user_id=user_id)


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def now():
    """Fixed reference time for deterministic scheduling."""
    return datetime(2026, 3, 1, 9, 0, tzinfo=UTC)


@pytest.fixture
def catalog_entries():
    """A small mixed catalog of kana, vocabulary and grammar."""
    return [
        CatalogEntry(ContentType.CHARACTER, 1, base_difficulty=20, frequency_rank=10, curriculum_priority=70, jlpt_level=5),
        CatalogEntry(ContentType.CHARACTER, 2, base_difficulty=25, frequency_rank=40, curriculum_priority=60, jlpt_level=5),
        CatalogEntry(ContentType.CHARACTER, 3, base_difficulty=60, frequency_rank=900, prerequisite_ids=(1, 2), jlpt_level=3),
        CatalogEntry(ContentType.WORD, 10, base_difficulty=35, frequency_rank=120, prerequisite_ids=(1,), jlpt_level=5),
        CatalogEntry(ContentType.WORD, 11, base_difficulty=45, frequency_rank=800, jlpt_level=4),
        CatalogEntry(ContentType.WORD, 12, base_difficulty=70, frequency_rank=4000, jlpt_level=2),
        CatalogEntry(ContentType.GRAMMAR, 20, base_difficulty=50, curriculum_priority=80, jlpt_level=5),
        CatalogEntry(ContentType.GRAMMAR, 21, base_difficulty=75, prerequisite_ids=(20,), jlpt_level=3),
    ]


@pytest.fixture
def catalog(catalog_entries):
    return InMemoryCatalog(catalog_entries)


@pytest.fixture
def store(now):
    """Store with one due character, one far-off word and their history."""
    store = InMemoryStore()
    store.add_review_item(
        ReviewItem(
            user_id="learner-1",
            content_type=ContentType.CHARACTER,
            content_id=1,
            ease_factor=2.5,
            interval=6,
            repetitions=2,
            next_review_at=now - timedelta(days=2),
            last_reviewed_at=now - timedelta(days=8),
        )
    )
    store.add_performance(
        PerformanceRecord(
            user_id="learner-1",
            content_type=ContentType.CHARACTER,
            content_id=1,
            attempts=9,
            correct_attempts=9,
            avg_response_time_ms=1000.0,
            last_attempt_at=now - timedelta(days=8),
        )
    )
    store.add_review_item(
        ReviewItem(
            user_id="learner-1",
            content_type=ContentType.WORD,
            content_id=10,
            ease_factor=2.7,
            interval=30,
            repetitions=4,
            next_review_at=now + timedelta(days=40),
            last_reviewed_at=now - timedelta(days=1),
        )
    )
    return store


@pytest.fixture
def user_state():
    """Learner who is weakest at grammar."""
    return UserLearningState(
        user_id="learner-1",
        accuracy_rate=0.82,
        weakness_by_category={
            ContentType.CHARACTER: 30.0,
            ContentType.WORD: 60.0,
            ContentType.GRAMMAR: 75.0,
        },
        recent_items=((ContentType.WORD, 11), (ContentType.WORD, 12)),
        prefer_novelty=False,
        current_streak=4,
    )


@pytest.fixture
def profile(user_state):
    return InMemoryProfile({user_state.user_id: user_state})


@pytest.fixture
def log_messages():
    """Capture loguru output for assertions."""
    from loguru import logger

    messages = []
    handler_id = logger.add(messages.append, level="DEBUG", format="{level} | {message}")
    yield messages
    logger.remove(handler_id)
