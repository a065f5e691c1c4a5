"""
Session Module - Study session orchestration.

- coordinator: SessionCoordinator (build, respond, end)
- state: StudySession and its result types
- metrics: retention score and study-time estimates
"""

from kotoba_srs.session.coordinator import SessionCoordinator
from kotoba_srs.session.state import (
    ResponseFeedback,
    ResponseOutcome,
    SessionStats,
    SessionStatus,
    SessionSummary,
    StudySession,
)

__all__ = [
    "SessionCoordinator",
    "StudySession",
    "SessionStatus",
    "SessionStats",
    "ResponseFeedback",
    "ResponseOutcome",
    "SessionSummary",
]
