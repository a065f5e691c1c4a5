"""
Error taxonomy for the review engine.

All failures are synchronous and local to the call that raised them.
Nothing in this package retries.
"""

from __future__ import annotations


class KotobaSRSError(Exception):
    """Base class for review engine errors."""


class InvalidInput(KotobaSRSError, ValueError):
    """
    Raised for malformed caller data.

    Examples: quality outside 0-5, non-positive item counts, non-finite
    predictor features, content missing from the catalog. Treat as a data
    or programming error upstream, not as a transient condition.
    """


class SessionStateError(InvalidInput):
    """Raised when a session operation is invalid for the session's state."""


class NoEligibleItems(KotobaSRSError):
    """Raised when the candidate pool for a session is empty."""

    def __init__(self, user_id: str | None = None, message: str | None = None):
        self.user_id = user_id
        super().__init__(message or f"No eligible review items for user {user_id}")


class ConvergenceFallback(UserWarning):
    """
    Category for best-effort timing estimates.

    Never raised. The predictor logs it when its search ends without
    reaching the target retention and returns the bracket midpoint.
    """
