"""
Error taxonomy for the engagement and gamification engine.

The API layer maps these to HTTP status codes:
- AuthError -> 401
- NotFoundError -> 404
- PersistenceError -> 500
ValidationError never leaves the ingestion path; it is turned into a no-op success.
"""

from typing import Optional


class EngineError(Exception):
    """Base class for engine errors.

    Attributes:
        message: Error description.
        original_error: Underlying exception, if any.
    """

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        self.message = message
        self.original_error = original_error
        super().__init__(message)


class AuthError(EngineError):
    """Credential missing, expired, unresolvable, or not a learner."""


class ValidationError(EngineError):
    """Malformed engagement payload."""


class NotFoundError(EngineError):
    """Referenced material or course is unknown to the content directory."""


class PersistenceError(EngineError):
    """Datastore unavailable or a learner write could not be applied."""
