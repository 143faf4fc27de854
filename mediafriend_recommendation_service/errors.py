"""
Error taxonomy for recommendation lifecycle and list operations.

Unauthorized and NotFound indicate a caller bug (wrong actor, stale id);
ValidationError rejects bad input; PersistenceFailure wraps anything the
backing store raised. HTTP_STATUS maps each category for the blueprints.
"""
from typing import Optional


class RecommendationServiceError(Exception):
    """Base class for all service errors."""

    def __init__(
            self,
            message: str,
            record_id: Optional[str] = None,
            action: Optional[str] = None
    ):
        super().__init__(message)
        self.message = message
        self.record_id = record_id
        self.action = action

    def context(self) -> dict:
        """Structured context for log lines."""
        return {"record_id": self.record_id, "action": self.action, "error": type(self).__name__}


class Unauthorized(RecommendationServiceError):
    """Actor does not hold the role an operation requires."""


class NotFound(RecommendationServiceError):
    """Record id does not resolve, or the record is hidden for the actor."""


class ValidationError(RecommendationServiceError):
    """Input failed validation (missing title, self-recommendation, bad status...)."""

    def __init__(self, message: str, field: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.field = field


class PersistenceFailure(RecommendationServiceError):
    """The backing store failed; the cause is chained via __cause__."""


HTTP_STATUS = {
    Unauthorized: 403,
    NotFound: 404,
    ValidationError: 400,
    PersistenceFailure: 503,
}


def status_code_for(exc: RecommendationServiceError) -> int:
    """Return the HTTP status code for a service error (500 if unmapped)."""
    for error_type, status_code in HTTP_STATUS.items():
        if isinstance(exc, error_type):
            return status_code
    return 500
