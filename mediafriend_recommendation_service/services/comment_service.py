"""Recipient and sender notes on a recommendation."""
import logging
from typing import Optional

from mediafriend_recommendation_service.domain import ActorRole, RecommendationRecord
from mediafriend_recommendation_service.errors import ValidationError
from mediafriend_recommendation_service.models.database import SessionLocal
from mediafriend_recommendation_service.repos import RecommendationRepository
from mediafriend_recommendation_service.services.base import (
    SessionFactory,
    load_record_for_role,
    reload_record,
    session_scope,
)

logger = logging.getLogger(__name__)

MAX_COMMENT_LENGTH = 2000


def normalize_comment(text: Optional[str], field: str = "comment") -> Optional[str]:
    """
    Strip a comment; blank text clears the field.

    Raises:
        ValidationError: text longer than MAX_COMMENT_LENGTH
    """
    if text is None:
        return None
    cleaned = text.strip()
    if len(cleaned) > MAX_COMMENT_LENGTH:
        raise ValidationError(
            f"{field} must be at most {MAX_COMMENT_LENGTH} characters",
            field=field
        )
    return cleaned or None


class CommentService:
    """
    Writes the recipient's ``comment`` and the sender's ``sender_comment``.

    Each party owns exactly one field, and neither write touches status.
    ``sent_message`` is fixed at send time and has no setter.
    """

    def __init__(self, session_factory: Optional[SessionFactory] = None):
        self.session_factory = session_factory or SessionLocal

    def set_comment(self, rec_id: str, actor_id: str, text: Optional[str]) -> RecommendationRecord:
        """Set the recipient's comment."""
        return self._write(rec_id, actor_id, ActorRole.RECIPIENT, "comment", text)

    def set_sender_comment(self, rec_id: str, actor_id: str, text: Optional[str]) -> RecommendationRecord:
        """Set the sender's comment."""
        return self._write(rec_id, actor_id, ActorRole.SENDER, "sender_comment", text)

    def _write(
            self,
            rec_id: str,
            actor_id: str,
            role: ActorRole,
            field: str,
            text: Optional[str]
    ) -> RecommendationRecord:
        action = f"edit {field}"
        value = normalize_comment(text, field=field)

        with session_scope(self.session_factory, action, rec_id) as db:
            repo = RecommendationRepository(db)
            load_record_for_role(repo, rec_id, actor_id, role, action)
            repo.patch(rec_id, {field: value})
            record = reload_record(repo, rec_id)

        logger.info(f"✓ {role.value} {actor_id} updated {field} on {rec_id}")
        return record
