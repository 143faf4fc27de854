"""A single recommendation shared between sender and recipient."""
import uuid
from datetime import UTC, datetime

from sqlalchemy import JSON, Boolean, CheckConstraint, Column, DateTime, Index, Integer, String, Text

from mediafriend_recommendation_service.models.base import Base


class Recommendation(Base):
    """One row per recommendation.

    Both parties read this same row: the recipient through
    ``to_user_id = me`` and the sender through ``from_user_id = me``.
    Each side can hide the row from its own view with its hidden flag.
    """

    __tablename__ = "recommendations"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    domain = Column(String(20), nullable=False)

    # Parties
    from_user_id = Column(String(64), nullable=False)
    to_user_id = Column(String(64), nullable=False)

    # Media information (from the catalog search result)
    external_id = Column(String(255), nullable=False)
    media_type = Column(String(20), nullable=True)  # movie, tv, song, album, book, game
    title = Column(String(500), nullable=False)
    creator = Column(String(255), nullable=True)  # director, artist, author, developer
    year = Column(Integer, nullable=True)
    genres = Column(JSON, nullable=True)
    poster_url = Column(String(1000), nullable=True)
    overview = Column(Text, nullable=True)
    details = Column(JSON, nullable=True)

    # Lifecycle
    status = Column(String(20), nullable=False, default="pending")
    sent_message = Column(Text, nullable=True)
    comment = Column(Text, nullable=True)  # recipient
    sender_comment = Column(Text, nullable=True)

    sent_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)
    opened_at = Column(DateTime, nullable=True)
    consumed_at = Column(DateTime, nullable=True)

    # Per-party visibility
    hidden_for_sender = Column(Boolean, default=False, nullable=False)
    hidden_for_recipient = Column(Boolean, default=False, nullable=False)

    __table_args__ = (
        CheckConstraint("from_user_id != to_user_id", name="ck_recommendation_distinct_parties"),
        Index("idx_recs_to_user", "to_user_id", "domain", "status"),
        Index("idx_recs_from_user", "from_user_id", "domain"),
        Index("idx_recs_sent_at", "sent_at"),
    )

    def __repr__(self):
        return (
            f"<Recommendation(id='{self.id}', domain='{self.domain}', "
            f"title='{self.title}', status='{self.status}')>"
        )
