"""An item on a user's personal list (watchlist, music library, reading list, game library)."""
import uuid
from datetime import UTC, datetime

from sqlalchemy import JSON, Boolean, Column, DateTime, Float, Index, Integer, String

from mediafriend_recommendation_service.models.base import Base


class LibraryItem(Base):
    """Personal list entry.

    ``custom_order`` holds the user's manual position; NULL until the user
    first drags items while sorting by "custom".
    """

    __tablename__ = "library_items"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(64), nullable=False)
    domain = Column(String(20), nullable=False)

    external_id = Column(String(255), nullable=True)  # NULL for manual entries
    title = Column(String(500), nullable=False)
    media_type = Column(String(20), nullable=True)
    creator = Column(String(255), nullable=True)
    year = Column(Integer, nullable=True)
    genres = Column(JSON, nullable=True)
    rating = Column(Float, nullable=True)  # personal rating

    consumed = Column(Boolean, default=False, nullable=False)
    custom_order = Column(Integer, nullable=True)
    added_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    __table_args__ = (
        Index("idx_library_user_domain", "user_id", "domain"),
        Index("idx_library_custom_order", "user_id", "domain", "custom_order"),
    )

    def __repr__(self):
        return f"<LibraryItem(id='{self.id}', title='{self.title}', custom_order={self.custom_order})>"
