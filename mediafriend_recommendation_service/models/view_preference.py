"""Saved list view preferences, one row per view."""
from datetime import UTC, datetime

from sqlalchemy import JSON, Column, DateTime, Integer, String

from mediafriend_recommendation_service.models.base import Base


class ViewPreference(Base):
    """Genre filters, sort and page size of one list view.

    ``view_id`` is ``<user_id>:<domain>:library``. Search text is never stored.
    """

    __tablename__ = "view_preferences"

    view_id = Column(String(255), primary_key=True)
    genre_filters = Column(JSON, nullable=True)
    sort_by = Column(String(50), nullable=True)
    items_per_page = Column(Integer, nullable=True)
    updated_at = Column(
        DateTime,
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        nullable=False
    )

    def __repr__(self):
        return f"<ViewPreference(view_id='{self.view_id}', sort_by='{self.sort_by}')>"
