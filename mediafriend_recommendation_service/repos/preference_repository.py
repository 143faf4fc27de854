"""Repository for saved list view preferences."""

import logging
from typing import Dict, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from mediafriend_recommendation_service.models import ViewPreference

logger = logging.getLogger(__name__)


class PreferenceRepository:
    """
    Repository for view preference rows, keyed by view id.
    """

    def __init__(self, db: Session):
        self.db = db

    def get(self, view_id: str) -> Optional[ViewPreference]:
        """Get the preferences row of one view."""
        return self.db.query(ViewPreference).filter(ViewPreference.view_id == view_id).first()

    def upsert(self, view_id: str, fields: Dict) -> None:
        """
        Write one view's preferences, touching no other view's row.

        Args:
            view_id: View key
            fields: Column values (genre_filters, sort_by, items_per_page)
        """
        if self._patch(view_id, fields):
            return

        self.db.add(ViewPreference(view_id=view_id, **fields))
        try:
            self.db.commit()
        except IntegrityError:
            # Row was inserted by another writer after the patch above
            self.db.rollback()
            logger.debug(f"Preferences for {view_id} created concurrently, patching instead")
            self._patch(view_id, fields)

    def delete(self, view_id: str) -> bool:
        """
        Delete one view's preferences.

        Returns:
            True if a row was deleted
        """
        count = (
            self.db.query(ViewPreference)
            .filter(ViewPreference.view_id == view_id)
            .delete(synchronize_session=False)
        )
        self.db.commit()
        return count > 0

    def _patch(self, view_id: str, fields: Dict) -> bool:
        count = (
            self.db.query(ViewPreference)
            .filter(ViewPreference.view_id == view_id)
            .update(fields, synchronize_session=False)
        )
        self.db.commit()
        return count > 0
