"""Store for list view preferences (genre filters, sort, page size)."""

import logging
import threading
from typing import Dict

from sqlalchemy.exc import SQLAlchemyError

from mediafriend_recommendation_service.listing.view_state import ViewPreferences
from mediafriend_recommendation_service.models.database import SessionLocal
from mediafriend_recommendation_service.repos import PreferenceRepository

logger = logging.getLogger(__name__)


class PreferenceStore:
    """
    View preferences stored as one ``view_preferences`` row per view id.

    Reads never raise: a missing row or a database error yields the caller's
    defaults. Writes report success as a bool so a failed save never breaks
    the list view. Each save writes only its own view's row, so saves for
    different views never overwrite each other.
    """

    def __init__(self, session_factory=None):
        """
        Initialize the preference store.

        Args:
            session_factory: Session factory (SessionLocal if None)
        """
        self.session_factory = session_factory or SessionLocal
        # Serializes writes from the threads of one worker
        self._lock = threading.Lock()

    def load(self, view_id: str, defaults: ViewPreferences) -> ViewPreferences:
        """
        Load a view's preferences.

        Args:
            view_id: View key
            defaults: Returned (field by field) for anything missing or malformed

        Returns:
            ViewPreferences
        """
        db = self.session_factory()
        try:
            row = PreferenceRepository(db).get(view_id)
            data = _row_to_dict(row) if row is not None else None
        except SQLAlchemyError as e:
            logger.warning(f"Could not read preferences for {view_id}: {e}")
            return defaults
        finally:
            db.close()
        return ViewPreferences.from_dict(data, defaults)

    def save(self, view_id: str, prefs: ViewPreferences) -> bool:
        """
        Save a view's preferences.

        Returns:
            True if written
        """
        fields = {
            "genre_filters": list(prefs.genre_filters),
            "sort_by": prefs.sort_by,
            "items_per_page": prefs.items_per_page,
        }
        with self._lock:
            db = self.session_factory()
            try:
                PreferenceRepository(db).upsert(view_id, fields)
            except SQLAlchemyError as e:
                db.rollback()
                logger.error(f"Failed to save preferences for {view_id}: {e}")
                return False
            finally:
                db.close()

        logger.debug(f"✓ Saved preferences for {view_id}")
        return True

    def reset(self, view_id: str) -> bool:
        """
        Forget a view's preferences.

        Returns:
            True if a row was removed
        """
        with self._lock:
            db = self.session_factory()
            try:
                return PreferenceRepository(db).delete(view_id)
            except SQLAlchemyError as e:
                db.rollback()
                logger.error(f"Failed to reset preferences for {view_id}: {e}")
                return False
            finally:
                db.close()


def _row_to_dict(row) -> Dict:
    return {
        "genreFilters": row.genre_filters,
        "sortBy": row.sort_by,
        "itemsPerPage": row.items_per_page,
    }
