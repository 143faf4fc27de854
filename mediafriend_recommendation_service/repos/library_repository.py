"""Repository for personal library items."""

import logging
from typing import Dict, List, Optional

from sqlalchemy import desc, func
from sqlalchemy.orm import Session

from mediafriend_recommendation_service.models import LibraryItem

logger = logging.getLogger(__name__)


class LibraryRepository:
    """
    Repository for a user's personal media lists.
    """

    def __init__(self, db: Session):
        self.db = db

    def add(self, data: Dict) -> LibraryItem:
        """
        Add an item to a user's list.

        Args:
            data: Column values (user_id, domain, title, ...)

        Returns:
            LibraryItem object
        """
        item = LibraryItem(**data)
        self.db.add(item)
        self.db.commit()
        self.db.refresh(item)
        return item

    def get(self, item_id: str) -> Optional[LibraryItem]:
        """Get a library item by id."""
        return self.db.query(LibraryItem).filter(LibraryItem.id == item_id).first()

    # noinspection PyTypeChecker
    def list_for_user(self, user_id: str, domain: str) -> List[LibraryItem]:
        """Get all items on a user's list for one domain, newest first."""
        return (
            self.db.query(LibraryItem)
            .filter(LibraryItem.user_id == user_id, LibraryItem.domain == domain)
            .order_by(desc(LibraryItem.added_at))
            .all()
        )

    def find_by_external_id(self, user_id: str, domain: str, external_id: str) -> Optional[LibraryItem]:
        """Find an existing catalog item on the user's list."""
        return (
            self.db.query(LibraryItem)
            .filter(
                LibraryItem.user_id == user_id,
                LibraryItem.domain == domain,
                LibraryItem.external_id == external_id,
            )
            .first()
        )

    def patch(self, item_id: str, fields: Dict) -> bool:
        """
        Update only the given columns of one item.

        Returns:
            True if a row was updated
        """
        count = (
            self.db.query(LibraryItem)
            .filter(LibraryItem.id == item_id)
            .update(fields, synchronize_session=False)
        )
        self.db.commit()
        return count > 0

    def apply_custom_order(self, user_id: str, updates: Dict[str, int]) -> int:
        """
        Persist new custom_order values for the given items.

        Args:
            user_id: Owner of the items (rows of other users are never touched)
            updates: Item id -> new custom_order

        Returns:
            Number of rows updated
        """
        count = 0
        for item_id, order in updates.items():
            count += (
                self.db.query(LibraryItem)
                .filter(LibraryItem.id == item_id, LibraryItem.user_id == user_id)
                .update({LibraryItem.custom_order: order}, synchronize_session=False)
            )
        self.db.commit()

        logger.info(f"✓ Updated custom order for {count} items")
        return count

    def max_custom_order(self, user_id: str, domain: str) -> int:
        """Highest custom_order on a user's list (0 if none is set)."""
        value = (
            self.db.query(func.max(LibraryItem.custom_order))
            .filter(LibraryItem.user_id == user_id, LibraryItem.domain == domain)
            .scalar()
        )
        return value or 0

    def delete(self, item_id: str) -> bool:
        """
        Delete a library item.

        Returns:
            True if deleted, False if not found
        """
        count = self.db.query(LibraryItem).filter(LibraryItem.id == item_id).delete()
        self.db.commit()

        return count > 0
