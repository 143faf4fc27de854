"""Repository for recommendation rows."""

import logging
from typing import Dict, List, Optional

from sqlalchemy import desc
from sqlalchemy.orm import Session

from mediafriend_recommendation_service.models import Recommendation

logger = logging.getLogger(__name__)


class RecommendationRepository:
    """
    Row-level access to recommendations.

    Reads are always filtered by one party (``to_user_id`` or
    ``from_user_id``) and exclude rows that party has hidden. Writes are
    partial field patches so concurrent edits of disjoint fields all survive.
    """

    def __init__(self, db: Session):
        self.db = db

    def insert(self, data: Dict) -> Recommendation:
        """
        Insert a new recommendation row.

        Args:
            data: Column values (from_user_id, to_user_id, domain, external_id, title, ...)

        Returns:
            The stored Recommendation
        """
        recommendation = Recommendation(**data)
        self.db.add(recommendation)
        self.db.commit()
        self.db.refresh(recommendation)

        logger.info(
            f"✓ Stored recommendation {recommendation.id} "
            f"({recommendation.from_user_id} -> {recommendation.to_user_id})"
        )
        return recommendation

    def get(self, rec_id: str) -> Optional[Recommendation]:
        """Get a recommendation by id, regardless of visibility."""
        return self.db.query(Recommendation).filter(Recommendation.id == rec_id).first()

    # noinspection PyTypeChecker
    def list_received(
            self,
            user_id: str,
            domain: Optional[str] = None,
            status: Optional[str] = None,
            from_user_id: Optional[str] = None
    ) -> List[Recommendation]:
        """
        Recommendations sent to a user that the user has not hidden.

        Args:
            user_id: Recipient id
            domain: Optional media domain filter
            status: Optional canonical status filter
            from_user_id: Optional sender filter (one friend's recommendations)

        Returns:
            Rows ordered newest first
        """
        query = self.db.query(Recommendation).filter(
            Recommendation.to_user_id == user_id,
            Recommendation.hidden_for_recipient.is_(False),
        )
        if domain is not None:
            query = query.filter(Recommendation.domain == domain)
        if status is not None:
            query = query.filter(Recommendation.status == status)
        if from_user_id is not None:
            query = query.filter(Recommendation.from_user_id == from_user_id)

        return query.order_by(desc(Recommendation.sent_at)).all()

    # noinspection PyTypeChecker
    def list_sent(
            self,
            user_id: str,
            domain: Optional[str] = None,
            status: Optional[str] = None,
            to_user_id: Optional[str] = None
    ) -> List[Recommendation]:
        """
        Recommendations a user sent and has not hidden.

        Args:
            user_id: Sender id
            domain: Optional media domain filter
            status: Optional canonical status filter
            to_user_id: Optional recipient filter

        Returns:
            Rows ordered newest first
        """
        query = self.db.query(Recommendation).filter(
            Recommendation.from_user_id == user_id,
            Recommendation.hidden_for_sender.is_(False),
        )
        if domain is not None:
            query = query.filter(Recommendation.domain == domain)
        if status is not None:
            query = query.filter(Recommendation.status == status)
        if to_user_id is not None:
            query = query.filter(Recommendation.to_user_id == to_user_id)

        return query.order_by(desc(Recommendation.sent_at)).all()

    def patch(self, rec_id: str, fields: Dict) -> bool:
        """
        Update only the given columns of one row.

        Args:
            rec_id: Recommendation id
            fields: Column name -> new value

        Returns:
            True if a row was updated, False if the id did not resolve
        """
        if not fields:
            return self.get(rec_id) is not None

        count = (
            self.db.query(Recommendation)
            .filter(Recommendation.id == rec_id)
            .update(fields, synchronize_session=False)
        )
        self.db.commit()

        logger.debug(f"Patched recommendation {rec_id}: {sorted(fields)}")
        return count > 0

    def delete(self, rec_id: str) -> bool:
        """
        Delete a recommendation row for both parties.

        Args:
            rec_id: Recommendation id

        Returns:
            True if deleted, False if not found
        """
        count = self.db.query(Recommendation).filter(Recommendation.id == rec_id).delete()
        self.db.commit()

        if count:
            logger.info(f"Deleted recommendation {rec_id}")
        return count > 0
