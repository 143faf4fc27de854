"""Session handling and record access checks shared by the services."""
import logging
from contextlib import contextmanager
from typing import Callable, Iterator, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from mediafriend_recommendation_service.domain import ActorRole, RecommendationRecord
from mediafriend_recommendation_service.errors import NotFound, PersistenceFailure, Unauthorized
from mediafriend_recommendation_service.repos import RecommendationRepository

logger = logging.getLogger(__name__)

SessionFactory = Callable[[], Session]


@contextmanager
def session_scope(
        session_factory: SessionFactory,
        action: str,
        record_id: Optional[str] = None
) -> Iterator[Session]:
    """
    Open a session for one user action and close it afterwards.

    Store errors are rolled back and re-raised as PersistenceFailure with the
    original exception chained.
    """
    db = session_factory()
    try:
        yield db
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Persistence failure during '{action}' (record: {record_id}): {e}")
        raise PersistenceFailure(
            f"Could not {action}",
            record_id=record_id,
            action=action
        ) from e
    finally:
        db.close()


def load_record_for_role(
        repo: RecommendationRepository,
        rec_id: str,
        actor_id: str,
        role: ActorRole,
        action: str
) -> RecommendationRecord:
    """
    Load a record the actor may act on in the given role.

    Raises:
        NotFound: id does not resolve, or the record is hidden for that role
        Unauthorized: actor does not hold the role on this record
    """
    row = repo.get(rec_id)
    if row is None:
        raise NotFound(f"Recommendation {rec_id} not found", record_id=rec_id, action=action)

    record = RecommendationRecord.from_row(row)
    if record.role_of(actor_id) is not role:
        raise Unauthorized(
            f"Only the {role.value} may {action}",
            record_id=rec_id,
            action=action
        )
    if not record.is_visible_to(role):
        raise NotFound(f"Recommendation {rec_id} not found", record_id=rec_id, action=action)

    return record


def reload_record(repo: RecommendationRepository, rec_id: str) -> RecommendationRecord:
    """Re-read a row after a patch so callers get the authoritative state."""
    repo.db.expire_all()
    row = repo.get(rec_id)
    if row is None:
        raise NotFound(f"Recommendation {rec_id} not found", record_id=rec_id)
    return RecommendationRecord.from_row(row)
