"""Recommendation lifecycle: send, open, status changes and per-party removal."""
import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Dict, Iterable, List, Optional

from mediafriend_recommendation_service.domain import (
    ActorRole,
    MediaDomain,
    RecommendationRecord,
    RecommendationStatus,
    RemovalOutcome,
    get_adapter,
)
from mediafriend_recommendation_service.domain.media import parse_genres, parse_year
from mediafriend_recommendation_service.errors import NotFound, PersistenceFailure, ValidationError
from mediafriend_recommendation_service.models.database import SessionLocal
from mediafriend_recommendation_service.repos import RecommendationRepository
from mediafriend_recommendation_service.services.base import (
    SessionFactory,
    load_record_for_role,
    reload_record,
    session_scope,
)
from mediafriend_recommendation_service.services.comment_service import CommentService, normalize_comment

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(UTC)


@dataclass
class SendResult:
    """Outcome of sending one item to several friends (one row per friend)."""
    sent: List[RecommendationRecord] = field(default_factory=list)
    failed: Dict[str, str] = field(default_factory=dict)

    @property
    def all_sent(self) -> bool:
        return not self.failed


class RecommendationLifecycleService:
    """
    Lifecycle of a recommendation shared by sender and recipient.

    Status moves pending -> consumed -> hit/miss, but any status the
    recipient writes is accepted, so hit and miss can be revised later.
    Only the recipient changes status or marks a record opened; only the
    sender edits the sender comment. Removal depends on who removes:

    - recipient: hidden from the recipient only
    - sender, never opened: deleted for both (unsend)
    - sender, already opened: hidden from the sender only

    A row both parties have hidden is deleted.
    """

    def __init__(
            self,
            session_factory: Optional[SessionFactory] = None,
            comments: Optional[CommentService] = None
    ):
        self.session_factory = session_factory or SessionLocal
        self.comments = comments or CommentService(self.session_factory)

    # ===== READS =====

    def list_received(
            self,
            user_id: str,
            domain: MediaDomain | str,
            status: Optional[str] = None,
            friend_id: Optional[str] = None
    ) -> List[RecommendationRecord]:
        """Recommendations sent to the user, optionally by status or sender."""
        adapter = get_adapter(domain)
        canonical = adapter.parse_status(status).value if status else None

        with session_scope(self.session_factory, "list received recommendations") as db:
            rows = RecommendationRepository(db).list_received(
                user_id,
                domain=adapter.domain.value,
                status=canonical,
                from_user_id=friend_id
            )
            return [RecommendationRecord.from_row(row) for row in rows]

    def list_sent(
            self,
            user_id: str,
            domain: MediaDomain | str,
            status: Optional[str] = None
    ) -> List[RecommendationRecord]:
        """Recommendations the user sent and still shows in the sent list."""
        adapter = get_adapter(domain)
        canonical = adapter.parse_status(status).value if status else None

        with session_scope(self.session_factory, "list sent recommendations") as db:
            rows = RecommendationRepository(db).list_sent(
                user_id,
                domain=adapter.domain.value,
                status=canonical
            )
            return [RecommendationRecord.from_row(row) for row in rows]

    def get(self, rec_id: str, actor_id: str) -> RecommendationRecord:
        """Get a record as seen by either party."""
        with session_scope(self.session_factory, "view recommendation", rec_id) as db:
            row = RecommendationRepository(db).get(rec_id)
            record = RecommendationRecord.from_row(row) if row is not None else None

        role = record.role_of(actor_id) if record else None
        if record is None or role is None or not record.is_visible_to(role):
            raise NotFound(f"Recommendation {rec_id} not found", record_id=rec_id, action="view")
        return record

    # ===== SEND =====

    def send(
            self,
            from_user_id: str,
            to_user_ids: Iterable[str],
            domain: MediaDomain | str,
            item: Dict,
            message: Optional[str] = None
    ) -> SendResult:
        """
        Send one catalog item to one or more friends.

        Each friend gets an independent row; a failure for one friend does
        not undo the rows already written for others.

        Args:
            from_user_id: Sender
            to_user_ids: Recipients
            domain: Media domain of the item
            item: Search result (external_id, title, media_type, creator/artist/..., year, genres, ...)
            message: Optional note shown to the recipient, fixed once sent

        Returns:
            SendResult with stored records and per-friend failure reasons

        Raises:
            ValidationError: item or recipient list is invalid
        """
        adapter = get_adapter(domain)
        recipients = list(dict.fromkeys(to_user_ids))
        if not recipients:
            raise ValidationError("Choose at least one friend", field="to_user_ids", action="send")

        base = self._build_row(adapter, item)
        base["from_user_id"] = from_user_id
        base["sent_message"] = normalize_comment(message, field="sent_message")

        result = SendResult()
        for to_user_id in recipients:
            if to_user_id == from_user_id:
                result.failed[to_user_id] = "Cannot recommend to yourself"
                continue
            try:
                with session_scope(self.session_factory, "send recommendation") as db:
                    row = RecommendationRepository(db).insert({
                        **base,
                        "to_user_id": to_user_id,
                        "status": RecommendationStatus.PENDING.value,
                        "sent_at": _now(),
                    })
                    result.sent.append(RecommendationRecord.from_row(row))
            except PersistenceFailure as e:
                result.failed[to_user_id] = e.message

        logger.info(
            f"✓ Sent '{base['title']}' from {from_user_id} to {len(result.sent)} friends "
            f"({len(result.failed)} failed)"
        )
        return result

    def _build_row(self, adapter, item: Dict) -> Dict:
        title = (item.get("title") or "").strip()
        if not title:
            raise ValidationError("Title is required", field="title", action="send")

        external_id = str(item.get("external_id") or "").strip()
        if not external_id:
            raise ValidationError("external_id is required", field="external_id", action="send")

        media_type = item.get("media_type") or adapter.media_types[0]
        if media_type not in adapter.media_types:
            raise ValidationError(
                f"media_type must be one of {list(adapter.media_types)}",
                field="media_type",
                action="send"
            )

        year = parse_year(item.get("year"), action="send")
        genres = parse_genres(item.get("genres"), action="send")

        return {
            "domain": adapter.domain.value,
            "external_id": external_id,
            "media_type": media_type,
            "title": title,
            "creator": item.get("creator") or item.get(adapter.creator_label),
            "year": year,
            "genres": genres or None,
            "poster_url": item.get("poster_url"),
            "overview": item.get("overview") or item.get("description"),
            "details": item.get("details"),
        }

    # ===== RECIPIENT ACTIONS =====

    def mark_opened(self, rec_id: str, actor_id: str) -> RecommendationRecord:
        """Stamp opened_at the first time the recipient views the record."""
        action = "mark opened"
        with session_scope(self.session_factory, action, rec_id) as db:
            repo = RecommendationRepository(db)
            record = load_record_for_role(repo, rec_id, actor_id, ActorRole.RECIPIENT, action)
            if record.opened_at is not None:
                return record

            repo.patch(rec_id, {"opened_at": _now()})
            return reload_record(repo, rec_id)

    def set_status(
            self,
            rec_id: str,
            actor_id: str,
            new_status: RecommendationStatus | str,
            comment: Optional[str] = None
    ) -> RecommendationRecord:
        """
        Write a new status, optionally with the recipient's comment.

        consumed_at is stamped only the first time the record leaves
        pending; moving back to pending clears it. When new_status equals
        the current status only the comment is written.

        Args:
            rec_id: Recommendation id
            actor_id: Must be the recipient
            new_status: Canonical status or the domain's consumed label
            comment: When given, replaces the recipient comment (blank clears it)

        Returns:
            The authoritative record after the write
        """
        action = "set status"
        with session_scope(self.session_factory, action, rec_id) as db:
            repo = RecommendationRepository(db)
            record = load_record_for_role(repo, rec_id, actor_id, ActorRole.RECIPIENT, action)
            status = record.adapter.parse_status(new_status)

            fields: Dict = {}
            if status is not record.status:
                fields["status"] = status.value
                if status is RecommendationStatus.PENDING:
                    fields["consumed_at"] = None
                elif record.consumed_at is None:
                    fields["consumed_at"] = _now()
            if comment is not None:
                fields["comment"] = normalize_comment(comment)

            repo.patch(rec_id, fields)
            updated = reload_record(repo, rec_id)

        logger.info(f"✓ {rec_id}: {record.status.value} -> {updated.status.value}")
        return updated

    def set_comment(self, rec_id: str, actor_id: str, text: Optional[str]) -> RecommendationRecord:
        """Recipient comment without touching status."""
        return self.comments.set_comment(rec_id, actor_id, text)

    # ===== SENDER ACTIONS =====

    def set_sender_comment(self, rec_id: str, actor_id: str, text: Optional[str]) -> RecommendationRecord:
        """Sender comment; independent of status."""
        return self.comments.set_sender_comment(rec_id, actor_id, text)

    # ===== REMOVAL =====

    def remove(self, rec_id: str, actor_id: str, role: ActorRole | str) -> RemovalOutcome:
        """
        Remove a record from the actor's view.

        Args:
            rec_id: Recommendation id
            actor_id: Acting user
            role: Role the actor is removing in (sender or recipient)

        Returns:
            What happened to the row
        """
        role = ActorRole(role)
        action = f"remove as {role.value}"

        with session_scope(self.session_factory, action, rec_id) as db:
            repo = RecommendationRepository(db)
            record = load_record_for_role(repo, rec_id, actor_id, role, action)

            if role is ActorRole.SENDER and record.opened_at is None:
                repo.delete(rec_id)
                outcome = RemovalOutcome.UNSENT
            elif role is ActorRole.SENDER:
                if record.hidden_for_recipient:
                    repo.delete(rec_id)
                    outcome = RemovalOutcome.PURGED
                else:
                    repo.patch(rec_id, {"hidden_for_sender": True})
                    outcome = RemovalOutcome.HIDDEN_FOR_SENDER
            else:
                if record.hidden_for_sender:
                    repo.delete(rec_id)
                    outcome = RemovalOutcome.PURGED
                else:
                    repo.patch(rec_id, {"hidden_for_recipient": True})
                    outcome = RemovalOutcome.HIDDEN_FOR_RECIPIENT

        logger.info(f"✓ {rec_id} removed by {role.value} {actor_id}: {outcome.value}")
        return outcome
