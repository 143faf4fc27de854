"""
Screen state for a user's recommendations in one media domain.

Mutations are optimistic: the local record changes first, then the
authoritative record from the service replaces it, or the snapshot is put
back when the write fails. Nothing is retried automatically.
"""
import logging
import time
from dataclasses import dataclass, replace
from typing import Callable, Dict, List, Optional

from mediafriend_recommendation_service.config import get_search_debounce_ms
from mediafriend_recommendation_service.domain import (
    ActorRole,
    MediaDomain,
    RecommendationRecord,
    RecommendationStatus,
    RemovalOutcome,
    get_adapter,
)
from mediafriend_recommendation_service.errors import PersistenceFailure, RecommendationServiceError, ValidationError
from mediafriend_recommendation_service.listing import ListEngine, ListPage, TrailingDebouncer
from mediafriend_recommendation_service.services import RecommendationLifecycleService
from mediafriend_recommendation_service.services.comment_service import normalize_comment
from mediafriend_recommendation_service.services.summary_service import FriendSummary, summarize_by_friend

logger = logging.getLogger(__name__)

SAVE_FAILED_MESSAGE = "Couldn't save your changes. Please try again."
DELETE_FAILED_MESSAGE = "Couldn't remove this recommendation. Please try again."
GENERIC_FAILURE_MESSAGE = "Something went wrong. Please refresh and try again."


@dataclass(frozen=True)
class DeleteConfirmation:
    """Pending delete dialog. ``error`` is set when a confirmed delete failed."""
    record_id: str
    role: ActorRole
    title: str
    error: Optional[str] = None


class RecommendationsViewModel:
    """Received and sent recommendations for one user and domain."""

    def __init__(
            self,
            user_id: str,
            domain: MediaDomain | str,
            lifecycle: Optional[RecommendationLifecycleService] = None,
            store=None,
            debounce_ms: Optional[int] = None,
            clock: Callable[[], float] = time.monotonic
    ):
        """
        Args:
            user_id: Signed-in user
            domain: Media domain shown on this screen
            lifecycle: Lifecycle service (default uses the configured database)
            store: Preference store for the received list view
            debounce_ms: Search quiet period (from config if None)
            clock: Time source for the search debouncer
        """
        self.user_id = user_id
        self.adapter = get_adapter(domain)
        self.lifecycle = lifecycle or RecommendationLifecycleService()

        view_id = f"{user_id}:{self.adapter.domain.value}:recommendations"
        self.engine = ListEngine(self.adapter, view_id, store=store)
        wait = debounce_ms if debounce_ms is not None else get_search_debounce_ms()
        self.search = TrailingDebouncer(wait, self.engine.set_search_query, clock=clock)

        self._received: Dict[str, RecommendationRecord] = {}
        self._sent: Dict[str, RecommendationRecord] = {}
        self.toast: Optional[str] = None
        self.delete_confirmation: Optional[DeleteConfirmation] = None

    # ===== LOADING =====

    def load(self) -> None:
        """Replace local state with the current received and sent lists."""
        received = self.lifecycle.list_received(self.user_id, self.adapter.domain)
        sent = self.lifecycle.list_sent(self.user_id, self.adapter.domain)
        self._received = {record.id: record for record in received}
        self._sent = {record.id: record for record in sent}
        logger.debug(f"Loaded {len(received)} received and {len(sent)} sent for {self.user_id}")

    def received(self) -> List[RecommendationRecord]:
        return list(self._received.values())

    def sent(self) -> List[RecommendationRecord]:
        return list(self._sent.values())

    def received_page(self) -> ListPage:
        return self.engine.page(self.received())

    def friend_summaries(self) -> List[FriendSummary]:
        """Per-friend counts projected from the local received list."""
        return summarize_by_friend(self.received(), counterpart="from_user_id")

    def open(self, rec_id: str) -> Optional[RecommendationRecord]:
        """Record that the user viewed a received recommendation."""
        try:
            record = self.lifecycle.mark_opened(rec_id, self.user_id)
        except RecommendationServiceError as e:
            self._report(e)
            return None
        self._received[rec_id] = record
        return record

    # ===== OPTIMISTIC MUTATIONS =====

    def update_status(
            self,
            rec_id: str,
            status: RecommendationStatus | str,
            comment: Optional[str] = None
    ) -> bool:
        """
        Change status (and optionally the comment) of a received recommendation.

        Returns:
            True if the service accepted the write
        """
        snapshot = self._received.get(rec_id)
        if snapshot is None:
            return False

        try:
            changes = {"status": self.adapter.parse_status(status)}
            if comment is not None:
                changes["comment"] = normalize_comment(comment)
        except RecommendationServiceError as e:
            self._report(e)
            return False

        self._received[rec_id] = replace(snapshot, **changes)
        try:
            self._received[rec_id] = self.lifecycle.set_status(rec_id, self.user_id, changes["status"], comment)
        except RecommendationServiceError as e:
            self._received[rec_id] = snapshot
            self._report(e)
            return False
        return True

    def edit_comment(self, rec_id: str, text: Optional[str]) -> bool:
        """Edit the user's comment on a received recommendation."""
        return self._edit(self._received, rec_id, "comment", text, self.lifecycle.set_comment)

    def edit_sender_comment(self, rec_id: str, text: Optional[str]) -> bool:
        """Edit the user's comment on a recommendation they sent."""
        return self._edit(self._sent, rec_id, "sender_comment", text, self.lifecycle.set_sender_comment)

    def _edit(self, records: Dict, rec_id: str, field: str, text: Optional[str], write) -> bool:
        snapshot = records.get(rec_id)
        if snapshot is None:
            return False

        try:
            records[rec_id] = replace(snapshot, **{field: normalize_comment(text, field=field)})
            records[rec_id] = write(rec_id, self.user_id, text)
        except RecommendationServiceError as e:
            records[rec_id] = snapshot
            self._report(e)
            return False
        return True

    # ===== DELETE =====

    def request_delete(self, rec_id: str, role: ActorRole | str) -> Optional[DeleteConfirmation]:
        """Open the confirmation dialog for removing a record."""
        role = ActorRole(role)
        record = self._records_for(role).get(rec_id)
        if record is None:
            return None
        self.delete_confirmation = DeleteConfirmation(record_id=rec_id, role=role, title=record.title)
        return self.delete_confirmation

    def cancel_delete(self) -> None:
        self.delete_confirmation = None

    def confirm_delete(self) -> Optional[RemovalOutcome]:
        """
        Remove the record named by the open confirmation.

        The record disappears locally at once. On a persistence failure it
        is restored and the confirmation re-opens with an error message.
        """
        confirmation = self.delete_confirmation
        if confirmation is None:
            return None
        self.delete_confirmation = None

        records = self._records_for(confirmation.role)
        snapshot = records.pop(confirmation.record_id, None)
        try:
            outcome = self.lifecycle.remove(confirmation.record_id, self.user_id, confirmation.role)
        except PersistenceFailure as e:
            self._restore(records, snapshot)
            logger.warning(f"Delete failed, reopening confirmation: {e.context()}")
            self.delete_confirmation = replace(confirmation, error=DELETE_FAILED_MESSAGE)
            return None
        except RecommendationServiceError as e:
            self._restore(records, snapshot)
            self._report(e)
            return None

        if outcome is RemovalOutcome.UNSENT:
            # Unsent rows are gone for the recipient too
            self._received.pop(confirmation.record_id, None)
        return outcome

    def _records_for(self, role: ActorRole) -> Dict[str, RecommendationRecord]:
        return self._received if role is ActorRole.RECIPIENT else self._sent

    @staticmethod
    def _restore(records: Dict, snapshot: Optional[RecommendationRecord]) -> None:
        if snapshot is not None:
            records[snapshot.id] = snapshot

    # ===== SEARCH =====

    def type_search(self, text: str) -> None:
        """Queue a search query; it applies once typing pauses."""
        self.search.push(text)

    def tick(self) -> bool:
        """Advance the search debouncer. Returns True if a query was applied."""
        return self.search.poll()

    def flush_search(self) -> bool:
        return self.search.flush()

    # ===== FEEDBACK =====

    def dismiss_toast(self) -> None:
        self.toast = None

    def _report(self, error: RecommendationServiceError) -> None:
        if isinstance(error, PersistenceFailure):
            self.toast = SAVE_FAILED_MESSAGE
            logger.warning(f"Save failed: {error.context()}")
        elif isinstance(error, ValidationError):
            self.toast = error.message
        else:
            # Unauthorized / NotFound mean the screen is out of date
            self.toast = GENERIC_FAILURE_MESSAGE
            logger.error(f"{error.message}: {error.context()}")
