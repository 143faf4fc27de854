"""Per-friend and dashboard counts, always projected from the live collection."""
import logging
from dataclasses import asdict, dataclass
from typing import Dict, List, Optional, Sequence

import pandas as pd

from mediafriend_recommendation_service.domain import MediaDomain, RecommendationRecord, RecommendationStatus
from mediafriend_recommendation_service.services.lifecycle_service import RecommendationLifecycleService

logger = logging.getLogger(__name__)

_STATUS_COLUMNS = [status.value for status in RecommendationStatus]


@dataclass(frozen=True)
class FriendSummary:
    user_id: str
    pending_count: int
    consumed_count: int
    hit_count: int
    miss_count: int
    total_count: int

    def to_dict(self) -> Dict:
        return asdict(self)


@dataclass(frozen=True)
class QuickStats:
    hits: int
    misses: int
    queue: int
    consumed: int
    sent: int

    def to_dict(self) -> Dict:
        return asdict(self)


def _status_frame(records: Sequence[RecommendationRecord], counterpart: str) -> pd.DataFrame:
    return pd.DataFrame(
        {
            "friend": [getattr(r, counterpart) for r in records],
            "status": [RecommendationStatus(r.status).value for r in records],
        }
    )


def summarize_by_friend(
        records: Sequence[RecommendationRecord],
        counterpart: str = "from_user_id"
) -> List[FriendSummary]:
    """
    Count statuses per counterpart.

    Args:
        records: Records of one direction (received or sent)
        counterpart: "from_user_id" for received lists, "to_user_id" for sent lists

    Returns:
        One summary per friend, most recommendations first
    """
    if not records:
        return []

    frame = _status_frame(records, counterpart)
    counts = pd.crosstab(frame["friend"], frame["status"])
    counts = counts.reindex(columns=_STATUS_COLUMNS, fill_value=0)
    counts["total"] = counts.sum(axis=1)
    counts = counts.sort_values("total", ascending=False, kind="stable")

    return [
        FriendSummary(
            user_id=str(friend),
            pending_count=int(row[RecommendationStatus.PENDING.value]),
            consumed_count=int(row[RecommendationStatus.CONSUMED.value]),
            hit_count=int(row[RecommendationStatus.HIT.value]),
            miss_count=int(row[RecommendationStatus.MISS.value]),
            total_count=int(row["total"]),
        )
        for friend, row in counts.iterrows()
    ]


def quick_stats(
        received: Sequence[RecommendationRecord],
        sent: Sequence[RecommendationRecord]
) -> QuickStats:
    """Dashboard tiles: hits, misses, queue (pending), consumed and sent."""
    if received:
        by_status = _status_frame(received, "from_user_id")["status"].value_counts()
    else:
        by_status = pd.Series(dtype="int64")

    def count(status: RecommendationStatus) -> int:
        return int(by_status.get(status.value, 0))

    return QuickStats(
        hits=count(RecommendationStatus.HIT),
        misses=count(RecommendationStatus.MISS),
        queue=count(RecommendationStatus.PENDING),
        consumed=count(RecommendationStatus.CONSUMED),
        sent=len(sent),
    )


class RecommendationSummaryService:
    """Reads the live collections and projects summaries; nothing is stored."""

    def __init__(self, lifecycle: Optional[RecommendationLifecycleService] = None):
        self.lifecycle = lifecycle or RecommendationLifecycleService()

    def friend_summaries(self, user_id: str, domain: MediaDomain | str) -> List[FriendSummary]:
        """Summaries of what each friend has sent to the user."""
        received = self.lifecycle.list_received(user_id, domain)
        summaries = summarize_by_friend(received, counterpart="from_user_id")
        logger.debug(f"Computed {len(summaries)} friend summaries for {user_id}")
        return summaries

    def recipient_summaries(self, user_id: str, domain: MediaDomain | str) -> List[FriendSummary]:
        """Summaries of how each friend responded to what the user sent."""
        sent = self.lifecycle.list_sent(user_id, domain)
        return summarize_by_friend(sent, counterpart="to_user_id")

    def quick_stats(self, user_id: str, domain: MediaDomain | str) -> QuickStats:
        received = self.lifecycle.list_received(user_id, domain)
        sent = self.lifecycle.list_sent(user_id, domain)
        return quick_stats(received, sent)
