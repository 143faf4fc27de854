"""Detached, immutable views of persisted rows.

Services hand these out instead of ORM instances so callers can keep them
after the session closes, and so optimistic updates can be expressed with
``dataclasses.replace``.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from mediafriend_recommendation_service.domain.media import DomainAdapter, get_adapter
from mediafriend_recommendation_service.domain.status import ActorRole, RecommendationStatus


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def _render(item, adapter: DomainAdapter, names) -> Dict[str, Any]:
    """Wire dict of the named fields, read through the adapter."""
    data = {}
    for name in names:
        value = adapter.field(item, name)
        data[name] = _iso(value) if isinstance(value, datetime) else value
    return data


@dataclass(frozen=True)
class RecommendationRecord:
    id: str
    domain: str
    from_user_id: str
    to_user_id: str
    external_id: str
    title: str
    status: RecommendationStatus
    sent_at: datetime
    media_type: Optional[str] = None
    creator: Optional[str] = None
    year: Optional[int] = None
    genres: List[str] = field(default_factory=list)
    poster_url: Optional[str] = None
    overview: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)
    sent_message: Optional[str] = None
    comment: Optional[str] = None
    sender_comment: Optional[str] = None
    opened_at: Optional[datetime] = None
    consumed_at: Optional[datetime] = None
    hidden_for_sender: bool = False
    hidden_for_recipient: bool = False

    @classmethod
    def from_row(cls, row) -> "RecommendationRecord":
        """Build a record from a ``Recommendation`` ORM row."""
        return cls(
            id=row.id,
            domain=row.domain,
            from_user_id=row.from_user_id,
            to_user_id=row.to_user_id,
            external_id=row.external_id,
            title=row.title,
            status=RecommendationStatus(row.status),
            sent_at=row.sent_at,
            media_type=row.media_type,
            creator=row.creator,
            year=row.year,
            genres=list(row.genres or []),
            poster_url=row.poster_url,
            overview=row.overview,
            details=dict(row.details or {}),
            sent_message=row.sent_message,
            comment=row.comment,
            sender_comment=row.sender_comment,
            opened_at=row.opened_at,
            consumed_at=row.consumed_at,
            hidden_for_sender=bool(row.hidden_for_sender),
            hidden_for_recipient=bool(row.hidden_for_recipient),
        )

    @property
    def added_at(self) -> datetime:
        """Sort accessor shared with library items."""
        return self.sent_at

    @property
    def adapter(self) -> DomainAdapter:
        return get_adapter(self.domain)

    def role_of(self, user_id: str) -> Optional[ActorRole]:
        if user_id == self.to_user_id:
            return ActorRole.RECIPIENT
        if user_id == self.from_user_id:
            return ActorRole.SENDER
        return None

    def is_visible_to(self, role: ActorRole) -> bool:
        if role is ActorRole.RECIPIENT:
            return not self.hidden_for_recipient
        return not self.hidden_for_sender

    def to_dict(self) -> Dict[str, Any]:
        """Wire format using the domain's own labels."""
        adapter = self.adapter
        data = _render(self, adapter, (
            "id", "domain", "from_user_id", "to_user_id", "external_id", "media_type", "title",
            adapter.creator_label, "year", "genres", "poster_url", "overview", "details",
            "sent_message", "comment", "sender_comment", "sent_at", "opened_at",
            adapter.consumed_at_field,
        ))
        data["status"] = adapter.status_label(self.status)
        return data


@dataclass(frozen=True)
class LibraryEntry:
    id: str
    user_id: str
    domain: str
    title: str
    added_at: datetime
    external_id: Optional[str] = None
    media_type: Optional[str] = None
    creator: Optional[str] = None
    year: Optional[int] = None
    genres: List[str] = field(default_factory=list)
    rating: Optional[float] = None
    consumed: bool = False
    custom_order: Optional[int] = None

    @classmethod
    def from_row(cls, row) -> "LibraryEntry":
        """Build an entry from a ``LibraryItem`` ORM row."""
        return cls(
            id=row.id,
            user_id=row.user_id,
            domain=row.domain,
            title=row.title,
            added_at=row.added_at,
            external_id=row.external_id,
            media_type=row.media_type,
            creator=row.creator,
            year=row.year,
            genres=list(row.genres or []),
            rating=row.rating,
            consumed=bool(row.consumed),
            custom_order=row.custom_order,
        )

    def to_dict(self) -> Dict[str, Any]:
        adapter = get_adapter(self.domain)
        return _render(self, adapter, (
            "id", "domain", "external_id", "media_type", "title", adapter.creator_label,
            "year", "genres", "rating", adapter.consumed_label, "custom_order", "added_at",
        ))
