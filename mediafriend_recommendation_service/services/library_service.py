"""Personal media lists: add, toggle consumed, remove, list and reorder."""
import logging
from typing import Dict, List, Optional

from mediafriend_recommendation_service.domain import LibraryEntry, MediaDomain, get_adapter
from mediafriend_recommendation_service.domain.media import parse_genres, parse_rating, parse_year
from mediafriend_recommendation_service.errors import NotFound, ValidationError
from mediafriend_recommendation_service.listing import DropPosition, ListEngine, ListPage, ReorderEngine, ReorderIntent
from mediafriend_recommendation_service.models.database import SessionLocal
from mediafriend_recommendation_service.repos import LibraryRepository
from mediafriend_recommendation_service.services.base import SessionFactory, session_scope

logger = logging.getLogger(__name__)


def library_view_id(user_id: str, domain: MediaDomain | str) -> str:
    """Preference key of a user's list view for one domain."""
    return f"{user_id}:{get_adapter(domain).domain.value}:library"


class LibraryService:
    """Service for a user's personal lists in every media domain."""

    def __init__(self, session_factory: Optional[SessionFactory] = None):
        self.session_factory = session_factory or SessionLocal

    def engine_for(self, user_id: str, domain: MediaDomain | str, store=None) -> ListEngine:
        """List engine for the user's list view, with its saved preferences."""
        return ListEngine(get_adapter(domain), library_view_id(user_id, domain), store=store)

    def add_item(self, user_id: str, domain: MediaDomain | str, item: Dict) -> LibraryEntry:
        """
        Add an item to the user's list.

        Args:
            user_id: Owner
            domain: Media domain
            item: title, external_id, media_type, creator (or domain label), year, genres, rating

        Returns:
            The stored entry, placed last in custom order

        Raises:
            ValidationError: missing title, malformed year/rating/genres, or item already on the list
        """
        adapter = get_adapter(domain)
        title = (item.get("title") or "").strip()
        if not title:
            raise ValidationError("Title is required", field="title", action="add to list")

        external_id = item.get("external_id")
        external_id = str(external_id) if external_id not in (None, "") else None
        year = parse_year(item.get("year"), action="add to list")
        rating = parse_rating(item.get("rating"), action="add to list")
        genres = sorted({g.lower() for g in parse_genres(item.get("genres"), action="add to list")})

        with session_scope(self.session_factory, "add to list") as db:
            repo = LibraryRepository(db)
            if external_id and repo.find_by_external_id(user_id, adapter.domain.value, external_id):
                raise ValidationError(
                    f"'{title}' is already on your list",
                    field="external_id",
                    action="add to list"
                )

            row = repo.add({
                "user_id": user_id,
                "domain": adapter.domain.value,
                "external_id": external_id,
                "title": title,
                "media_type": item.get("media_type"),
                "creator": item.get("creator") or item.get(adapter.creator_label),
                "year": year,
                "genres": genres or None,
                "rating": rating,
                "custom_order": repo.max_custom_order(user_id, adapter.domain.value) + 1,
            })
            entry = LibraryEntry.from_row(row)

        logger.info(f"✓ Added '{title}' to {entry.domain} list of {user_id}")
        return entry

    def list_items(self, user_id: str, domain: MediaDomain | str) -> List[LibraryEntry]:
        """All items on the user's list, newest first."""
        adapter = get_adapter(domain)
        with session_scope(self.session_factory, "list library") as db:
            rows = LibraryRepository(db).list_for_user(user_id, adapter.domain.value)
            return [LibraryEntry.from_row(row) for row in rows]

    def toggle_consumed(self, item_id: str, user_id: str) -> LibraryEntry:
        """Flip the watched/listened/read/played flag."""
        action = "toggle consumed"
        with session_scope(self.session_factory, action, item_id) as db:
            repo = LibraryRepository(db)
            entry = self._load_owned(repo, item_id, user_id, action)
            repo.patch(item_id, {"consumed": not entry.consumed})
            db.expire_all()
            return LibraryEntry.from_row(repo.get(item_id))

    def remove_item(self, item_id: str, user_id: str) -> bool:
        action = "remove from list"
        with session_scope(self.session_factory, action, item_id) as db:
            repo = LibraryRepository(db)
            self._load_owned(repo, item_id, user_id, action)
            deleted = repo.delete(item_id)

        logger.info(f"✓ Removed {item_id} from list of {user_id}")
        return deleted

    def page(self, user_id: str, domain: MediaDomain | str, engine: ListEngine) -> ListPage:
        """Current page of the user's list under the engine's view state."""
        return engine.page(self.list_items(user_id, domain))

    def reorder(
            self,
            user_id: str,
            domain: MediaDomain | str,
            engine: ListEngine,
            source_id: str,
            target_id: str,
            position: DropPosition | str = DropPosition.BEFORE
    ) -> ReorderIntent:
        """
        Drag one item next to another and persist the changed custom_order values.

        Returns:
            The applied ReorderIntent
        """
        items = self.list_items(user_id, domain)
        intent = ReorderEngine(engine).move(items, source_id, target_id, position)

        if not intent.is_noop:
            with session_scope(self.session_factory, "reorder", source_id) as db:
                LibraryRepository(db).apply_custom_order(user_id, intent.updates)

        return intent

    @staticmethod
    def _load_owned(repo: LibraryRepository, item_id: str, user_id: str, action: str) -> LibraryEntry:
        row = repo.get(item_id)
        # Items of other users are reported as missing
        if row is None or row.user_id != user_id:
            raise NotFound(f"Library item {item_id} not found", record_id=item_id, action=action)
        return LibraryEntry.from_row(row)
