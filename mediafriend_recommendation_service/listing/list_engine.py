"""
Generic list engine: filter -> sort -> paginate.

One engine instance backs one list view (a view id such as
``"u1:books:library"``). It loads that view's saved preferences at mount,
writes them back on every preference change, and never persists the search
text. The same engine serves every media domain through its
``DomainAdapter``.
"""
import logging
import math
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

from mediafriend_recommendation_service.config import get_default_items_per_page
from mediafriend_recommendation_service.domain import ALL_GENRES, DomainAdapter
from mediafriend_recommendation_service.errors import ValidationError
from mediafriend_recommendation_service.listing.view_state import ListViewState, ViewPreferences

logger = logging.getLogger(__name__)


def total_pages_for(count: int, items_per_page: int) -> int:
    """max(1, ceil(count / items_per_page))"""
    return max(1, math.ceil(count / items_per_page))


def clamp_page(page: int, total_pages: int) -> int:
    return min(max(1, page), total_pages)


@dataclass(frozen=True)
class ListPage:
    items: List[Any]
    total_items: int
    current_page: int
    total_pages: int
    items_per_page: int

    @property
    def has_next_page(self) -> bool:
        return self.current_page < self.total_pages

    @property
    def has_prev_page(self) -> bool:
        return self.current_page > 1

    def to_dict(self, serialize: Callable[[Any], Dict]) -> Dict:
        return {
            "items": [serialize(item) for item in self.items],
            "total_items": self.total_items,
            "current_page": self.current_page,
            "total_pages": self.total_pages,
            "items_per_page": self.items_per_page,
        }


class ListEngine:
    """Turns a raw collection plus the view state into one page, deterministically."""

    def __init__(
            self,
            adapter: DomainAdapter,
            view_id: str,
            store=None,
            defaults: Optional[ViewPreferences] = None
    ):
        """
        Args:
            adapter: Domain adapter supplying predicates and the sort table
            view_id: Key under which this view's preferences are stored
            store: Preference store (anything with load/save/reset); None keeps state in memory
            defaults: Preferences used when nothing is stored
        """
        self.adapter = adapter
        self.view_id = view_id
        self.store = store
        self.defaults = defaults or ViewPreferences(
            sort_by=adapter.default_sort,
            items_per_page=get_default_items_per_page(),
        )

        prefs = store.load(view_id, self.defaults) if store is not None else self.defaults
        if prefs.sort_by not in adapter.sort_ids:
            logger.warning(f"Ignoring unknown stored sort '{prefs.sort_by}' for view {view_id}")
            prefs = ViewPreferences(prefs.genre_filters, adapter.default_sort, prefs.items_per_page)

        self.state = ListViewState.from_preferences(prefs)
        self._last_filtered_count: Optional[int] = None
        self._last_total_pages = 1

    # ===== STATE CHANGES =====

    def set_genre_filters(self, genre_filters: Iterable[str]) -> None:
        """Replace the active genre selection; an empty selection means all genres."""
        cleaned = [g.strip().lower() for g in genre_filters if g and g.strip()]
        self.state.genre_filters = cleaned or [ALL_GENRES]
        self._persist()

    def toggle_genre(self, genre: str) -> None:
        """
        Multi-select toggle: choosing "all" clears the others, choosing a
        genre drops "all", and removing the last genre falls back to "all".
        """
        genre = genre.strip().lower()
        current = [g for g in self.state.genre_filters if g != ALL_GENRES]

        if genre == ALL_GENRES:
            selected = []
        elif genre in current:
            selected = [g for g in current if g != genre]
        else:
            selected = current + [genre]

        self.set_genre_filters(selected)

    def set_sort(self, sort_by: str) -> None:
        if sort_by not in self.adapter.sort_ids:
            raise ValidationError(
                f"Unknown sort '{sort_by}' for {self.adapter.domain.value}",
                field="sort_by"
            )
        self.state.sort_by = sort_by
        self._persist()

    def set_items_per_page(self, items_per_page: int) -> None:
        """Change page size; always returns to page 1."""
        if items_per_page < 1:
            raise ValidationError("items_per_page must be at least 1", field="items_per_page")
        self.state.items_per_page = items_per_page
        self.state.current_page = 1
        self._persist()

    def set_search_query(self, query: str) -> None:
        """Free-text search; lives only for this visit."""
        self.state.search_query = query or ""

    def go_to_page(self, page: int) -> int:
        """
        Move to a page, clamped to the page count of the last computed page.
        Before the first page is computed only the lower bound applies;
        page() clamps the rest.
        """
        if self._last_filtered_count is None:
            self.state.current_page = max(1, page)
        else:
            self.state.current_page = clamp_page(page, self._last_total_pages)
        return self.state.current_page

    def reset(self) -> None:
        """Back to defaults and forget the stored preferences."""
        self.state = ListViewState.from_preferences(self.defaults)
        self._last_filtered_count = None
        self._last_total_pages = 1
        if self.store is not None:
            self.store.reset(self.view_id)

    def _persist(self) -> None:
        if self.store is not None:
            self.store.save(self.view_id, self.state.preferences())

    # ===== PIPELINE =====

    def apply_filters(self, items: Iterable) -> List:
        """Domain genre predicate AND free-text predicate."""
        genre_filters = self.state.genre_filters
        query = self.state.search_query
        return [
            item for item in items
            if self.adapter.matches_genres(item, genre_filters)
            and self.adapter.matches_search(item, query)
        ]

    def arrange(self, items: Iterable) -> List:
        """The full filtered and sorted collection (no pagination)."""
        return self.adapter.sort_items(self.apply_filters(items), self.state.sort_by)

    def page(self, items: Sequence) -> ListPage:
        """
        Compute the current page.

        When the filtered count differs from the previous call, the view
        returns to page 1 even if the old page would still exist.
        """
        arranged = self.arrange(items)
        count = len(arranged)

        if self._last_filtered_count is not None and count != self._last_filtered_count:
            self.state.current_page = 1
        self._last_filtered_count = count

        per_page = self.state.items_per_page
        total_pages = total_pages_for(count, per_page)
        self._last_total_pages = total_pages
        current = clamp_page(self.state.current_page, total_pages)
        self.state.current_page = current

        start = (current - 1) * per_page
        return ListPage(
            items=arranged[start:start + per_page],
            total_items=count,
            current_page=current,
            total_pages=total_pages,
            items_per_page=per_page,
        )

    def filter_sections(self, items: Iterable = ()) -> List[Dict]:
        return [section.to_dict() for section in self.adapter.filter_sections(items)]
