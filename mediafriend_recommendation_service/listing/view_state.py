"""List view state and the persisted preference subset."""
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from mediafriend_recommendation_service.domain import ALL_GENRES


@dataclass(frozen=True)
class ViewPreferences:
    """What a list view remembers between sessions (search text is not included)."""
    genre_filters: Tuple[str, ...] = (ALL_GENRES,)
    sort_by: str = "date-added"
    items_per_page: int = 10

    def to_dict(self) -> Dict:
        return {
            "genreFilters": list(self.genre_filters),
            "sortBy": self.sort_by,
            "itemsPerPage": self.items_per_page,
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict], defaults: "ViewPreferences") -> "ViewPreferences":
        """Read stored preferences, keeping defaults for missing or malformed values."""
        if not data:
            return defaults

        genres = data.get("genreFilters")
        if not isinstance(genres, list) or not all(isinstance(g, str) for g in genres):
            genres = list(defaults.genre_filters)

        sort_by = data.get("sortBy")
        if not isinstance(sort_by, str) or not sort_by:
            sort_by = defaults.sort_by

        per_page = data.get("itemsPerPage")
        if isinstance(per_page, bool) or not isinstance(per_page, int) or per_page < 1:
            per_page = defaults.items_per_page

        return cls(genre_filters=tuple(genres) or (ALL_GENRES,), sort_by=sort_by, items_per_page=per_page)


@dataclass
class ListViewState:
    genre_filters: List[str] = field(default_factory=lambda: [ALL_GENRES])
    sort_by: str = "date-added"
    items_per_page: int = 10
    search_query: str = ""
    current_page: int = 1

    @classmethod
    def from_preferences(cls, prefs: ViewPreferences) -> "ListViewState":
        return cls(
            genre_filters=list(prefs.genre_filters),
            sort_by=prefs.sort_by,
            items_per_page=prefs.items_per_page,
        )

    def preferences(self) -> ViewPreferences:
        return ViewPreferences(
            genre_filters=tuple(self.genre_filters),
            sort_by=self.sort_by,
            items_per_page=self.items_per_page,
        )
