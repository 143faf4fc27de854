"""
Media domains and their adapters.

Each ``MediaDomain`` member maps to exactly one ``DomainAdapter`` that knows
how the domain names its consumed state, which fields are searchable, how its
genres are stored, and which sort modes it offers. The list engine is generic
over the adapter; it never inspects the domain itself.
"""
import math
import sys
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Set, Tuple

from mediafriend_recommendation_service.domain.status import RecommendationStatus
from mediafriend_recommendation_service.errors import ValidationError

ALL_GENRES = "all"
CUSTOM_SORT = "custom"


class MediaDomain(str, Enum):
    MOVIES_TV = "movies_tv"
    MUSIC = "music"
    BOOKS = "books"
    GAMES = "games"


@dataclass(frozen=True)
class SortOption:
    """One entry of a domain's sort table."""
    id: str
    label: str
    key: Callable[[Any], Any]
    descending: bool = False


@dataclass(frozen=True)
class FilterOption:
    id: str
    label: str


@dataclass(frozen=True)
class FilterSection:
    """A group of options shown in the filter/sort menu."""
    id: str
    title: str
    options: Tuple[FilterOption, ...]
    multi_select: bool = False

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "title": self.title,
            "multi_select": self.multi_select,
            "options": [{"id": o.id, "label": o.label} for o in self.options],
        }


# ===== Field accessors =====

def _timestamp(value: Optional[datetime]) -> float:
    if value is None:
        return 0.0
    if value.tzinfo is None:
        # Stored datetimes are naive UTC
        value = value.replace(tzinfo=UTC)
    return value.timestamp()


def _text(value: Optional[str]) -> str:
    return (value or "").casefold()


def added_at_key(item) -> float:
    return _timestamp(getattr(item, "added_at", None))


def title_key(item) -> str:
    return _text(getattr(item, "title", None))


def creator_key(item) -> str:
    return _text(getattr(item, "creator", None))


def year_key(item) -> int:
    return getattr(item, "year", None) or 0


def rating_key(item) -> float:
    return getattr(item, "rating", None) or 0.0


def custom_order_key(item) -> int:
    order = getattr(item, "custom_order", None)
    # Items never placed manually go after placed ones
    return sys.maxsize if order is None else order


def normalize_genres(value: Any) -> Set[str]:
    """Return a lower-cased genre set from a list or a comma separated string."""
    if not value:
        return set()
    if isinstance(value, str):
        parts: Iterable[str] = value.split(",")
    else:
        parts = value
    return {str(g).strip().lower() for g in parts if str(g).strip()}


# ===== Item field parsing =====

def parse_genres(value: Any, action: Optional[str] = None) -> List[str]:
    """
    Genres from a client item: a list of strings or a comma separated string.

    Returns:
        Stripped, non-empty genre names in input order

    Raises:
        ValidationError: any other type, or a list holding non-strings
    """
    if value is None or value == "":
        return []
    if isinstance(value, str):
        parts = value.split(",")
    elif isinstance(value, (list, tuple)) and all(isinstance(g, str) for g in value):
        parts = value
    else:
        raise ValidationError(
            "genres must be a list of strings or a comma separated string",
            field="genres",
            action=action
        )
    return [g.strip() for g in parts if g.strip()]


def parse_year(value: Any, action: Optional[str] = None) -> Optional[int]:
    """Year from a client item; None or blank means unknown."""
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ValidationError("year must be an integer", field="year", action=action)
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError("year must be an integer", field="year", action=action) from None


def parse_rating(value: Any, action: Optional[str] = None) -> Optional[float]:
    """Rating from a client item; None or blank means unrated."""
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ValidationError("rating must be a number", field="rating", action=action)
    try:
        rating = float(value)
    except (TypeError, ValueError):
        raise ValidationError("rating must be a number", field="rating", action=action) from None
    if not math.isfinite(rating):
        raise ValidationError("rating must be a number", field="rating", action=action)
    return rating


# ===== Adapter =====

@dataclass(frozen=True)
class DomainAdapter:
    """Per-domain field accessors, labels and sort table."""

    domain: MediaDomain
    consumed_label: str
    consumed_at_field: str
    creator_label: str
    media_types: Tuple[str, ...]
    sort_options: Tuple[SortOption, ...]
    default_sort: str = "date-added"
    search_fields: Tuple[str, ...] = ("title", "creator")

    # ----- status -----

    def status_label(self, status: RecommendationStatus | str) -> str:
        """Wire label for a status ('consumed' becomes 'watched', 'read', ...)."""
        status = RecommendationStatus(status)
        if status is RecommendationStatus.CONSUMED:
            return self.consumed_label
        return status.value

    def parse_status(self, value: str) -> RecommendationStatus:
        """Accept a canonical status or this domain's consumed label."""
        if isinstance(value, RecommendationStatus):
            return value
        normalized = (value or "").strip().lower()
        if normalized == self.consumed_label:
            return RecommendationStatus.CONSUMED
        try:
            return RecommendationStatus(normalized)
        except ValueError:
            raise ValidationError(
                f"Unknown status '{value}' for {self.domain.value}",
                field="status"
            ) from None

    # ----- filtering -----

    def genres_of(self, item) -> Set[str]:
        return normalize_genres(getattr(item, "genres", None))

    def matches_genres(self, item, genre_filters: Sequence[str]) -> bool:
        """Item passes if no genre filter is active or its genres intersect the filter."""
        active = {g.strip().lower() for g in genre_filters if g and g.strip()}
        if not active or ALL_GENRES in active:
            return True
        return bool(self.genres_of(item) & active)

    def matches_search(self, item, query: str) -> bool:
        """Case-insensitive substring match over the domain's search fields."""
        needle = (query or "").strip().casefold()
        if not needle:
            return True
        for field_name in self.search_fields:
            value = getattr(item, field_name, None)
            if value and needle in str(value).casefold():
                return True
        return False

    def available_genres(self, items: Iterable) -> List[str]:
        genres: Set[str] = set()
        for item in items:
            genres |= self.genres_of(item)
        return sorted(genres)

    # ----- sorting -----

    @property
    def sort_ids(self) -> List[str]:
        return [option.id for option in self.sort_options]

    def sort_option(self, sort_by: Optional[str]) -> SortOption:
        """Look up a sort option; unknown ids fall back to the default sort."""
        by_id = {option.id: option for option in self.sort_options}
        return by_id.get(sort_by or "", by_id[self.default_sort])

    def sort_items(self, items: Iterable, sort_by: Optional[str]) -> List:
        """Stable sort: items with equal keys keep their input order."""
        option = self.sort_option(sort_by)
        return sorted(items, key=option.key, reverse=option.descending)

    def filter_sections(self, items: Iterable = ()) -> List[FilterSection]:
        genre_options = [FilterOption(ALL_GENRES, "All genres")]
        genre_options.extend(FilterOption(g, g.title()) for g in self.available_genres(items))
        return [
            FilterSection(
                id="sort",
                title="Sort by",
                options=tuple(FilterOption(o.id, o.label) for o in self.sort_options),
            ),
            FilterSection(
                id="genre",
                title="Genre",
                options=tuple(genre_options),
                multi_select=True,
            ),
        ]

    def field(self, item, name: str) -> Any:
        """
        Render accessor by wire name.

        The creator, the consumed flag and the consumed timestamp carry
        domain names on the wire ('author', 'read', 'read_at'); every other
        name is the attribute itself.
        """
        if name == self.creator_label:
            name = "creator"
        elif name == self.consumed_label:
            name = "consumed"
        elif name == self.consumed_at_field:
            name = "consumed_at"
        return getattr(item, name, None)


_DATE_ADDED = SortOption("date-added", "Date added", added_at_key, descending=True)
_TITLE = SortOption("title", "Title", title_key)
_YEAR = SortOption("year", "Year", year_key, descending=True)
_RATING = SortOption("rating", "Rating", rating_key, descending=True)
_CUSTOM = SortOption(CUSTOM_SORT, "Custom order", custom_order_key)

DOMAIN_ADAPTERS: Dict[MediaDomain, DomainAdapter] = {
    MediaDomain.MOVIES_TV: DomainAdapter(
        domain=MediaDomain.MOVIES_TV,
        consumed_label="watched",
        consumed_at_field="watched_at",
        creator_label="director",
        media_types=("movie", "tv"),
        sort_options=(_DATE_ADDED, _TITLE, _YEAR, _RATING, _CUSTOM),
    ),
    MediaDomain.MUSIC: DomainAdapter(
        domain=MediaDomain.MUSIC,
        consumed_label="listened",
        consumed_at_field="listened_at",
        creator_label="artist",
        media_types=("song", "album"),
        sort_options=(
            _DATE_ADDED,
            _TITLE,
            SortOption("artist", "Artist", creator_key),
            _YEAR,
            _CUSTOM,
        ),
    ),
    MediaDomain.BOOKS: DomainAdapter(
        domain=MediaDomain.BOOKS,
        consumed_label="read",
        consumed_at_field="read_at",
        creator_label="author",
        media_types=("book",),
        sort_options=(
            _DATE_ADDED,
            _TITLE,
            SortOption("author", "Author", creator_key),
            _YEAR,
            _RATING,
            _CUSTOM,
        ),
    ),
    MediaDomain.GAMES: DomainAdapter(
        domain=MediaDomain.GAMES,
        consumed_label="played",
        consumed_at_field="played_at",
        creator_label="platform",
        media_types=("game",),
        sort_options=(
            _DATE_ADDED,
            SortOption("name", "Name", title_key),
            _YEAR,
            _RATING,
            _CUSTOM,
        ),
    ),
}


def get_adapter(domain: MediaDomain | str) -> DomainAdapter:
    """Resolve a domain (enum or its string value) to its adapter."""
    try:
        return DOMAIN_ADAPTERS[MediaDomain(domain)]
    except ValueError:
        raise ValidationError(f"Unknown media domain '{domain}'", field="domain") from None
