"""Filter, sort, paginate and reorder for every media list view"""

from mediafriend_recommendation_service.listing.debounce import TrailingDebouncer
from mediafriend_recommendation_service.listing.list_engine import ListEngine, ListPage
from mediafriend_recommendation_service.listing.reorder_engine import DropPosition, ReorderEngine, ReorderIntent
from mediafriend_recommendation_service.listing.view_state import ListViewState, ViewPreferences

__all__ = [
    "DropPosition",
    "ListEngine",
    "ListPage",
    "ListViewState",
    "ReorderEngine",
    "ReorderIntent",
    "TrailingDebouncer",
    "ViewPreferences",
]
