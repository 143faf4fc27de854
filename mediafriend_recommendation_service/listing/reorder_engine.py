"""
Manual ordering by drag and drop.

Moves are always computed against the full filtered collection, never the
visible page, so an item dragged to the edge of a page can still land next
to items on neighbouring pages.
"""
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Sequence

from mediafriend_recommendation_service.domain import CUSTOM_SORT
from mediafriend_recommendation_service.domain.media import custom_order_key
from mediafriend_recommendation_service.errors import NotFound, ValidationError
from mediafriend_recommendation_service.listing.list_engine import ListEngine

logger = logging.getLogger(__name__)


class DropPosition(str, Enum):
    BEFORE = "before"
    AFTER = "after"


@dataclass(frozen=True)
class ReorderIntent:
    """What the persistence layer must write after a drag."""
    ordered_ids: List[str]  # filtered collection in its new order
    updates: Dict[str, int] = field(default_factory=dict)  # only changed custom_order values
    normalized: bool = False  # True when the whole collection was renumbered

    @property
    def is_noop(self) -> bool:
        return not self.updates

    def to_dict(self) -> Dict:
        return {
            "ordered_ids": self.ordered_ids,
            "updates": self.updates,
            "normalized": self.normalized,
        }


def _strictly_increasing(orders: Sequence[Optional[int]]) -> bool:
    if any(order is None for order in orders):
        return False
    return all(a < b for a, b in zip(orders, orders[1:]))


def _splice(items: List, source_id: str, target_id: str, position: DropPosition) -> List:
    """Remove the source and re-insert it directly before or after the target."""
    moved = list(items)
    source_index = next(i for i, item in enumerate(moved) if item.id == source_id)
    source = moved.pop(source_index)
    target_index = next(i for i, item in enumerate(moved) if item.id == target_id)
    insert_at = target_index if position is DropPosition.BEFORE else target_index + 1
    moved.insert(insert_at, source)
    return moved


class ReorderEngine:
    """Computes new custom_order values for a drag gesture."""

    def __init__(self, list_engine: ListEngine):
        self.list_engine = list_engine

    @property
    def active(self) -> bool:
        return self.list_engine.state.sort_by == CUSTOM_SORT

    def move(
            self,
            items: Sequence,
            source_id: str,
            target_id: str,
            position: DropPosition | str = DropPosition.BEFORE
    ) -> ReorderIntent:
        """
        Move one item next to another.

        Args:
            items: The raw collection (all of the user's items for the view)
            source_id: Dragged item
            target_id: Item it was dropped on
            position: Land before or after the target

        Returns:
            ReorderIntent carrying the new order and the changed values

        Raises:
            ValidationError: the view is not sorted by custom order
            NotFound: source or target is not in the filtered collection
        """
        if not self.active:
            raise ValidationError("Reordering requires the custom sort", field="sort_by", action="reorder")
        position = DropPosition(position)

        ordered = self.list_engine.arrange(items)
        ids = [item.id for item in ordered]
        for item_id in (source_id, target_id):
            if item_id not in ids:
                raise NotFound(f"Item {item_id} is not in this list", record_id=item_id, action="reorder")

        if source_id == target_id:
            return ReorderIntent(ordered_ids=ids)

        moved = _splice(ordered, source_id, target_id, position)
        old_index = ids.index(source_id)
        new_index = next(i for i, item in enumerate(moved) if item.id == source_id)

        current_orders = [getattr(item, "custom_order", None) for item in ordered]
        if not _strictly_increasing(current_orders):
            return self._normalize(items, ordered, source_id, target_id, position)

        # Reuse the existing order values of the affected span
        lo, hi = min(old_index, new_index), max(old_index, new_index)
        slots = current_orders[lo:hi + 1]
        updates: Dict[str, int] = {}
        for offset, item in enumerate(moved[lo:hi + 1]):
            if getattr(item, "custom_order", None) != slots[offset]:
                updates[item.id] = slots[offset]

        logger.debug(f"Reorder {source_id} {position.value} {target_id}: {len(updates)} items changed")
        return ReorderIntent(ordered_ids=[item.id for item in moved], updates=updates)

    def _normalize(
            self,
            items: Sequence,
            ordered: List,
            source_id: str,
            target_id: str,
            position: DropPosition
    ) -> ReorderIntent:
        """Renumber the whole collection 1..N once, applying the move."""
        full = sorted(items, key=custom_order_key)
        full = _splice(full, source_id, target_id, position)

        updates = {}
        for order, item in enumerate(full, start=1):
            if getattr(item, "custom_order", None) != order:
                updates[item.id] = order

        visible = {item.id for item in ordered}
        logger.info(f"Normalized custom order for {len(full)} items")
        return ReorderIntent(
            ordered_ids=[item.id for item in full if item.id in visible],
            updates=updates,
            normalized=True,
        )
