"""Unit tests for mediafriend_recommendation_service.listing.reorder_engine."""
from dataclasses import replace

import pytest

from mediafriend_recommendation_service.domain import get_adapter
from mediafriend_recommendation_service.errors import NotFound, ValidationError
from mediafriend_recommendation_service.listing import DropPosition, ListEngine, ReorderEngine


@pytest.fixture
def custom_engine():
    engine = ListEngine(get_adapter('books'), 'u1:books:library')
    engine.set_sort('custom')
    return engine


def _apply(items, intent):
    """Persist an intent the way the repository would."""
    return [replace(item, custom_order=intent.updates.get(item.id, item.custom_order)) for item in items]


class TestReorderEngine:
    """Tests for ReorderEngine.move."""

    def test_requires_custom_sort(self, book_entries):
        # Arrange
        engine = ListEngine(get_adapter('books'), 'u1:books:library')
        reorder = ReorderEngine(engine)

        # Act & Assert
        assert not reorder.active
        with pytest.raises(ValidationError):
            reorder.move(book_entries, 'b1', 'b2')

    def test_move_before_reuses_span_orders(self, custom_engine, book_entries):
        # Act
        intent = ReorderEngine(custom_engine).move(book_entries, 'b5', 'b2', DropPosition.BEFORE)

        # Assert
        assert intent.updates == {'b5': 2, 'b2': 3, 'b3': 4, 'b4': 5}
        assert not intent.normalized
        assert intent.ordered_ids[:6] == ['b1', 'b5', 'b2', 'b3', 'b4', 'b6']

    def test_move_after_downwards(self, custom_engine, book_entries):
        # Act
        intent = ReorderEngine(custom_engine).move(book_entries, 'b1', 'b3', 'after')

        # Assert
        assert intent.updates == {'b2': 1, 'b3': 2, 'b1': 3}
        assert intent.ordered_ids[:4] == ['b2', 'b3', 'b1', 'b4']

    def test_round_trip_places_source_next_to_target(self, custom_engine, book_entries):
        # Arrange
        reorder = ReorderEngine(custom_engine)

        # Act
        intent = reorder.move(book_entries, 'b12', 'b4', DropPosition.BEFORE)
        reread = custom_engine.arrange(_apply(book_entries, intent))

        # Assert
        ids = [e.id for e in reread]
        assert ids.index('b12') == ids.index('b4') - 1
        assert ids == intent.ordered_ids

    def test_move_across_pages_uses_full_collection(self, custom_engine, book_entries):
        """Test that an item on the last page can be dropped on the first page."""
        # Arrange
        custom_engine.set_items_per_page(3)
        custom_engine.page(book_entries)

        # Act
        intent = ReorderEngine(custom_engine).move(book_entries, 'b11', 'b1', DropPosition.BEFORE)
        custom_engine.go_to_page(1)
        page = custom_engine.page(_apply(book_entries, intent))

        # Assert
        assert [e.id for e in page.items] == ['b11', 'b1', 'b2']

    def test_move_within_filtered_view(self, custom_engine, book_entries):
        """Test that a filtered view reorders only the visible items' slots."""
        # Arrange
        custom_engine.set_genre_filters(['fantasy'])

        # Act
        intent = ReorderEngine(custom_engine).move(book_entries, 'b12', 'b3', DropPosition.BEFORE)

        # Assert
        assert intent.ordered_ids == ['b12', 'b3', 'b6', 'b9']
        assert intent.updates == {'b12': 3, 'b3': 6, 'b6': 9, 'b9': 12}

    def test_same_source_and_target_is_noop(self, custom_engine, book_entries):
        intent = ReorderEngine(custom_engine).move(book_entries, 'b2', 'b2')

        assert intent.is_noop

    def test_unknown_item_raises_not_found(self, custom_engine, book_entries):
        with pytest.raises(NotFound):
            ReorderEngine(custom_engine).move(book_entries, 'b1', 'missing')

    def test_filtered_out_item_raises_not_found(self, custom_engine, book_entries):
        # Arrange
        custom_engine.set_genre_filters(['fantasy'])

        # Act & Assert
        with pytest.raises(NotFound):
            ReorderEngine(custom_engine).move(book_entries, 'b1', 'b3')

    def test_missing_orders_trigger_full_renumber(self, custom_engine, entry_factory):
        # Arrange
        items = [entry_factory('a', 'A', custom_order=1), entry_factory('b', 'B'), entry_factory('c', 'C')]

        # Act
        intent = ReorderEngine(custom_engine).move(items, 'c', 'a', DropPosition.BEFORE)

        # Assert
        assert intent.normalized
        assert intent.ordered_ids == ['c', 'a', 'b']
        assert intent.updates == {'c': 1, 'a': 2, 'b': 3}

    def test_duplicate_orders_trigger_full_renumber(self, custom_engine, entry_factory):
        # Arrange
        items = [
            entry_factory('a', 'A', custom_order=1),
            entry_factory('b', 'B', custom_order=1),
            entry_factory('c', 'C', custom_order=2),
        ]

        # Act
        intent = ReorderEngine(custom_engine).move(items, 'a', 'c', DropPosition.AFTER)
        reread = custom_engine.arrange(_apply(items, intent))

        # Assert
        assert intent.normalized
        assert [e.id for e in reread] == ['b', 'c', 'a']
        assert sorted(e.custom_order for e in reread) == [1, 2, 3]

    def test_intent_to_dict(self, custom_engine, book_entries):
        data = ReorderEngine(custom_engine).move(book_entries, 'b2', 'b1').to_dict()

        assert data == {
            'ordered_ids': [f'b{i}' for i in (2, 1, 3, 4, 5, 6, 7, 8, 9, 10, 11, 12)],
            'updates': {'b2': 1, 'b1': 2},
            'normalized': False,
        }
