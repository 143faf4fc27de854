"""Unit tests for mediafriend_recommendation_service.listing.list_engine."""
from datetime import datetime

import pytest

from mediafriend_recommendation_service.domain import DOMAIN_ADAPTERS, LibraryEntry, get_adapter
from mediafriend_recommendation_service.errors import ValidationError
from mediafriend_recommendation_service.listing import ListEngine, ViewPreferences
from mediafriend_recommendation_service.listing.list_engine import clamp_page, total_pages_for


@pytest.fixture
def engine():
    return ListEngine(get_adapter('books'), 'u1:books:library')


class TestPageMath:
    """Tests for total_pages_for and clamp_page."""

    @pytest.mark.parametrize('count,per_page,expected', [(0, 10, 1), (10, 10, 1), (11, 10, 2), (25, 5, 5)])
    def test_total_pages(self, count, per_page, expected):
        assert total_pages_for(count, per_page) == expected

    @pytest.mark.parametrize('page,expected', [(-3, 1), (0, 1), (2, 2), (9, 3)])
    def test_clamp_page(self, page, expected):
        assert clamp_page(page, 3) == expected


class TestPagination:
    """Tests for page computation and page resets."""

    def test_first_page_defaults(self, engine, book_entries):
        # Act
        page = engine.page(book_entries)

        # Assert
        assert page.total_items == 12
        assert page.total_pages == 2
        assert page.current_page == 1
        assert [e.id for e in page.items] == [f'b{i}' for i in range(1, 11)]
        assert page.has_next_page
        assert not page.has_prev_page

    def test_empty_collection_has_one_page(self, engine):
        # Act
        page = engine.page([])

        # Assert
        assert page.items == []
        assert page.total_pages == 1
        assert page.current_page == 1

    def test_go_to_page_clamps_to_last_page(self, engine, book_entries):
        # Arrange
        engine.page(book_entries)

        # Act
        current = engine.go_to_page(99)

        # Assert
        assert current == 2
        assert [e.id for e in engine.page(book_entries).items] == ['b11', 'b12']

    def test_go_to_page_before_first_page_is_clamped_on_compute(self, engine, book_entries):
        # Act
        engine.go_to_page(7)
        page = engine.page(book_entries)

        # Assert
        assert page.current_page == 2

    def test_changing_items_per_page_resets_to_first_page(self, engine, book_entries):
        # Arrange
        engine.page(book_entries)
        engine.go_to_page(2)

        # Act
        engine.set_items_per_page(5)
        page = engine.page(book_entries)

        # Assert
        assert page.current_page == 1
        assert page.total_pages == 3

    def test_filter_change_resets_to_first_page(self, engine, book_entries):
        # Arrange
        engine.set_items_per_page(2)
        engine.page(book_entries)
        engine.go_to_page(3)

        # Act
        engine.set_genre_filters(['fantasy'])
        page = engine.page(book_entries)

        # Assert
        assert page.current_page == 1
        assert page.total_items == 4

    def test_unchanged_count_keeps_page(self, engine, book_entries):
        # Arrange
        engine.page(book_entries)
        engine.go_to_page(2)

        # Act
        engine.set_sort('title')
        page = engine.page(book_entries)

        # Assert
        assert page.current_page == 2

    def test_shrinking_collection_clamps_page(self, engine, book_entries):
        # Arrange
        engine.set_items_per_page(4)
        engine.page(book_entries)
        engine.go_to_page(3)

        # Act
        page = engine.page(book_entries[:5])

        # Assert
        assert 1 <= page.current_page <= page.total_pages
        assert page.current_page == 1

    def test_invalid_items_per_page_raises(self, engine):
        with pytest.raises(ValidationError):
            engine.set_items_per_page(0)

    def test_to_dict(self, engine, book_entries):
        # Act
        data = engine.page(book_entries).to_dict(LibraryEntry.to_dict)

        # Assert
        assert data['total_items'] == 12
        assert data['items'][0]['author'] == book_entries[0].creator


class TestFiltering:
    """Tests for genre filters and search."""

    def test_all_genres_shows_everything(self, engine, book_entries):
        assert len(engine.apply_filters(book_entries)) == 12

    def test_multiple_genres_are_ored(self, engine, book_entries):
        # Act
        engine.set_genre_filters(['fantasy', 'Mystery'])

        # Assert
        assert len(engine.apply_filters(book_entries)) == 8

    def test_empty_selection_means_all(self, engine, book_entries):
        # Act
        engine.set_genre_filters([])

        # Assert
        assert engine.state.genre_filters == ['all']

    def test_toggle_genre(self, engine):
        # Act & Assert
        engine.toggle_genre('fantasy')
        assert engine.state.genre_filters == ['fantasy']
        engine.toggle_genre('mystery')
        assert engine.state.genre_filters == ['fantasy', 'mystery']
        engine.toggle_genre('fantasy')
        assert engine.state.genre_filters == ['mystery']
        engine.toggle_genre('mystery')
        assert engine.state.genre_filters == ['all']

    def test_toggle_all_clears_other_genres(self, engine):
        # Arrange
        engine.toggle_genre('fantasy')

        # Act
        engine.toggle_genre('all')

        # Assert
        assert engine.state.genre_filters == ['all']

    def test_search_matches_title_and_creator(self, engine, book_entries):
        # Act
        engine.set_search_query('author b')

        # Assert
        assert {e.creator for e in engine.apply_filters(book_entries)} == {'Author B'}

    def test_search_and_genre_are_anded(self, engine, book_entries):
        # Act
        engine.set_search_query('book 0')
        engine.set_genre_filters(['fantasy'])

        # Assert
        assert [e.id for e in engine.apply_filters(book_entries)] == ['b3', 'b6', 'b9']

    def test_filter_sections(self, engine, book_entries):
        # Act
        sections = engine.filter_sections(book_entries)

        # Assert
        assert [s['id'] for s in sections] == ['sort', 'genre']
        genre_ids = [o['id'] for o in sections[1]['options']]
        assert genre_ids == ['all', 'fantasy', 'mystery', 'science fiction']


class TestSorting:
    """Tests for sort modes."""

    def test_unknown_sort_raises(self, engine):
        with pytest.raises(ValidationError):
            engine.set_sort('artist')

    def test_sort_by_year_descending(self, engine, book_entries):
        # Act
        engine.set_sort('year')

        # Assert
        assert [e.year for e in engine.arrange(book_entries)][:3] == [2002, 2001, 2000]

    def test_sort_by_title_is_case_insensitive(self, engine, entry_factory):
        # Arrange
        items = [entry_factory('1', 'banana'), entry_factory('2', 'Apple'), entry_factory('3', 'cherry')]

        # Act
        engine.set_sort('title')

        # Assert
        assert [e.title for e in engine.arrange(items)] == ['Apple', 'banana', 'cherry']

    def test_custom_sort_puts_unplaced_items_last(self, engine, entry_factory):
        # Arrange
        items = [entry_factory('1', 'x'), entry_factory('2', 'y', custom_order=2), entry_factory('3', 'z', custom_order=1)]

        # Act
        engine.set_sort('custom')

        # Assert
        assert [e.id for e in engine.arrange(items)] == ['3', '2', '1']

    @pytest.mark.parametrize(
        'domain,sort_by',
        [(adapter.domain.value, option.id) for adapter in DOMAIN_ADAPTERS.values() for option in adapter.sort_options]
    )
    def test_sort_is_stable_for_equal_keys(self, domain, sort_by):
        """Test that items with equal sort keys keep their input order."""
        # Arrange
        items = [
            LibraryEntry(
                id=f'i{n}',
                user_id='u1',
                domain=domain,
                title='Same',
                added_at=datetime(2024, 1, 1),
                creator='Same',
                year=2000,
                rating=3.0,
                custom_order=1,
            )
            for n in range(5)
        ]
        engine = ListEngine(get_adapter(domain), f'u1:{domain}:library')
        engine.set_sort(sort_by)

        # Act
        first = [e.id for e in engine.arrange(items)]
        second = [e.id for e in engine.arrange(items)]

        # Assert
        assert first == [f'i{n}' for n in range(5)]
        assert first == second


class TestPreferences:
    """Tests for preference loading and saving."""

    def test_preferences_are_saved_on_change(self, preference_store, book_entries):
        # Arrange
        engine = ListEngine(get_adapter('books'), 'u1:books:library', store=preference_store)

        # Act
        engine.set_sort('author')
        engine.set_items_per_page(25)
        engine.set_genre_filters(['fantasy'])
        engine.set_search_query('dune')

        # Assert
        reloaded = ListEngine(get_adapter('books'), 'u1:books:library', store=preference_store)
        assert reloaded.state.sort_by == 'author'
        assert reloaded.state.items_per_page == 25
        assert reloaded.state.genre_filters == ['fantasy']
        assert reloaded.state.search_query == ''
        assert reloaded.state.current_page == 1

    def test_views_are_independent(self, preference_store):
        # Arrange
        books = ListEngine(get_adapter('books'), 'u1:books:library', store=preference_store)

        # Act
        books.set_sort('author')

        # Assert
        games = ListEngine(get_adapter('games'), 'u1:games:library', store=preference_store)
        assert games.state.sort_by == 'date-added'

    def test_stored_sort_from_other_domain_is_ignored(self, preference_store):
        # Arrange
        preference_store.save('u1:games:library', ViewPreferences(sort_by='author'))

        # Act
        engine = ListEngine(get_adapter('games'), 'u1:games:library', store=preference_store)

        # Assert
        assert engine.state.sort_by == 'date-added'

    def test_reset_restores_defaults(self, preference_store):
        # Arrange
        engine = ListEngine(get_adapter('books'), 'u1:books:library', store=preference_store)
        engine.set_sort('author')

        # Act
        engine.reset()

        # Assert
        assert engine.state.sort_by == 'date-added'
        reloaded = ListEngine(get_adapter('books'), 'u1:books:library', store=preference_store)
        assert reloaded.state.sort_by == 'date-added'
