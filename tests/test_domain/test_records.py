"""Unit tests for mediafriend_recommendation_service.domain.records."""
from datetime import datetime

from mediafriend_recommendation_service.domain import (
    LibraryEntry,
    RecommendationRecord,
    RecommendationStatus,
    get_adapter,
)


def _book_record(**overrides):
    values = dict(
        id='rec-1',
        domain='books',
        from_user_id='alice',
        to_user_id='bob',
        external_id='ol-1',
        title='Dune',
        status=RecommendationStatus.CONSUMED,
        sent_at=datetime(2024, 1, 1, 12, 0),
        creator='Frank Herbert',
        consumed_at=datetime(2024, 1, 5, 9, 30),
    )
    values.update(overrides)
    return RecommendationRecord(**values)


class TestDomainField:
    """Tests for DomainAdapter.field."""

    def test_domain_names_map_to_attributes(self):
        # Arrange
        adapter = get_adapter('books')
        record = _book_record()
        entry = LibraryEntry(
            id='item-1', user_id='bob', domain='books', title='Dune',
            added_at=datetime(2024, 1, 2), creator='Frank Herbert', consumed=True
        )

        # Act & Assert
        assert adapter.field(record, 'author') == 'Frank Herbert'
        assert adapter.field(record, 'read_at') == record.consumed_at
        assert adapter.field(entry, 'read') is True
        assert adapter.field(entry, 'title') == 'Dune'

    def test_unknown_name_is_none(self):
        assert get_adapter('music').field(_book_record(), 'missing') is None


class TestToDict:
    """Tests for record and entry wire dicts."""

    def test_record_uses_domain_names(self):
        # Act
        data = _book_record().to_dict()

        # Assert
        assert data['author'] == 'Frank Herbert'
        assert data['read_at'] == '2024-01-05T09:30:00'
        assert data['status'] == 'read'
        assert data['sent_at'] == '2024-01-01T12:00:00'
        assert data['opened_at'] is None
        assert 'creator' not in data
        assert 'consumed_at' not in data

    def test_entry_uses_domain_names(self):
        # Arrange
        entry = LibraryEntry(
            id='item-1', user_id='bob', domain='games', title='Celeste',
            added_at=datetime(2024, 3, 1), creator='Switch', consumed=False, custom_order=2
        )

        # Act
        data = entry.to_dict()

        # Assert
        assert data['platform'] == 'Switch'
        assert data['played'] is False
        assert data['added_at'] == '2024-03-01T00:00:00'
        assert data['custom_order'] == 2
        assert 'user_id' not in data
        assert 'consumed' not in data
