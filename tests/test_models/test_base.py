"""Unit tests for mediafriend_recommendation_service.models.base."""
from mediafriend_recommendation_service.models import Base, LibraryItem, Recommendation, ViewPreference


class TestBase:
    """Tests for Base declarative base."""

    def test_base_has_metadata_and_registry(self):
        # Assert
        assert Base.metadata is not None
        assert Base.registry is not None

    def test_models_are_registered(self):
        """Test that every table is known to the shared metadata."""
        # Assert
        assert issubclass(Recommendation, Base)
        assert issubclass(LibraryItem, Base)
        assert issubclass(ViewPreference, Base)
        assert set(Base.metadata.tables) == {"recommendations", "library_items", "view_preferences"}
