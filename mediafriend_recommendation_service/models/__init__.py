"""SQLAlchemy models"""

from mediafriend_recommendation_service.models.base import Base
from mediafriend_recommendation_service.models.library_item import LibraryItem
from mediafriend_recommendation_service.models.recommendation import Recommendation
from mediafriend_recommendation_service.models.view_preference import ViewPreference

__all__ = [
    "Base",
    "LibraryItem",
    "Recommendation",
    "ViewPreference",
]
