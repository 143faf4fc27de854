"""Repository classes"""

from mediafriend_recommendation_service.repos.library_repository import LibraryRepository
from mediafriend_recommendation_service.repos.preference_repository import PreferenceRepository
from mediafriend_recommendation_service.repos.recommendation_repository import RecommendationRepository

__all__ = [
    "LibraryRepository",
    "PreferenceRepository",
    "RecommendationRepository",
]
