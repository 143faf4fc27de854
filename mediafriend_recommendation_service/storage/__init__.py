"""Local storage for list view state"""

from mediafriend_recommendation_service.storage.preference_store import PreferenceStore

__all__ = ["PreferenceStore"]
