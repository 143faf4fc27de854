"""Screen state for recommendation lists"""

from mediafriend_recommendation_service.viewmodels.recommendations_view_model import (
    DeleteConfirmation,
    RecommendationsViewModel,
)

__all__ = ["DeleteConfirmation", "RecommendationsViewModel"]
