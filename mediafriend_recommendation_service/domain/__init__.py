"""Domain types shared by services, listing and blueprints"""

from mediafriend_recommendation_service.domain.media import (
    ALL_GENRES,
    CUSTOM_SORT,
    DOMAIN_ADAPTERS,
    DomainAdapter,
    MediaDomain,
    get_adapter,
)
from mediafriend_recommendation_service.domain.records import LibraryEntry, RecommendationRecord
from mediafriend_recommendation_service.domain.status import ActorRole, RecommendationStatus, RemovalOutcome

__all__ = [
    "ALL_GENRES",
    "CUSTOM_SORT",
    "DOMAIN_ADAPTERS",
    "ActorRole",
    "DomainAdapter",
    "LibraryEntry",
    "MediaDomain",
    "RecommendationRecord",
    "RecommendationStatus",
    "RemovalOutcome",
    "get_adapter",
]
