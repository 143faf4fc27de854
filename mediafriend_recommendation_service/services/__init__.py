"""Service classes"""

from .comment_service import CommentService
from .library_service import LibraryService
from .lifecycle_service import RecommendationLifecycleService, SendResult
from .summary_service import FriendSummary, QuickStats, RecommendationSummaryService

__all__ = [
    "CommentService",
    "FriendSummary",
    "LibraryService",
    "QuickStats",
    "RecommendationLifecycleService",
    "RecommendationSummaryService",
    "SendResult",
]
