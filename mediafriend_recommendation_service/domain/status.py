"""Recommendation status and party roles."""
from enum import Enum


class RecommendationStatus(str, Enum):
    PENDING = "pending"
    CONSUMED = "consumed"  # watched / listened / read / played
    HIT = "hit"
    MISS = "miss"


class ActorRole(str, Enum):
    SENDER = "sender"
    RECIPIENT = "recipient"


class RemovalOutcome(str, Enum):
    HIDDEN_FOR_RECIPIENT = "hidden_for_recipient"
    HIDDEN_FOR_SENDER = "hidden_for_sender"
    UNSENT = "unsent"  # sender removed before the recipient opened it
    PURGED = "purged"  # both parties have hidden it
