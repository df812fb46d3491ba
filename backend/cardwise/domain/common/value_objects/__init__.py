"""Common value objects shared across the domain."""

from .ids import DeckId, FlashcardId, ProgressRecordId, SessionAttemptId, UserId

__all__ = [
    "DeckId",
    "FlashcardId",
    "ProgressRecordId",
    "SessionAttemptId",
    "UserId",
]
