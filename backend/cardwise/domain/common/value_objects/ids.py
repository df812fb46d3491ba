from dataclasses import dataclass

from ..entity import EntityId


@dataclass(frozen=True)
class UserId(EntityId):
    """Strongly-typed user identifier."""

    value: int


@dataclass(frozen=True)
class FlashcardId(EntityId):
    """Strongly-typed flashcard identifier."""

    value: int


@dataclass(frozen=True)
class DeckId(EntityId):
    """Strongly-typed deck identifier."""

    value: int


@dataclass(frozen=True)
class ProgressRecordId(EntityId):
    """Strongly-typed progress record identifier."""

    value: int


@dataclass(frozen=True)
class SessionAttemptId(EntityId):
    """Strongly-typed session attempt identifier."""

    value: int
