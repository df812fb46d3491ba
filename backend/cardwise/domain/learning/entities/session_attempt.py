"""SessionAttempt entity and the per-day aggregate built from it."""

from dataclasses import dataclass
from datetime import date, datetime

from cardwise.domain.common.entity import Entity
from cardwise.domain.common.value_objects import FlashcardId, SessionAttemptId, UserId


@dataclass
class SessionAttempt(Entity[SessionAttemptId]):
    """
    One answered card. Append-only: never mutated after it is written.
    """

    id: SessionAttemptId
    user_id: UserId
    flashcard_id: FlashcardId
    attempted_at: datetime
    is_correct: bool
    session_id: str | None = None

    @classmethod
    def create(
        cls,
        user_id: UserId,
        flashcard_id: FlashcardId,
        is_correct: bool,
        attempted_at: datetime,
        session_id: str | None = None,
    ) -> "SessionAttempt":
        """Create a new attempt (ID will be 0 until persisted)."""
        return cls(
            id=SessionAttemptId.generate(),
            user_id=user_id,
            flashcard_id=flashcard_id,
            attempted_at=attempted_at,
            is_correct=is_correct,
            session_id=session_id,
        )


@dataclass(frozen=True)
class DailyAttemptStats:
    """Attempts of one calendar day."""

    day: date
    correct: int
    incorrect: int

    @property
    def total(self) -> int:
        return self.correct + self.incorrect

    @property
    def accuracy(self) -> float:
        """Percentage of correct answers, one decimal."""
        if self.total == 0:
            return 0.0
        return round(self.correct * 100 / self.total, 1)
