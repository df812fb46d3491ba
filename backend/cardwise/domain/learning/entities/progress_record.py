"""
ProgressRecord entity: review state of one card for one user.
"""

from dataclasses import dataclass, replace
from datetime import datetime

from cardwise.domain.common.entity import Entity
from cardwise.domain.common.exceptions import InvariantViolationError
from cardwise.domain.common.value_objects import FlashcardId, ProgressRecordId, UserId
from cardwise.domain.learning.value_objects import CardState

MIN_EASE_FACTOR = 1.3
MAX_EASE_FACTOR = 2.5
DEFAULT_EASE_FACTOR = 2.5


@dataclass
class ProgressRecord(Entity[ProgressRecordId]):
    """
    Per (user, card) scheduling state.

    Business Rules:
    - ease_factor stays within [1.3, 2.5]
    - review_count never decreases
    - a NEW record has review_count 0 and has never been scheduled
    - current_step only matters in LEARNING and RELEARNING
    - important is a user flag, independent of scheduling
    """

    id: ProgressRecordId
    user_id: UserId
    flashcard_id: FlashcardId
    state: CardState = CardState.NEW
    current_step: int = 0
    ease_factor: float = DEFAULT_EASE_FACTOR
    interval_days: int = 0
    next_review_date: datetime | None = None
    review_count: int = 0
    last_correct: bool | None = None
    important: bool = False

    def __post_init__(self) -> None:
        """Validate invariants."""
        if not MIN_EASE_FACTOR <= self.ease_factor <= MAX_EASE_FACTOR:
            raise InvariantViolationError(
                "ProgressRecord",
                f"ease_factor {self.ease_factor} outside [{MIN_EASE_FACTOR}, {MAX_EASE_FACTOR}]",
            )
        if self.review_count < 0:
            raise InvariantViolationError("ProgressRecord", "review_count cannot be negative")
        if self.current_step < 0:
            raise InvariantViolationError("ProgressRecord", "current_step cannot be negative")
        if self.state is CardState.NEW and self.review_count != 0:
            raise InvariantViolationError("ProgressRecord", "new cards have no reviews")

    def is_due(self, now: datetime) -> bool:
        """A record is due once its next review date has passed."""
        return self.next_review_date is None or self.next_review_date <= now

    def mark_important(self, important: bool) -> None:
        """Set or clear the user's importance flag."""
        self.important = important

    def evolve(self, **changes: object) -> "ProgressRecord":
        """Copy of this record with the given fields replaced (validated again)."""
        return replace(self, **changes)  # type: ignore[arg-type]

    @classmethod
    def create(cls, user_id: UserId, flashcard_id: FlashcardId) -> "ProgressRecord":
        """Create an unseen record (ID will be 0 until persisted)."""
        return cls(
            id=ProgressRecordId.generate(),
            user_id=user_id,
            flashcard_id=flashcard_id,
        )
