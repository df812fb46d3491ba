"""Learning module domain exceptions."""

from datetime import datetime

from cardwise.domain.common.exceptions import DomainError


class InvalidOutcomeError(DomainError):
    """Raised when a review outcome is outside the recognized set."""

    def __init__(self, outcome: object) -> None:
        super().__init__(f"Invalid review outcome: {outcome!r}", {"outcome": outcome})
        self.outcome = outcome


class CorruptStateError(DomainError):
    """
    Raised when a stored progress record carries an unrecognized state.

    The record is never repaired by guessing a default.
    """

    def __init__(self, state: object, flashcard_id: int | None = None) -> None:
        super().__init__(
            f"Progress record has unrecognized state {state!r}",
            {"state": state, "flashcard_id": flashcard_id},
        )
        self.state = state
        self.flashcard_id = flashcard_id


class CardNotDueError(DomainError):
    """Raised when a strict review is submitted for a card that is not due yet."""

    def __init__(self, flashcard_id: int, next_review_date: datetime) -> None:
        super().__init__(
            f"Flashcard {flashcard_id} is not due until {next_review_date.isoformat()}",
            {"flashcard_id": flashcard_id, "next_review_date": next_review_date.isoformat()},
        )
        self.flashcard_id = flashcard_id
        self.next_review_date = next_review_date
