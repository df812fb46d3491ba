"""Protocol for the append-only session attempt log."""

from datetime import datetime
from typing import Protocol

from cardwise.domain.common.value_objects import FlashcardId, UserId
from cardwise.domain.learning.entities.session_attempt import SessionAttempt


class SessionAttemptRepositoryProtocol(Protocol):
    """Answered cards, kept for a short horizon."""

    def add(self, attempt: SessionAttempt) -> SessionAttempt:
        """Append an attempt. Committed before returning."""
        ...

    def find_recent_flashcard_ids(
        self, user_id: UserId, since: datetime, *, correct_only: bool = False
    ) -> set[FlashcardId]:
        """
        Cards the user attempted at or after `since`.

        Args:
            user_id: The user ID
            since: Start of the window (inclusive)
            correct_only: Only cards with at least one correct attempt in the window
        """
        ...

    def find_history(
        self, user_id: UserId, flashcard_id: FlashcardId, limit: int
    ) -> list[SessionAttempt]:
        """Most recent attempts of one card, newest first."""
        ...

    def find_since(
        self,
        user_id: UserId,
        since: datetime,
        flashcard_ids: list[FlashcardId] | None = None,
    ) -> list[SessionAttempt]:
        """All attempts at or after `since`, optionally restricted to some cards."""
        ...

    def delete_older_than(self, user_id: UserId, cutoff: datetime) -> int:
        """
        Delete the user's attempts strictly older than `cutoff`.

        Returns:
            Number of deleted rows
        """
        ...

    def delete_all_older_than(self, cutoff: datetime) -> int:
        """Delete every user's attempts strictly older than `cutoff`."""
        ...
