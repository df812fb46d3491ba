"""Protocol for the ProgressRecord store."""

from typing import Protocol

from cardwise.domain.common.value_objects import FlashcardId, UserId
from cardwise.domain.learning.entities.progress_record import ProgressRecord


class ProgressRepositoryProtocol(Protocol):
    """
    Per (user, card) scheduling state.

    At most one record exists per (user_id, flashcard_id).
    """

    def find(self, user_id: UserId, flashcard_id: FlashcardId) -> ProgressRecord | None:
        """
        Find the record of one card.

        Raises:
            CorruptStateError: If the stored state is not recognized
        """
        ...

    def find_for_cards(
        self, user_id: UserId, flashcard_ids: list[FlashcardId]
    ) -> dict[FlashcardId, ProgressRecord]:
        """
        Load the records of many cards in a single query.

        Args:
            user_id: The user ID
            flashcard_ids: Cards to look up

        Returns:
            Mapping of card id to record; cards never reviewed are absent,
            and so are records with an unrecognized state
        """
        ...

    def find_important(self, user_id: UserId) -> list[ProgressRecord]:
        """Records flagged important by the user, ordered by card id, without corrupt ones."""
        ...

    def find_corrupt_ids(self, user_id: UserId) -> set[FlashcardId]:
        """Cards whose stored record has an unrecognized state."""
        ...

    def count_important(self, user_id: UserId) -> int:
        ...

    def save(self, record: ProgressRecord) -> ProgressRecord:
        """
        Insert or replace the record for (user_id, flashcard_id).

        Concurrent first writes of the same pair do not fail; the last write wins.

        Returns:
            Saved record with its database id
        """
        ...
