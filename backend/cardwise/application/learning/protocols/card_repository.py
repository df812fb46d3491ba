"""Protocol for the card catalogue as seen by the study engine."""

from typing import Protocol

from cardwise.domain.common.value_objects import FlashcardId
from cardwise.domain.learning.entities.flashcard import Flashcard
from cardwise.domain.learning.value_objects import SessionScope


class CardRepositoryProtocol(Protocol):
    """Read-only access to flashcards."""

    def find_by_id(self, flashcard_id: FlashcardId) -> Flashcard | None:
        """
        Find a flashcard by ID.

        Args:
            flashcard_id: The flashcard ID

        Returns:
            Flashcard entity if found, None otherwise
        """
        ...

    def find_by_scope(self, scope: SessionScope) -> list[Flashcard]:
        """
        Get the cards of a category, named list, topic or deck.

        The IMPORTANT scope is resolved by the caller; here it behaves like ALL.

        Args:
            scope: Session scope

        Returns:
            List of flashcard entities ordered by id
        """
        ...

    def find_by_ids(self, flashcard_ids: list[FlashcardId]) -> list[Flashcard]:
        """Get the cards with the given ids, ordered by id. Unknown ids are skipped."""
        ...
