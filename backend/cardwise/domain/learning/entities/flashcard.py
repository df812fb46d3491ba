"""
Flashcard entity, as read from the card catalogue.

The study engine never mutates cards; it only schedules them.
"""

from dataclasses import dataclass, field

from cardwise.domain.common.entity import Entity
from cardwise.domain.common.exceptions import DomainError
from cardwise.domain.common.value_objects import DeckId, FlashcardId
from cardwise.domain.learning.value_objects import CardType, ScopeKind, SessionScope


@dataclass
class Flashcard(Entity[FlashcardId]):
    """
    A study card.

    Business Rules:
    - Question cannot be empty
    - Multiple choice cards carry at least two options
    """

    id: FlashcardId
    question: str
    answer: str | list[str]
    card_type: CardType
    category: str
    topic: str | None = None
    lists: list[str] = field(default_factory=list)
    options: list[str] | None = None
    deck_id: DeckId | None = None

    def __post_init__(self) -> None:
        """Validate invariants."""
        if not self.question or not self.question.strip():
            raise DomainError("Question cannot be empty")
        if self.card_type is CardType.MULTIPLE_CHOICE and len(self.options or []) < 2:
            raise DomainError("Multiple choice flashcards require at least 2 options")

    def matches(self, scope: SessionScope) -> bool:
        """Whether the card belongs to a catalogue scope (category/list/topic/deck)."""
        if scope.kind in (ScopeKind.ALL, ScopeKind.IMPORTANT):
            return True
        if scope.kind is ScopeKind.CATEGORY:
            return self.category == scope.value
        if scope.kind is ScopeKind.LIST:
            return scope.value in self.lists
        if scope.kind is ScopeKind.TOPIC:
            return bool(self.topic) and self.topic.lower() == (scope.value or "").lower()
        if scope.kind is ScopeKind.DECK:
            return self.deck_id is not None and str(self.deck_id.value) == scope.value
        return False

    @property
    def answer_text(self) -> str:
        if isinstance(self.answer, list):
            return ", ".join(self.answer)
        return self.answer
