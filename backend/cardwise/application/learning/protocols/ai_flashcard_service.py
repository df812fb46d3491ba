from dataclasses import dataclass, field
from typing import Protocol

from cardwise.domain.learning.value_objects import CardType


@dataclass(frozen=True)
class GeneratedFlashcard:
    question: str
    answer: str | list[str]
    card_type: CardType = CardType.BASIC
    options: list[str] = field(default_factory=list)
    category: str | None = None


class AIFlashcardServiceProtocol(Protocol):
    async def generate_flashcard(self, topic: str, context: str | None) -> GeneratedFlashcard: ...

    async def transform_flashcard(
        self, question: str, answer: str, current_type: CardType, target_type: CardType
    ) -> GeneratedFlashcard: ...
