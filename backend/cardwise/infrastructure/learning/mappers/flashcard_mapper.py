"""Mapper for Flashcard ORM → Domain conversion."""

from cardwise.domain.common.value_objects import DeckId, FlashcardId
from cardwise.domain.learning.entities.flashcard import Flashcard
from cardwise.domain.learning.value_objects import CardType
from cardwise.models import Flashcard as FlashcardORM


class FlashcardMapper:
    """Cards are owned by the catalogue, so only the read direction exists."""

    def to_domain(self, orm_model: FlashcardORM) -> Flashcard:
        """Convert ORM model to domain entity."""
        return Flashcard(
            id=FlashcardId(orm_model.id),
            question=orm_model.question,
            answer=orm_model.answer,
            card_type=CardType(orm_model.card_type),
            category=orm_model.category,
            topic=orm_model.topic,
            lists=sorted(entry.name for entry in orm_model.list_entries),
            options=list(orm_model.options) if orm_model.options else None,
            deck_id=DeckId(orm_model.deck_id) if orm_model.deck_id is not None else None,
        )
