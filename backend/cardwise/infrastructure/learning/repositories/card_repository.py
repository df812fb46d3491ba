"""Repository for catalogue cards (read-only)."""

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from cardwise.domain.common.value_objects import FlashcardId
from cardwise.domain.learning.entities.flashcard import Flashcard
from cardwise.domain.learning.value_objects import ScopeKind, SessionScope
from cardwise.infrastructure.common.persistence import storage_errors
from cardwise.infrastructure.learning.mappers.flashcard_mapper import FlashcardMapper
from cardwise.models import Flashcard as FlashcardORM
from cardwise.models import FlashcardListEntry as FlashcardListEntryORM


class CardRepository:
    """Repository for Flashcard domain entities."""

    def __init__(self, db: Session) -> None:
        self.db = db
        self.mapper = FlashcardMapper()

    def find_by_id(self, flashcard_id: FlashcardId) -> Flashcard | None:
        with storage_errors(self.db, "find_card"):
            orm_model = self.db.get(FlashcardORM, flashcard_id.value)
        return self.mapper.to_domain(orm_model) if orm_model else None

    def find_by_scope(self, scope: SessionScope) -> list[Flashcard]:
        """
        Get the cards of a scope, ordered by id.

        Args:
            scope: Category (exact), named list, topic (case-insensitive) or deck

        Returns:
            List of flashcard entities
        """
        stmt = select(FlashcardORM)

        if scope.kind is ScopeKind.CATEGORY:
            stmt = stmt.where(FlashcardORM.category == scope.value)
        elif scope.kind is ScopeKind.LIST:
            stmt = stmt.join(
                FlashcardListEntryORM, FlashcardListEntryORM.flashcard_id == FlashcardORM.id
            ).where(FlashcardListEntryORM.name == scope.value)
        elif scope.kind is ScopeKind.TOPIC:
            stmt = stmt.where(func.lower(FlashcardORM.topic) == (scope.value or "").lower())
        elif scope.kind is ScopeKind.DECK:
            if not (scope.value or "").isdigit():
                return []
            stmt = stmt.where(FlashcardORM.deck_id == int(scope.value or 0))

        stmt = stmt.order_by(FlashcardORM.id)
        with storage_errors(self.db, "find_cards_by_scope"):
            orm_models = self.db.execute(stmt).scalars().all()
        return [self.mapper.to_domain(orm) for orm in orm_models]

    def find_by_ids(self, flashcard_ids: list[FlashcardId]) -> list[Flashcard]:
        if not flashcard_ids:
            return []
        stmt = (
            select(FlashcardORM)
            .where(FlashcardORM.id.in_([fid.value for fid in flashcard_ids]))
            .order_by(FlashcardORM.id)
        )
        with storage_errors(self.db, "find_cards_by_ids"):
            orm_models = self.db.execute(stmt).scalars().all()
        return [self.mapper.to_domain(orm) for orm in orm_models]
