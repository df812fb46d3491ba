"""Mapper for UserProgress ORM ↔ ProgressRecord conversion."""

from typing import Any

from cardwise.domain.common.value_objects import FlashcardId, ProgressRecordId, UserId
from cardwise.domain.learning.entities.progress_record import ProgressRecord
from cardwise.domain.learning.value_objects import CardState
from cardwise.infrastructure.common.persistence import as_utc
from cardwise.models import UserProgress as UserProgressORM


class ProgressRecordMapper:
    """Mapper for UserProgress ORM ↔ ProgressRecord conversion."""

    def to_domain(self, orm_model: UserProgressORM) -> ProgressRecord:
        """
        Convert ORM model to domain entity.

        Raises:
            CorruptStateError: If the stored state is not one of the four states
        """
        return ProgressRecord(
            id=ProgressRecordId(orm_model.id),
            user_id=UserId(orm_model.user_id),
            flashcard_id=FlashcardId(orm_model.flashcard_id),
            state=CardState.parse(orm_model.state, orm_model.flashcard_id),
            current_step=orm_model.current_step,
            ease_factor=orm_model.ease_factor,
            interval_days=orm_model.interval_days,
            next_review_date=as_utc(orm_model.next_review_date),
            review_count=orm_model.review_count,
            last_correct=orm_model.last_correct,
            important=orm_model.important,
        )

    def to_values(self, domain_entity: ProgressRecord) -> dict[str, Any]:
        """Column values for an upsert; the id is left to the database."""
        return {
            "user_id": domain_entity.user_id.value,
            "flashcard_id": domain_entity.flashcard_id.value,
            "state": domain_entity.state.value,
            "current_step": domain_entity.current_step,
            "ease_factor": domain_entity.ease_factor,
            "interval_days": domain_entity.interval_days,
            "next_review_date": domain_entity.next_review_date,
            "review_count": domain_entity.review_count,
            "last_correct": domain_entity.last_correct,
            "important": domain_entity.important,
        }
