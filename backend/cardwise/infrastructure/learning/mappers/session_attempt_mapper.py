"""Mapper for SessionAttempt ORM ↔ Domain conversion."""

from cardwise.domain.common.value_objects import FlashcardId, SessionAttemptId, UserId
from cardwise.domain.learning.entities.session_attempt import SessionAttempt
from cardwise.infrastructure.common.persistence import as_utc
from cardwise.models import SessionAttempt as SessionAttemptORM


class SessionAttemptMapper:
    """Mapper for SessionAttempt ORM ↔ Domain conversion."""

    def to_domain(self, orm_model: SessionAttemptORM) -> SessionAttempt:
        """Convert ORM model to domain entity."""
        attempted_at = as_utc(orm_model.attempted_at)
        assert attempted_at is not None
        return SessionAttempt(
            id=SessionAttemptId(orm_model.id),
            user_id=UserId(orm_model.user_id),
            flashcard_id=FlashcardId(orm_model.flashcard_id),
            attempted_at=attempted_at,
            is_correct=orm_model.is_correct,
            session_id=orm_model.session_id,
        )

    def to_orm(self, domain_entity: SessionAttempt) -> SessionAttemptORM:
        """Convert domain entity to a new ORM model. Attempts are never updated."""
        return SessionAttemptORM(
            id=domain_entity.id.value if domain_entity.id.value != 0 else None,
            user_id=domain_entity.user_id.value,
            flashcard_id=domain_entity.flashcard_id.value,
            attempted_at=domain_entity.attempted_at,
            is_correct=domain_entity.is_correct,
            session_id=domain_entity.session_id,
        )
