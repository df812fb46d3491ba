"""Repository for the session attempt log."""

from datetime import datetime

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from cardwise.domain.common.value_objects import FlashcardId, UserId
from cardwise.domain.learning.entities.session_attempt import SessionAttempt
from cardwise.infrastructure.common.persistence import storage_errors
from cardwise.infrastructure.learning.mappers.session_attempt_mapper import SessionAttemptMapper
from cardwise.models import SessionAttempt as SessionAttemptORM


class SessionAttemptRepository:
    """Append-only repository: attempts are inserted and bulk-deleted, never updated."""

    def __init__(self, db: Session) -> None:
        self.db = db
        self.mapper = SessionAttemptMapper()

    def add(self, attempt: SessionAttempt) -> SessionAttempt:
        """Append an attempt; committed before returning so the next read sees it."""
        orm_model = self.mapper.to_orm(attempt)
        with storage_errors(self.db, "add_session_attempt"):
            self.db.add(orm_model)
            self.db.commit()
            self.db.refresh(orm_model)
        return self.mapper.to_domain(orm_model)

    def find_recent_flashcard_ids(
        self, user_id: UserId, since: datetime, *, correct_only: bool = False
    ) -> set[FlashcardId]:
        stmt = (
            select(SessionAttemptORM.flashcard_id)
            .where(
                SessionAttemptORM.user_id == user_id.value,
                SessionAttemptORM.attempted_at >= since,
            )
            .distinct()
        )
        if correct_only:
            stmt = stmt.where(SessionAttemptORM.is_correct.is_(True))

        with storage_errors(self.db, "find_recent_attempts"):
            rows = self.db.execute(stmt).scalars().all()
        return {FlashcardId(flashcard_id) for flashcard_id in rows}

    def find_history(
        self, user_id: UserId, flashcard_id: FlashcardId, limit: int
    ) -> list[SessionAttempt]:
        stmt = (
            select(SessionAttemptORM)
            .where(
                SessionAttemptORM.user_id == user_id.value,
                SessionAttemptORM.flashcard_id == flashcard_id.value,
            )
            .order_by(SessionAttemptORM.attempted_at.desc(), SessionAttemptORM.id.desc())
            .limit(limit)
        )
        with storage_errors(self.db, "find_attempt_history"):
            orm_models = self.db.execute(stmt).scalars().all()
        return [self.mapper.to_domain(orm) for orm in orm_models]

    def find_since(
        self,
        user_id: UserId,
        since: datetime,
        flashcard_ids: list[FlashcardId] | None = None,
    ) -> list[SessionAttempt]:
        stmt = select(SessionAttemptORM).where(
            SessionAttemptORM.user_id == user_id.value,
            SessionAttemptORM.attempted_at >= since,
        )
        if flashcard_ids is not None:
            stmt = stmt.where(
                SessionAttemptORM.flashcard_id.in_([fid.value for fid in flashcard_ids])
            )
        stmt = stmt.order_by(SessionAttemptORM.attempted_at)

        with storage_errors(self.db, "find_attempts_since"):
            orm_models = self.db.execute(stmt).scalars().all()
        return [self.mapper.to_domain(orm) for orm in orm_models]

    def delete_older_than(self, user_id: UserId, cutoff: datetime) -> int:
        stmt = (
            delete(SessionAttemptORM)
            .where(
                SessionAttemptORM.user_id == user_id.value,
                SessionAttemptORM.attempted_at < cutoff,
            )
            .execution_options(synchronize_session=False)
        )
        with storage_errors(self.db, "purge_session_attempts"):
            result = self.db.execute(stmt)
            self.db.commit()
        return result.rowcount or 0

    def delete_all_older_than(self, cutoff: datetime) -> int:
        stmt = (
            delete(SessionAttemptORM)
            .where(SessionAttemptORM.attempted_at < cutoff)
            .execution_options(synchronize_session=False)
        )
        with storage_errors(self.db, "sweep_session_attempts"):
            result = self.db.execute(stmt)
            self.db.commit()
        return result.rowcount or 0
