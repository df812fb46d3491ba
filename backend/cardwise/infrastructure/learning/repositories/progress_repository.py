"""Repository for ProgressRecord domain entities."""

import logging
from collections.abc import Iterable, Iterator

from sqlalchemy import func, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

from cardwise.domain.common.value_objects import FlashcardId, UserId
from cardwise.domain.learning.entities.progress_record import ProgressRecord
from cardwise.domain.learning.exceptions import CorruptStateError
from cardwise.domain.learning.value_objects import CardState
from cardwise.exceptions import ServiceError
from cardwise.infrastructure.common.persistence import storage_errors
from cardwise.infrastructure.learning.mappers.progress_record_mapper import ProgressRecordMapper
from cardwise.models import UserProgress as UserProgressORM

logger = logging.getLogger(__name__)


class ProgressRepository:
    """
    Repository for ProgressRecord persistence.

    Writes are upserts on (user_id, flashcard_id), so two first reviews of the
    same card racing each other never trip the unique constraint.
    """

    def __init__(self, db: Session) -> None:
        """
        Initialize repository.

        Args:
            db: SQLAlchemy database session
        """
        self.db = db
        self.mapper = ProgressRecordMapper()

    def find(self, user_id: UserId, flashcard_id: FlashcardId) -> ProgressRecord | None:
        stmt = select(UserProgressORM).where(
            UserProgressORM.user_id == user_id.value,
            UserProgressORM.flashcard_id == flashcard_id.value,
        )
        with storage_errors(self.db, "find_progress"):
            orm_model = self.db.execute(stmt).scalar_one_or_none()
        return self.mapper.to_domain(orm_model) if orm_model else None

    def find_for_cards(
        self, user_id: UserId, flashcard_ids: list[FlashcardId]
    ) -> dict[FlashcardId, ProgressRecord]:
        """
        Load the records of many cards in a single query.

        Args:
            user_id: User ID value object
            flashcard_ids: Cards to look up

        Returns:
            Mapping of card id to record; cards never reviewed are absent,
            and so are records with an unrecognized state
        """
        if not flashcard_ids:
            return {}
        stmt = select(UserProgressORM).where(
            UserProgressORM.user_id == user_id.value,
            UserProgressORM.flashcard_id.in_([fid.value for fid in flashcard_ids]),
        )
        with storage_errors(self.db, "find_progress_for_cards"):
            orm_models = self.db.execute(stmt).scalars().all()
        return {record.flashcard_id: record for record in self._readable(orm_models)}

    def find_important(self, user_id: UserId) -> list[ProgressRecord]:
        stmt = (
            select(UserProgressORM)
            .where(
                UserProgressORM.user_id == user_id.value,
                UserProgressORM.important.is_(True),
            )
            .order_by(UserProgressORM.flashcard_id)
        )
        with storage_errors(self.db, "find_important_progress"):
            orm_models = self.db.execute(stmt).scalars().all()
        return list(self._readable(orm_models))

    def find_corrupt_ids(self, user_id: UserId) -> set[FlashcardId]:
        stmt = select(UserProgressORM.flashcard_id).where(
            UserProgressORM.user_id == user_id.value,
            UserProgressORM.state.not_in([state.value for state in CardState]),
        )
        with storage_errors(self.db, "find_corrupt_progress"):
            rows = self.db.execute(stmt).scalars().all()
        return {FlashcardId(row) for row in rows}

    def count_important(self, user_id: UserId) -> int:
        stmt = select(func.count(UserProgressORM.id)).where(
            UserProgressORM.user_id == user_id.value,
            UserProgressORM.important.is_(True),
        )
        with storage_errors(self.db, "count_important_progress"):
            return self.db.execute(stmt).scalar() or 0

    def save(self, record: ProgressRecord) -> ProgressRecord:
        """
        Insert or replace the record for (user_id, flashcard_id).

        Uses INSERT ... ON CONFLICT DO UPDATE on PostgreSQL and SQLite; the
        last write wins.

        Args:
            record: The record computed by the scheduler

        Returns:
            Saved record with its database id
        """
        if self.db.bind is None:
            raise ServiceError("Database not bound!")

        dialect = self.db.bind.dialect.name
        values = self.mapper.to_values(record)
        updates = {
            key: value for key, value in values.items() if key not in ("user_id", "flashcard_id")
        }

        if dialect == "postgresql":
            stmt = postgresql.insert(UserProgressORM).values(values)
            stmt = stmt.on_conflict_do_update(
                index_elements=["user_id", "flashcard_id"],
                set_={**updates, "updated_at": func.now()},
            )
        elif dialect == "sqlite":
            stmt = sqlite.insert(UserProgressORM).values(values)
            stmt = stmt.on_conflict_do_update(
                index_elements=["user_id", "flashcard_id"],
                set_={**updates, "updated_at": func.now()},
            )
        else:
            raise ServiceError(f"Unsupported database dialect: {dialect}")

        with storage_errors(self.db, "save_progress"):
            self.db.execute(stmt)
            self.db.commit()
            saved = self.db.execute(
                select(UserProgressORM)
                .where(
                    UserProgressORM.user_id == record.user_id.value,
                    UserProgressORM.flashcard_id == record.flashcard_id.value,
                )
                .execution_options(populate_existing=True)
            ).scalar_one()

        return self.mapper.to_domain(saved)

    def _readable(self, orm_models: Iterable[UserProgressORM]) -> Iterator[ProgressRecord]:
        """Map rows to records, leaving out rows with an unrecognized state."""
        for orm in orm_models:
            try:
                yield self.mapper.to_domain(orm)
            except CorruptStateError as e:
                logger.error(
                    f"Skipping corrupt progress record for flashcard {e.flashcard_id}: "
                    f"state {e.state!r}"
                )
