"""Repository for the per-user, per-month AI usage counter."""

from sqlalchemy import func, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

from cardwise.domain.common.value_objects import UserId
from cardwise.domain.learning.entities.quota import QuotaReservation
from cardwise.domain.learning.value_objects import PeriodKey
from cardwise.exceptions import ServiceError
from cardwise.infrastructure.common.persistence import storage_errors
from cardwise.models import AIUsage as AIUsageORM


class QuotaRepository:
    """
    Usage counters with an atomic check-and-reserve.

    The check and the increment are one conditional UPDATE evaluated by the
    database; application code never reads the counter and writes it back.
    """

    def __init__(self, db: Session) -> None:
        """
        Initialize repository.

        Args:
            db: SQLAlchemy database session
        """
        self.db = db

    def _insert_if_absent(self, user_id: UserId, period_key: PeriodKey, limit: int) -> None:
        if self.db.bind is None:
            raise ServiceError("Database not bound!")

        dialect = self.db.bind.dialect.name
        values = {
            "user_id": user_id.value,
            "period_key": period_key.value,
            "usage_count": 0,
            "usage_limit": limit,
        }

        if dialect == "postgresql":
            stmt = postgresql.insert(AIUsageORM).values(values)
        elif dialect == "sqlite":
            stmt = sqlite.insert(AIUsageORM).values(values)
        else:
            raise ServiceError(f"Unsupported database dialect: {dialect}")

        self.db.execute(stmt.on_conflict_do_nothing(index_elements=["user_id", "period_key"]))

    def check_and_reserve(
        self, user_id: UserId, period_key: PeriodKey, count: int, limit: int
    ) -> QuotaReservation:
        """
        Atomically add `count` to the counter if the result stays within `limit`.

        Args:
            user_id: User ID value object
            period_key: Billing month
            count: Units to reserve
            limit: Allotment of the user's plan

        Returns:
            Accepted reservation with the new count, or a rejected one with the
            unchanged count

        Raises:
            StorageUnavailableError: If the database cannot be reached
        """
        with storage_errors(self.db, "check_and_reserve"):
            self._insert_if_absent(user_id, period_key, limit)

            stmt = (
                update(AIUsageORM)
                .where(
                    AIUsageORM.user_id == user_id.value,
                    AIUsageORM.period_key == period_key.value,
                    AIUsageORM.usage_count + count <= limit,
                )
                .values(
                    usage_count=AIUsageORM.usage_count + count,
                    usage_limit=limit,
                    updated_at=func.now(),
                )
                .returning(AIUsageORM.usage_count)
                .execution_options(synchronize_session=False)
            )
            new_count = self.db.execute(stmt).scalar_one_or_none()

            if new_count is None:
                current = self._read_usage(user_id, period_key)
                self.db.commit()
                return QuotaReservation.rejected(current, limit)

            self.db.commit()

        return QuotaReservation.accepted(new_count, limit)

    def get_usage(self, user_id: UserId, period_key: PeriodKey) -> int:
        with storage_errors(self.db, "get_usage"):
            return self._read_usage(user_id, period_key)

    def _read_usage(self, user_id: UserId, period_key: PeriodKey) -> int:
        stmt = select(AIUsageORM.usage_count).where(
            AIUsageORM.user_id == user_id.value,
            AIUsageORM.period_key == period_key.value,
        )
        return self.db.execute(stmt).scalar_one_or_none() or 0
