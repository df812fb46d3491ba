"""Protocol for per-user, per-period usage counters."""

from typing import Protocol

from cardwise.domain.common.value_objects import UserId
from cardwise.domain.learning.entities.quota import QuotaReservation
from cardwise.domain.learning.value_objects import PeriodKey


class QuotaRepositoryProtocol(Protocol):
    def check_and_reserve(
        self, user_id: UserId, period_key: PeriodKey, count: int, limit: int
    ) -> QuotaReservation:
        """
        Atomically add `count` to the counter if the result stays within `limit`.

        The check and the increment are a single conditional write, so
        concurrent callers can never push the counter past the limit. The
        counter row is created on first use.

        Returns:
            Accepted reservation with the new count, or a rejected one with
            the unchanged count

        Raises:
            StorageUnavailableError: If the database cannot be reached
        """
        ...

    def get_usage(self, user_id: UserId, period_key: PeriodKey) -> int:
        """Current counter value, 0 when no row exists."""
        ...
