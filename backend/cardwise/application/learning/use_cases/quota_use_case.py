"""Use case for the metered AI usage quota."""

import structlog

from cardwise.application.common.clock import Clock, utc_now
from cardwise.application.learning.protocols.entitlement_service import (
    EntitlementServiceProtocol,
)
from cardwise.application.learning.protocols.quota_repository import QuotaRepositoryProtocol
from cardwise.domain.common.value_objects import UserId
from cardwise.domain.learning.entities.quota import QuotaReservation, QuotaStatus
from cardwise.domain.learning.value_objects import PeriodKey
from cardwise.exceptions import QuotaExceededError, ValidationError

logger = structlog.get_logger(__name__)


class QuotaUseCase:
    """Check-and-reserve over the monthly AI usage counter."""

    def __init__(
        self,
        quota_repository: QuotaRepositoryProtocol,
        entitlement_service: EntitlementServiceProtocol,
        free_limit: int = 10,
        premium_limit: int = 1000,
        clock: Clock = utc_now,
    ) -> None:
        """Initialize use case with repository protocols and plan limits."""
        self.quota_repository = quota_repository
        self.entitlement_service = entitlement_service
        self.free_limit = free_limit
        self.premium_limit = premium_limit
        self.clock = clock

    def _resolve(self, user_id_vo: UserId) -> tuple[int, bool, PeriodKey]:
        is_premium = self.entitlement_service.is_premium(user_id_vo)
        limit = self.premium_limit if is_premium else self.free_limit
        return limit, is_premium, PeriodKey.for_instant(self.clock())

    def reserve(self, user_id: int, count: int = 1) -> QuotaReservation:
        """
        Atomically reserve `count` units of the current period.

        Exhaustion is reported through `success=False`, never raised.

        Args:
            user_id: ID of the user
            count: Units to reserve

        Returns:
            QuotaReservation with the usage snapshot

        Raises:
            ValidationError: If count is less than 1
            StorageUnavailableError: If the counter cannot be reached
        """
        if count < 1:
            raise ValidationError("count must be at least 1")

        user_id_vo = UserId(user_id)
        limit, is_premium, period_key = self._resolve(user_id_vo)

        reservation = self.quota_repository.check_and_reserve(
            user_id_vo, period_key, count, limit
        )

        if reservation.success:
            logger.info(
                "quota_reserved",
                user_id=user_id,
                period_key=str(period_key),
                count=count,
                usage_count=reservation.usage_count,
                limit=reservation.limit,
            )
        else:
            logger.info(
                "quota_rejected",
                user_id=user_id,
                period_key=str(period_key),
                count=count,
                usage_count=reservation.usage_count,
                limit=reservation.limit,
                is_premium=is_premium,
            )
        return reservation

    def require(self, user_id: int, count: int = 1) -> QuotaReservation:
        """
        Reserve `count` units or raise.

        Raises:
            QuotaExceededError: If the reservation was rejected
        """
        reservation = self.reserve(user_id, count)
        if not reservation.success:
            raise QuotaExceededError(
                usage_count=reservation.usage_count,
                limit=reservation.limit,
                remaining=reservation.remaining,
            )
        return reservation

    def query(self, user_id: int) -> QuotaStatus:
        """Advisory read of the current usage; may be stale by the time it is shown."""
        user_id_vo = UserId(user_id)
        limit, is_premium, period_key = self._resolve(user_id_vo)
        usage_count = self.quota_repository.get_usage(user_id_vo, period_key)
        return QuotaStatus(
            usage_count=usage_count,
            limit=limit,
            is_premium=is_premium,
            period_key=str(period_key),
        )
