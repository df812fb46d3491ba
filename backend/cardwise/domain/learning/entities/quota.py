"""Results reported by the usage quota guard."""

from dataclasses import dataclass


@dataclass(frozen=True)
class QuotaReservation:
    """
    Outcome of an atomic check-and-reserve.

    A rejected reservation is a normal result, not an error: usage_count is
    the unchanged stored value and remaining is never negative.
    """

    success: bool
    usage_count: int
    limit: int
    remaining: int

    @classmethod
    def accepted(cls, usage_count: int, limit: int) -> "QuotaReservation":
        return cls(
            success=True,
            usage_count=usage_count,
            limit=limit,
            remaining=limit - usage_count,
        )

    @classmethod
    def rejected(cls, usage_count: int, limit: int) -> "QuotaReservation":
        return cls(
            success=False,
            usage_count=usage_count,
            limit=limit,
            remaining=max(0, limit - usage_count),
        )


@dataclass(frozen=True)
class QuotaStatus:
    """Advisory, possibly stale view of a user's quota for display."""

    usage_count: int
    limit: int
    is_premium: bool
    period_key: str

    @property
    def remaining(self) -> int:
        return max(0, self.limit - self.usage_count)

    @property
    def can_use(self) -> bool:
        return self.usage_count < self.limit
