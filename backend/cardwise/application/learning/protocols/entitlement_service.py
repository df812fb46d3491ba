from typing import Protocol

from cardwise.domain.common.value_objects import UserId


class EntitlementServiceProtocol(Protocol):
    def is_premium(self, user_id: UserId) -> bool:
        """Premium plan, active or trialing, not past its end date."""
        ...
