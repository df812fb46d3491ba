"""Entitlement adapter over the subscriptions table."""

from datetime import datetime

from sqlalchemy import select
from sqlalchemy.orm import Session

from cardwise.application.common.clock import Clock, utc_now
from cardwise.domain.common.value_objects import UserId
from cardwise.infrastructure.common.persistence import as_utc, storage_errors
from cardwise.models import Subscription as SubscriptionORM

PREMIUM_PLAN = "premium"
ENTITLED_STATUSES = frozenset({"active", "trial"})


def _not_ended(ends_at: datetime | None, now: datetime) -> bool:
    ends_at = as_utc(ends_at)
    return ends_at is None or ends_at > now


class SubscriptionEntitlementService:
    """
    Premium means: premium plan, active or in trial, and neither the
    subscription nor the trial has ended. Users without a row are free.
    """

    def __init__(self, db: Session, clock: Clock = utc_now) -> None:
        self.db = db
        self.clock = clock

    def is_premium(self, user_id: UserId) -> bool:
        stmt = select(SubscriptionORM).where(SubscriptionORM.user_id == user_id.value)
        with storage_errors(self.db, "find_subscription"):
            subscription = self.db.execute(stmt).scalar_one_or_none()

        if subscription is None:
            return False

        now = self.clock()
        return (
            subscription.plan == PREMIUM_PLAN
            and subscription.status in ENTITLED_STATUSES
            and _not_ended(subscription.subscription_ends_at, now)
            and _not_ended(subscription.trial_ends_at, now)
        )
