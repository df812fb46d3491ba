"""Domain service bucketing cards by when they next come due."""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, time, timedelta

from cardwise.domain.learning.entities.progress_record import ProgressRecord


@dataclass(frozen=True)
class DueForecast:
    """Card counts per due-time bucket. Buckets are disjoint."""

    due_now: int = 0
    due_in_15_minutes: int = 0
    due_in_next_hour: int = 0
    due_today: int = 0
    due_tomorrow: int = 0

    @property
    def total(self) -> int:
        return (
            self.due_now
            + self.due_in_15_minutes
            + self.due_in_next_hour
            + self.due_today
            + self.due_tomorrow
        )


class DueForecastService:
    """Stateless domain service for the "what's coming up" summary."""

    @staticmethod
    def forecast(
        card_count: int, records: Iterable[ProgressRecord], now: datetime
    ) -> DueForecast:
        """
        Count cards per due bucket.

        Cards without a progress record are new and count as due now. Cards
        due after the end of tomorrow are left out.

        Args:
            card_count: Number of cards in the catalogue the user studies from
            records: The user's progress records for those cards
            now: Reference time (timezone-aware UTC)

        Returns:
            DueForecast with one count per bucket
        """
        in_15_minutes = now + timedelta(minutes=15)
        in_one_hour = now + timedelta(hours=1)
        end_of_today = datetime.combine(now.date(), time.max, tzinfo=now.tzinfo)
        end_of_tomorrow = end_of_today + timedelta(days=1)

        counts = [0, 0, 0, 0, 0]
        seen = 0
        for record in records:
            seen += 1
            due = record.next_review_date
            if due is None or due <= now:
                counts[0] += 1
            elif due <= in_15_minutes:
                counts[1] += 1
            elif due <= in_one_hour:
                counts[2] += 1
            elif due <= end_of_today:
                counts[3] += 1
            elif due <= end_of_tomorrow:
                counts[4] += 1

        # Unseen cards
        counts[0] += max(0, card_count - seen)
        return DueForecast(*counts)
