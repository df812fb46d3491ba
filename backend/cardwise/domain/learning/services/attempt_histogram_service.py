"""Domain service aggregating session attempts per calendar day."""

from collections import Counter
from collections.abc import Iterable
from datetime import UTC

from cardwise.domain.learning.entities.session_attempt import DailyAttemptStats, SessionAttempt


class AttemptHistogramService:
    """Stateless domain service for the daily accuracy chart."""

    @staticmethod
    def daily(attempts: Iterable[SessionAttempt]) -> list[DailyAttemptStats]:
        """
        Group attempts by UTC calendar day.

        Days without attempts are omitted; the result is sorted ascending.
        """
        correct: Counter = Counter()
        incorrect: Counter = Counter()

        for attempt in attempts:
            attempted_at = attempt.attempted_at
            if attempted_at.tzinfo is not None:
                attempted_at = attempted_at.astimezone(UTC)
            day = attempted_at.date()
            if attempt.is_correct:
                correct[day] += 1
            else:
                incorrect[day] += 1

        days = sorted(set(correct) | set(incorrect))
        return [
            DailyAttemptStats(day=day, correct=correct[day], incorrect=incorrect[day])
            for day in days
        ]
