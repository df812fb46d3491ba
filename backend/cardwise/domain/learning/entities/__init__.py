"""Learning context entities."""

from .flashcard import Flashcard
from .progress_record import ProgressRecord
from .quota import QuotaReservation, QuotaStatus
from .session_attempt import DailyAttemptStats, SessionAttempt

__all__ = [
    "DailyAttemptStats",
    "Flashcard",
    "ProgressRecord",
    "QuotaReservation",
    "QuotaStatus",
    "SessionAttempt",
]
