"""Use case for the session attempt log."""

from datetime import datetime, timedelta

import structlog

from cardwise.application.common.clock import Clock, utc_now
from cardwise.application.learning.protocols.card_repository import CardRepositoryProtocol
from cardwise.application.learning.protocols.session_attempt_repository import (
    SessionAttemptRepositoryProtocol,
)
from cardwise.domain.common.value_objects import FlashcardId, UserId
from cardwise.domain.learning.entities.session_attempt import DailyAttemptStats, SessionAttempt
from cardwise.domain.learning.services import AttemptHistogramService
from cardwise.domain.learning.value_objects import ScopeKind, SessionScope
from cardwise.exceptions import FlashcardNotFoundError, ValidationError

logger = structlog.get_logger(__name__)

DEFAULT_HISTORY_LIMIT = 10


class SessionAttemptUseCase:
    """Record answered cards and report on them."""

    def __init__(
        self,
        attempt_repository: SessionAttemptRepositoryProtocol,
        card_repository: CardRepositoryProtocol,
        suppression_window: timedelta = timedelta(minutes=20),
        retention: timedelta = timedelta(days=7),
        clock: Clock = utc_now,
    ) -> None:
        """Initialize use case with repository protocols and time horizons."""
        self.attempt_repository = attempt_repository
        self.card_repository = card_repository
        self.suppression_window = suppression_window
        self.retention = retention
        self.clock = clock

    def record(
        self,
        user_id: int,
        flashcard_id: int,
        is_correct: bool,
        session_id: str | None = None,
        attempted_at: datetime | None = None,
    ) -> SessionAttempt:
        """Append an attempt. No deduplication."""
        attempt = SessionAttempt.create(
            user_id=UserId(user_id),
            flashcard_id=FlashcardId(flashcard_id),
            is_correct=is_correct,
            attempted_at=attempted_at or self.clock(),
            session_id=session_id,
        )
        return self.attempt_repository.add(attempt)

    def recently_attempted(
        self, user_id: int, window_start: datetime | None = None
    ) -> set[FlashcardId]:
        """Cards attempted at or after `window_start` (default: the suppression window)."""
        since = window_start or self.clock() - self.suppression_window
        return self.attempt_repository.find_recent_flashcard_ids(UserId(user_id), since)

    def history(
        self, user_id: int, flashcard_id: int, limit: int = DEFAULT_HISTORY_LIMIT
    ) -> list[SessionAttempt]:
        """
        Most recent attempts of a card, newest first.

        Raises:
            ValidationError: If limit is less than 1
            FlashcardNotFoundError: If the card does not exist
        """
        if limit < 1:
            raise ValidationError("limit must be at least 1")

        flashcard_id_vo = FlashcardId(flashcard_id)
        if self.card_repository.find_by_id(flashcard_id_vo) is None:
            raise FlashcardNotFoundError(flashcard_id)

        return self.attempt_repository.find_history(UserId(user_id), flashcard_id_vo, limit)

    def purge(self, user_id: int, older_than: datetime | None = None) -> int:
        """
        Delete the user's attempts beyond the retention horizon.

        Idempotent: running it again deletes nothing more.
        """
        cutoff = older_than or self.clock() - self.retention
        deleted = self.attempt_repository.delete_older_than(UserId(user_id), cutoff)
        logger.info(
            "session_attempts_purged",
            user_id=user_id,
            cutoff=cutoff.isoformat(),
            deleted=deleted,
        )
        return deleted

    def purge_all(self, older_than: datetime | None = None) -> int:
        """Maintenance sweep over every user."""
        cutoff = older_than or self.clock() - self.retention
        deleted = self.attempt_repository.delete_all_older_than(cutoff)
        logger.info("session_attempts_swept", cutoff=cutoff.isoformat(), deleted=deleted)
        return deleted

    def daily_histogram(
        self, user_id: int, category: str | None = None, window_days: int = 30
    ) -> list[DailyAttemptStats]:
        """
        Correct/incorrect counts per UTC day over the last `window_days` days.

        Args:
            user_id: ID of the user
            category: Restrict to cards of this category
            window_days: How many days back to look

        Returns:
            One entry per day with attempts, ascending by day

        Raises:
            ValidationError: If window_days is less than 1
        """
        if window_days < 1:
            raise ValidationError("window_days must be at least 1")

        since = self.clock() - timedelta(days=window_days)

        flashcard_ids: list[FlashcardId] | None = None
        if category:
            cards = self.card_repository.find_by_scope(
                SessionScope(kind=ScopeKind.CATEGORY, value=category)
            )
            if not cards:
                return []
            flashcard_ids = [card.id for card in cards]

        attempts = self.attempt_repository.find_since(UserId(user_id), since, flashcard_ids)
        return AttemptHistogramService.daily(attempts)
