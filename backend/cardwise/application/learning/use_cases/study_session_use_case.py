"""Use case for study sessions: picking cards and applying answers."""

from datetime import datetime, timedelta

import structlog

from cardwise.application.common.clock import Clock, utc_now
from cardwise.application.learning.protocols.card_repository import CardRepositoryProtocol
from cardwise.application.learning.protocols.entitlement_service import (
    EntitlementServiceProtocol,
)
from cardwise.application.learning.protocols.progress_repository import (
    ProgressRepositoryProtocol,
)
from cardwise.application.learning.protocols.session_attempt_repository import (
    SessionAttemptRepositoryProtocol,
)
from cardwise.application.learning.use_cases.dtos import ReviewResult, StudyCard, StudySession
from cardwise.domain.common.value_objects import FlashcardId, UserId
from cardwise.domain.learning.entities.flashcard import Flashcard
from cardwise.domain.learning.entities.progress_record import ProgressRecord
from cardwise.domain.learning.entities.session_attempt import SessionAttempt
from cardwise.domain.learning.exceptions import CardNotDueError
from cardwise.domain.learning.services import CardScheduler, DueForecast, DueForecastService
from cardwise.domain.learning.value_objects import ReviewOutcome, ScopeKind, SessionScope
from cardwise.exceptions import (
    FlashcardNotFoundError,
    ImportantLimitReachedError,
    StorageUnavailableError,
    ValidationError,
)

logger = structlog.get_logger(__name__)


class StudySessionUseCase:
    """
    Orchestrates the scheduler, the progress store and the attempt log.

    Selection: candidates in scope, keep the due ones (never reviewed or
    next_review_date <= now), drop those attempted within the suppression
    window. When fewer than `top_up_threshold` cards remain, due cards
    answered correctly inside the window are added back.
    """

    def __init__(
        self,
        card_repository: CardRepositoryProtocol,
        progress_repository: ProgressRepositoryProtocol,
        attempt_repository: SessionAttemptRepositoryProtocol,
        entitlement_service: EntitlementServiceProtocol,
        scheduler: CardScheduler,
        suppression_window: timedelta = timedelta(minutes=20),
        top_up_threshold: int = 3,
        free_max_cards_per_session: int = 12,
        free_max_important_cards: int = 5,
        clock: Clock = utc_now,
    ) -> None:
        """Initialize use case with repository protocols and session policy."""
        self.card_repository = card_repository
        self.progress_repository = progress_repository
        self.attempt_repository = attempt_repository
        self.entitlement_service = entitlement_service
        self.scheduler = scheduler
        self.suppression_window = suppression_window
        self.top_up_threshold = top_up_threshold
        self.free_max_cards_per_session = free_max_cards_per_session
        self.free_max_important_cards = free_max_important_cards
        self.clock = clock

    def select_session(
        self, user_id: int, scope: SessionScope, limit: int | None = None
    ) -> StudySession:
        """
        Produce the next batch of cards for a session.

        Args:
            user_id: ID of the user
            scope: Category, named list, topic, deck, important cards or all
            limit: Maximum number of cards; free users are capped regardless

        Returns:
            StudySession with due cards first (most overdue first, then new
            cards by id), followed by any top-up cards

        Raises:
            ValidationError: If limit is less than 1
        """
        if limit is not None and limit < 1:
            raise ValidationError("limit must be at least 1")

        user_id_vo = UserId(user_id)
        now = self.clock()

        cards, progress = self._candidates(user_id_vo, scope)

        due = [card for card in cards if self._is_due(progress.get(card.id), now)]
        due.sort(key=lambda card: self._due_order(progress.get(card.id), card))

        window_start = now - self.suppression_window
        recent = self._recent_ids(user_id_vo, window_start, correct_only=False)
        selected = [card for card in due if card.id not in recent]
        suppressed_count = len(due) - len(selected)

        study_cards = [
            StudyCard(flashcard=card, progress=progress.get(card.id)) for card in selected
        ]

        if len(selected) < self.top_up_threshold and suppressed_count:
            correct_recent = self._recent_ids(user_id_vo, window_start, correct_only=True)
            study_cards.extend(
                StudyCard(flashcard=card, progress=progress.get(card.id), top_up=True)
                for card in due
                if card.id in recent and card.id in correct_recent
            )

        effective_limit = limit
        if not self.entitlement_service.is_premium(user_id_vo):
            effective_limit = min(
                limit or self.free_max_cards_per_session, self.free_max_cards_per_session
            )

        capped = effective_limit is not None and len(study_cards) > effective_limit
        if capped:
            study_cards = study_cards[:effective_limit]

        logger.info(
            "study_session_selected",
            user_id=user_id,
            scope=scope.kind.value,
            candidates=len(cards),
            due=len(due),
            suppressed=suppressed_count,
            returned=len(study_cards),
        )

        return StudySession(
            cards=study_cards,
            candidate_count=len(cards),
            due_count=len(due),
            suppressed_count=suppressed_count,
            capped=capped,
        )

    def review_outcome(
        self,
        user_id: int,
        flashcard_id: int,
        outcome: ReviewOutcome | str | bool,
        session_id: str | None = None,
        require_due: bool = False,
    ) -> ReviewResult:
        """
        Apply an answer: schedule, persist the record, then log the attempt.

        The attempt is written after the progress record, so a card that shows
        up as just attempted always has its new schedule stored.

        Args:
            user_id: ID of the user
            flashcard_id: ID of the answered card
            outcome: again/hard/good/easy, or correct/incorrect
            session_id: Optional client session identifier
            require_due: Refuse the review when the card is not due yet

        Returns:
            ReviewResult with the stored record and attempt

        Raises:
            FlashcardNotFoundError: If the card does not exist
            InvalidOutcomeError: If the outcome is not recognized
            CorruptStateError: If the stored record has an unknown state
            CardNotDueError: If require_due is set and the card is not due
        """
        parsed = ReviewOutcome.parse(outcome)
        user_id_vo = UserId(user_id)
        flashcard_id_vo = FlashcardId(flashcard_id)

        if self.card_repository.find_by_id(flashcard_id_vo) is None:
            raise FlashcardNotFoundError(flashcard_id)

        now = self.clock()
        current = self.progress_repository.find(user_id_vo, flashcard_id_vo)

        if (
            require_due
            and current is not None
            and current.next_review_date is not None
            and not current.is_due(now)
        ):
            raise CardNotDueError(flashcard_id, current.next_review_date)

        updated = self.scheduler.schedule(user_id_vo, flashcard_id_vo, current, parsed, now)
        saved = self.progress_repository.save(updated)

        attempt = self.attempt_repository.add(
            SessionAttempt.create(
                user_id=user_id_vo,
                flashcard_id=flashcard_id_vo,
                is_correct=parsed.is_correct,
                attempted_at=now,
                session_id=session_id,
            )
        )

        logger.info(
            "review_recorded",
            user_id=user_id,
            flashcard_id=flashcard_id,
            outcome=parsed.value,
            previous_state=current.state.value if current else None,
            state=saved.state.value,
            next_review_date=saved.next_review_date.isoformat()
            if saved.next_review_date
            else None,
        )

        return ReviewResult(progress=saved, attempt=attempt)

    def progress(self, user_id: int, flashcard_id: int) -> ProgressRecord | None:
        """
        Get the progress record of a card, None if it was never reviewed.

        Raises:
            FlashcardNotFoundError: If the card does not exist
        """
        flashcard_id_vo = FlashcardId(flashcard_id)
        if self.card_repository.find_by_id(flashcard_id_vo) is None:
            raise FlashcardNotFoundError(flashcard_id)
        return self.progress_repository.find(UserId(user_id), flashcard_id_vo)

    def set_important(self, user_id: int, flashcard_id: int, important: bool) -> ProgressRecord:
        """
        Flag or unflag a card as important.

        Flagging a card that was never reviewed creates a NEW record for it.

        Raises:
            FlashcardNotFoundError: If the card does not exist
            ImportantLimitReachedError: If a free user already flagged the maximum
        """
        user_id_vo = UserId(user_id)
        flashcard_id_vo = FlashcardId(flashcard_id)

        if self.card_repository.find_by_id(flashcard_id_vo) is None:
            raise FlashcardNotFoundError(flashcard_id)

        record = self.progress_repository.find(user_id_vo, flashcard_id_vo)
        if record is None:
            record = ProgressRecord.create(user_id_vo, flashcard_id_vo)

        if record.important == important:
            return record

        if (
            important
            and not self.entitlement_service.is_premium(user_id_vo)
            and self.progress_repository.count_important(user_id_vo)
            >= self.free_max_important_cards
        ):
            logger.info(
                "important_limit_reached",
                user_id=user_id,
                limit=self.free_max_important_cards,
            )
            raise ImportantLimitReachedError(self.free_max_important_cards)

        saved = self.progress_repository.save(record.evolve(important=important))
        logger.info(
            "important_flag_set",
            user_id=user_id,
            flashcard_id=flashcard_id,
            important=important,
        )
        return saved

    def important_cards(self, user_id: int) -> list[StudyCard]:
        """Cards flagged important, whether due or not."""
        records = self.progress_repository.find_important(UserId(user_id))
        by_card = {record.flashcard_id: record for record in records}
        cards = self.card_repository.find_by_ids(list(by_card))
        return [StudyCard(flashcard=card, progress=by_card.get(card.id)) for card in cards]

    def due_forecast(self, user_id: int) -> DueForecast:
        """Number of cards coming due now, soon, today and tomorrow."""
        cards = self._without_corrupt(
            UserId(user_id), self.card_repository.find_by_scope(SessionScope.all_cards())
        )
        progress = self.progress_repository.find_for_cards(
            UserId(user_id), [card.id for card in cards]
        )
        return DueForecastService.forecast(len(cards), progress.values(), self.clock())

    def _candidates(
        self, user_id: UserId, scope: SessionScope
    ) -> tuple[list[Flashcard], dict[FlashcardId, ProgressRecord]]:
        if scope.kind is ScopeKind.IMPORTANT:
            records = self.progress_repository.find_important(user_id)
            progress = {record.flashcard_id: record for record in records}
            return self.card_repository.find_by_ids(list(progress)), progress

        cards = self._without_corrupt(user_id, self.card_repository.find_by_scope(scope))
        progress = self.progress_repository.find_for_cards(user_id, [card.id for card in cards])
        return cards, progress

    def _without_corrupt(self, user_id: UserId, cards: list[Flashcard]) -> list[Flashcard]:
        corrupt = self.progress_repository.find_corrupt_ids(user_id)
        if not corrupt:
            return cards
        kept = [card for card in cards if card.id not in corrupt]
        if len(kept) < len(cards):
            logger.error(
                "corrupt_progress_skipped",
                user_id=user_id.value,
                flashcard_ids=sorted(card.id.value for card in cards if card.id in corrupt),
            )
        return kept

    def _recent_ids(
        self, user_id: UserId, window_start: datetime, *, correct_only: bool
    ) -> set[FlashcardId]:
        # Selection still works without the attempt log; it just cannot suppress repeats
        try:
            return self.attempt_repository.find_recent_flashcard_ids(
                user_id, window_start, correct_only=correct_only
            )
        except StorageUnavailableError as e:
            logger.warning(
                "attempt_log_unavailable",
                user_id=user_id.value,
                error=str(e),
            )
            return set()

    @staticmethod
    def _is_due(record: ProgressRecord | None, now: datetime) -> bool:
        return record is None or record.is_due(now)

    @staticmethod
    def _due_order(record: ProgressRecord | None, card: Flashcard) -> tuple:
        # Reviewed cards by due date first, never-scheduled cards after, both by id
        if record is None or record.next_review_date is None:
            return (1, float("inf"), card.id.value)
        return (0, record.next_review_date.timestamp(), card.id.value)
