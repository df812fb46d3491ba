"""Tests for StudySessionUseCase with in-memory collaborators."""

from datetime import UTC, datetime, timedelta

import pytest

from cardwise.application.learning.use_cases.study_session_use_case import StudySessionUseCase
from cardwise.domain.common.value_objects import (
    FlashcardId,
    ProgressRecordId,
    SessionAttemptId,
    UserId,
)
from cardwise.domain.learning.entities.flashcard import Flashcard
from cardwise.domain.learning.entities.progress_record import ProgressRecord
from cardwise.domain.learning.entities.session_attempt import SessionAttempt
from cardwise.domain.learning.exceptions import CardNotDueError, InvalidOutcomeError
from cardwise.domain.learning.services import CardScheduler
from cardwise.domain.learning.value_objects import CardState, CardType, ScopeKind, SessionScope
from cardwise.exceptions import (
    FlashcardNotFoundError,
    ImportantLimitReachedError,
    StorageUnavailableError,
    ValidationError,
)

NOW = datetime(2026, 3, 10, 12, 0, tzinfo=UTC)
USER = 1


class FakeCardRepository:
    def __init__(self, cards: list[Flashcard]) -> None:
        self.cards = {card.id: card for card in cards}

    def find_by_id(self, flashcard_id):
        return self.cards.get(flashcard_id)

    def find_by_scope(self, scope):
        return sorted(
            (card for card in self.cards.values() if card.matches(scope)),
            key=lambda card: card.id.value,
        )

    def find_by_ids(self, flashcard_ids):
        return sorted(
            (self.cards[fid] for fid in flashcard_ids if fid in self.cards),
            key=lambda card: card.id.value,
        )


class FakeProgressRepository:
    def __init__(self) -> None:
        self.records: dict[tuple[int, int], ProgressRecord] = {}
        self.corrupt: set[tuple[int, int]] = set()

    def find(self, user_id, flashcard_id):
        return self.records.get((user_id.value, flashcard_id.value))

    def find_for_cards(self, user_id, flashcard_ids):
        return {
            fid: self.records[(user_id.value, fid.value)]
            for fid in flashcard_ids
            if (user_id.value, fid.value) in self.records
        }

    def find_important(self, user_id):
        return [
            record
            for (uid, _), record in sorted(self.records.items())
            if uid == user_id.value and record.important
        ]

    def find_corrupt_ids(self, user_id):
        return {FlashcardId(fid) for uid, fid in self.corrupt if uid == user_id.value}

    def count_important(self, user_id):
        return len(self.find_important(user_id))

    def save(self, record):
        key = (record.user_id.value, record.flashcard_id.value)
        existing = self.records.get(key)
        record_id = existing.id if existing else ProgressRecordId(len(self.records) + 1)
        saved = record.evolve(id=record_id)
        self.records[key] = saved
        return saved


class FakeAttemptRepository:
    def __init__(self) -> None:
        self.attempts: list[SessionAttempt] = []

    def add(self, attempt):
        stored = SessionAttempt(
            id=SessionAttemptId(len(self.attempts) + 1),
            user_id=attempt.user_id,
            flashcard_id=attempt.flashcard_id,
            attempted_at=attempt.attempted_at,
            is_correct=attempt.is_correct,
            session_id=attempt.session_id,
        )
        self.attempts.append(stored)
        return stored

    def find_recent_flashcard_ids(self, user_id, since, *, correct_only=False):
        return {
            a.flashcard_id
            for a in self.attempts
            if a.user_id == user_id
            and a.attempted_at >= since
            and (a.is_correct or not correct_only)
        }


class UnavailableAttemptRepository(FakeAttemptRepository):
    def find_recent_flashcard_ids(self, user_id, since, *, correct_only=False):
        raise StorageUnavailableError()


class FakeEntitlementService:
    def __init__(self, premium: bool = False) -> None:
        self.premium = premium

    def is_premium(self, user_id):
        return self.premium


def _card(card_id: int, category: str = "python", **kwargs) -> Flashcard:
    return Flashcard(
        id=FlashcardId(card_id),
        question=f"Question {card_id}?",
        answer=f"Answer {card_id}",
        card_type=CardType.BASIC,
        category=category,
        **kwargs,
    )


class Clock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def clock() -> Clock:
    return Clock(NOW)


@pytest.fixture
def progress_repository() -> FakeProgressRepository:
    return FakeProgressRepository()


@pytest.fixture
def attempt_repository() -> FakeAttemptRepository:
    return FakeAttemptRepository()


def _use_case(
    cards: list[Flashcard],
    progress_repository: FakeProgressRepository,
    attempt_repository: FakeAttemptRepository,
    clock: Clock,
    premium: bool = False,
    **kwargs,
) -> StudySessionUseCase:
    return StudySessionUseCase(
        card_repository=FakeCardRepository(cards),
        progress_repository=progress_repository,
        attempt_repository=attempt_repository,
        entitlement_service=FakeEntitlementService(premium),
        scheduler=CardScheduler(),
        clock=clock,
        **kwargs,
    )


def _ids(session) -> list[int]:
    return [card.flashcard.id.value for card in session.cards]


CATEGORY = SessionScope(kind=ScopeKind.CATEGORY, value="python")


class TestSelectSession:
    def test_new_cards_in_scope_are_due(self, progress_repository, attempt_repository, clock):
        cards = [_card(1), _card(2), _card(3, category="sql")]
        use_case = _use_case(cards, progress_repository, attempt_repository, clock)

        session = use_case.select_session(USER, CATEGORY)

        assert _ids(session) == [1, 2]
        assert session.candidate_count == 2
        assert session.due_count == 2

    def test_not_due_cards_are_left_out(self, progress_repository, attempt_repository, clock):
        cards = [_card(1), _card(2)]
        progress_repository.save(
            ProgressRecord(
                id=ProgressRecordId(0),
                user_id=UserId(USER),
                flashcard_id=FlashcardId(1),
                state=CardState.REVIEW,
                interval_days=3,
                next_review_date=NOW + timedelta(days=3),
            )
        )
        use_case = _use_case(cards, progress_repository, attempt_repository, clock)

        session = use_case.select_session(USER, CATEGORY)

        assert _ids(session) == [2]

    def test_corrupt_card_is_left_out(self, progress_repository, attempt_repository, clock):
        progress_repository.corrupt.add((USER, 1))
        use_case = _use_case([_card(1), _card(2)], progress_repository, attempt_repository, clock)

        session = use_case.select_session(USER, CATEGORY)

        assert _ids(session) == [2]
        assert session.candidate_count == 1

    def test_most_overdue_first_then_new_cards(
        self, progress_repository, attempt_repository, clock
    ):
        cards = [_card(1), _card(2), _card(3)]
        for card_id, overdue in ((2, timedelta(hours=1)), (3, timedelta(days=2))):
            progress_repository.save(
                ProgressRecord(
                    id=ProgressRecordId(0),
                    user_id=UserId(USER),
                    flashcard_id=FlashcardId(card_id),
                    state=CardState.REVIEW,
                    interval_days=1,
                    next_review_date=NOW - overdue,
                )
            )
        use_case = _use_case(cards, progress_repository, attempt_repository, clock)

        session = use_case.select_session(USER, CATEGORY)

        assert _ids(session) == [3, 2, 1]

    def test_answered_card_is_excluded_from_next_session(
        self, progress_repository, attempt_repository, clock
    ):
        cards = [_card(i) for i in range(1, 6)]
        use_case = _use_case(cards, progress_repository, attempt_repository, clock)

        use_case.review_outcome(USER, 1, "again")
        # Due again after the first learning step, still inside the window
        clock.now = NOW + timedelta(minutes=11)
        session = use_case.select_session(USER, CATEGORY)

        assert 1 not in _ids(session)
        assert session.suppressed_count == 1

    def test_suppression_window_expires(self, progress_repository, attempt_repository, clock):
        cards = [_card(i) for i in range(1, 6)]
        use_case = _use_case(cards, progress_repository, attempt_repository, clock)

        use_case.review_outcome(USER, 1, "again")
        clock.now = NOW + timedelta(minutes=21)
        session = use_case.select_session(USER, CATEGORY)

        assert 1 in _ids(session)
        assert session.suppressed_count == 0

    def test_top_up_with_recently_correct_due_cards(
        self, progress_repository, attempt_repository, clock
    ):
        cards = [_card(1), _card(2), _card(3)]
        use_case = _use_case(cards, progress_repository, attempt_repository, clock)

        use_case.review_outcome(USER, 1, "good")
        use_case.review_outcome(USER, 2, "again")
        # Both come due again while still inside the suppression window
        clock.now = NOW + timedelta(minutes=11)
        session = use_case.select_session(USER, CATEGORY)

        assert _ids(session) == [3, 1]
        assert [card.top_up for card in session.cards] == [False, True]

    def test_no_top_up_when_enough_cards(self, progress_repository, attempt_repository, clock):
        cards = [_card(i) for i in range(1, 6)]
        use_case = _use_case(cards, progress_repository, attempt_repository, clock)

        use_case.review_outcome(USER, 1, "good")
        clock.now = NOW + timedelta(minutes=11)
        session = use_case.select_session(USER, CATEGORY)

        assert _ids(session) == [2, 3, 4, 5]

    def test_attempt_log_outage_degrades_to_no_exclusions(self, progress_repository, clock):
        cards = [_card(1), _card(2)]
        use_case = _use_case(cards, progress_repository, UnavailableAttemptRepository(), clock)

        session = use_case.select_session(USER, CATEGORY)

        assert _ids(session) == [1, 2]
        assert session.suppressed_count == 0

    def test_free_users_are_capped(self, progress_repository, attempt_repository, clock):
        cards = [_card(i) for i in range(1, 21)]
        use_case = _use_case(cards, progress_repository, attempt_repository, clock)

        session = use_case.select_session(USER, SessionScope.all_cards(), limit=50)

        assert len(session.cards) == 12
        assert session.capped is True

    def test_premium_users_are_uncapped_without_limit(
        self, progress_repository, attempt_repository, clock
    ):
        cards = [_card(i) for i in range(1, 21)]
        use_case = _use_case(cards, progress_repository, attempt_repository, clock, premium=True)

        session = use_case.select_session(USER, SessionScope.all_cards())

        assert len(session.cards) == 20
        assert session.capped is False

    def test_explicit_limit(self, progress_repository, attempt_repository, clock):
        cards = [_card(i) for i in range(1, 6)]
        use_case = _use_case(cards, progress_repository, attempt_repository, clock, premium=True)

        session = use_case.select_session(USER, CATEGORY, limit=2)

        assert _ids(session) == [1, 2]

    def test_invalid_limit(self, progress_repository, attempt_repository, clock):
        use_case = _use_case([], progress_repository, attempt_repository, clock)

        with pytest.raises(ValidationError):
            use_case.select_session(USER, CATEGORY, limit=0)

    def test_list_and_topic_scopes(self, progress_repository, attempt_repository, clock):
        cards = [
            _card(1, lists=["interview"], topic="Closures"),
            _card(2, topic="closures"),
            _card(3),
        ]
        use_case = _use_case(cards, progress_repository, attempt_repository, clock)

        by_list = use_case.select_session(
            USER, SessionScope(kind=ScopeKind.LIST, value="interview")
        )
        by_topic = use_case.select_session(
            USER, SessionScope(kind=ScopeKind.TOPIC, value="CLOSURES")
        )

        assert _ids(by_list) == [1]
        assert _ids(by_topic) == [1, 2]

    def test_important_scope(self, progress_repository, attempt_repository, clock):
        cards = [_card(1), _card(2), _card(3)]
        use_case = _use_case(cards, progress_repository, attempt_repository, clock)
        use_case.set_important(USER, 3, True)

        session = use_case.select_session(USER, SessionScope(kind=ScopeKind.IMPORTANT))

        assert _ids(session) == [3]


class TestReviewOutcome:
    def test_review_persists_progress_then_logs_attempt(
        self, progress_repository, attempt_repository, clock
    ):
        use_case = _use_case([_card(1)], progress_repository, attempt_repository, clock)

        result = use_case.review_outcome(USER, 1, "good", session_id="abc")

        assert result.progress.state is CardState.LEARNING
        assert progress_repository.find(UserId(USER), FlashcardId(1)) == result.progress
        assert result.attempt.is_correct is True
        assert result.attempt.session_id == "abc"
        assert result.attempt.attempted_at == NOW

    def test_unknown_card(self, progress_repository, attempt_repository, clock):
        use_case = _use_case([], progress_repository, attempt_repository, clock)

        with pytest.raises(FlashcardNotFoundError):
            use_case.review_outcome(USER, 99, "good")

    def test_invalid_outcome_writes_nothing(self, progress_repository, attempt_repository, clock):
        use_case = _use_case([_card(1)], progress_repository, attempt_repository, clock)

        with pytest.raises(InvalidOutcomeError):
            use_case.review_outcome(USER, 1, "maybe")

        assert progress_repository.records == {}
        assert attempt_repository.attempts == []

    def test_require_due_rejects_card_not_due(
        self, progress_repository, attempt_repository, clock
    ):
        use_case = _use_case([_card(1)], progress_repository, attempt_repository, clock)
        use_case.review_outcome(USER, 1, "good")

        with pytest.raises(CardNotDueError):
            use_case.review_outcome(USER, 1, "good", require_due=True)

        assert len(attempt_repository.attempts) == 1

    def test_early_review_allowed_by_default(self, progress_repository, attempt_repository, clock):
        use_case = _use_case([_card(1)], progress_repository, attempt_repository, clock)
        use_case.review_outcome(USER, 1, "good")

        result = use_case.review_outcome(USER, 1, "good")

        assert result.progress.current_step == 1

    def test_review_count_never_decreases(self, progress_repository, attempt_repository, clock):
        use_case = _use_case([_card(1)], progress_repository, attempt_repository, clock)
        counts = []

        for outcome in ["good", "good", "good", "good", "again", "good", "easy", "hard"]:
            result = use_case.review_outcome(USER, 1, outcome)
            counts.append(result.progress.review_count)
            clock.now = result.progress.next_review_date

        assert counts == sorted(counts)
        assert counts[-1] > 0


class TestImportant:
    def test_flag_unseen_card_creates_new_record(
        self, progress_repository, attempt_repository, clock
    ):
        use_case = _use_case([_card(1)], progress_repository, attempt_repository, clock)

        record = use_case.set_important(USER, 1, True)

        assert record.important is True
        assert record.state is CardState.NEW

    def test_free_limit(self, progress_repository, attempt_repository, clock):
        cards = [_card(i) for i in range(1, 8)]
        use_case = _use_case(
            cards, progress_repository, attempt_repository, clock, free_max_important_cards=2
        )
        use_case.set_important(USER, 1, True)
        use_case.set_important(USER, 2, True)

        with pytest.raises(ImportantLimitReachedError):
            use_case.set_important(USER, 3, True)

        # Re-flagging an already flagged card is not a new flag
        assert use_case.set_important(USER, 2, True).important is True

    def test_premium_has_no_limit(self, progress_repository, attempt_repository, clock):
        cards = [_card(i) for i in range(1, 8)]
        use_case = _use_case(
            cards,
            progress_repository,
            attempt_repository,
            clock,
            premium=True,
            free_max_important_cards=1,
        )

        for card_id in range(1, 8):
            use_case.set_important(USER, card_id, True)

        assert len(use_case.important_cards(USER)) == 7

    def test_unflag(self, progress_repository, attempt_repository, clock):
        use_case = _use_case([_card(1)], progress_repository, attempt_repository, clock)
        use_case.set_important(USER, 1, True)

        use_case.set_important(USER, 1, False)

        assert use_case.important_cards(USER) == []


def test_due_forecast_counts_unseen_cards(progress_repository, attempt_repository, clock):
    use_case = _use_case([_card(1), _card(2)], progress_repository, attempt_repository, clock)
    use_case.review_outcome(USER, 1, "good")

    forecast = use_case.due_forecast(USER)

    assert forecast.due_now == 1
    assert forecast.due_in_15_minutes == 1


def test_due_forecast_leaves_out_corrupt_cards(progress_repository, attempt_repository, clock):
    progress_repository.corrupt.add((USER, 2))
    use_case = _use_case([_card(1), _card(2)], progress_repository, attempt_repository, clock)

    forecast = use_case.due_forecast(USER)

    assert forecast.total == 1
    assert forecast.due_now == 1
