"""Tests for the session attempt log."""

from contextlib import contextmanager
from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy.orm import Session

from cardwise import models
from cardwise.application.learning.use_cases.session_attempt_use_case import (
    SessionAttemptUseCase,
)
from cardwise.domain.common.value_objects import FlashcardId
from cardwise.exceptions import FlashcardNotFoundError, ValidationError
from cardwise.infrastructure.learning.repositories.card_repository import CardRepository
from cardwise.infrastructure.learning.repositories.session_attempt_repository import (
    SessionAttemptRepository,
)
from cardwise.maintenance import purge_session_attempts

NOW = datetime(2026, 3, 10, 12, 0, tzinfo=UTC)


@pytest.fixture
def use_case(db_session: Session) -> SessionAttemptUseCase:
    return SessionAttemptUseCase(
        attempt_repository=SessionAttemptRepository(db_session),
        card_repository=CardRepository(db_session),
        suppression_window=timedelta(minutes=20),
        retention=timedelta(days=7),
        clock=lambda: NOW,
    )


class TestRecord:
    def test_record_is_visible_on_next_read(self, use_case, make_card) -> None:
        card = make_card()

        attempt = use_case.record(1, card.id, is_correct=True, session_id="s-1")

        assert attempt.id.value > 0
        assert attempt.attempted_at == NOW
        assert use_case.recently_attempted(1) == {FlashcardId(card.id)}

    def test_no_deduplication(self, use_case, make_card, db_session: Session) -> None:
        card = make_card()

        use_case.record(1, card.id, is_correct=True)
        use_case.record(1, card.id, is_correct=True)

        assert db_session.query(models.SessionAttempt).count() == 2

    def test_recent_window_is_inclusive_of_start(self, use_case, make_card) -> None:
        card = make_card()
        use_case.record(1, card.id, True, attempted_at=NOW - timedelta(minutes=20))
        other = make_card(question="Other?")
        use_case.record(1, other.id, True, attempted_at=NOW - timedelta(minutes=21))

        assert use_case.recently_attempted(1) == {FlashcardId(card.id)}

    def test_recent_is_per_user(self, use_case, make_card) -> None:
        card = make_card()
        use_case.record(2, card.id, True)

        assert use_case.recently_attempted(1) == set()


class TestHistory:
    def test_newest_first_and_limited(self, use_case, make_card) -> None:
        card = make_card()
        for minutes in (30, 10, 20):
            use_case.record(1, card.id, True, attempted_at=NOW - timedelta(minutes=minutes))

        history = use_case.history(1, card.id, limit=2)

        assert [a.attempted_at for a in history] == [
            NOW - timedelta(minutes=10),
            NOW - timedelta(minutes=20),
        ]

    def test_unknown_card(self, use_case) -> None:
        with pytest.raises(FlashcardNotFoundError):
            use_case.history(1, 999)

    def test_invalid_limit(self, use_case, make_card) -> None:
        card = make_card()

        with pytest.raises(ValidationError):
            use_case.history(1, card.id, limit=0)


class TestPurge:
    def test_purge_is_idempotent_and_keeps_recent(self, use_case, make_card) -> None:
        card = make_card()
        use_case.record(1, card.id, True, attempted_at=NOW - timedelta(days=8))
        use_case.record(1, card.id, False, attempted_at=NOW - timedelta(days=9))
        use_case.record(1, card.id, True, attempted_at=NOW - timedelta(days=1))
        use_case.record(2, card.id, True, attempted_at=NOW - timedelta(days=30))

        assert use_case.purge(1) == 2
        assert use_case.purge(1) == 0
        assert len(use_case.history(1, card.id)) == 1
        assert len(use_case.history(2, card.id)) == 1

    def test_purge_all_sweeps_every_user(self, use_case, make_card) -> None:
        card = make_card()
        use_case.record(1, card.id, True, attempted_at=NOW - timedelta(days=8))
        use_case.record(2, card.id, True, attempted_at=NOW - timedelta(days=30))

        assert use_case.purge_all() == 2

    def test_explicit_cutoff(self, use_case, make_card) -> None:
        card = make_card()
        use_case.record(1, card.id, True, attempted_at=NOW - timedelta(hours=2))

        assert use_case.purge(1, older_than=NOW - timedelta(hours=1)) == 1


class TestDailyHistogram:
    def test_per_day_counts_for_category(self, use_case, make_card) -> None:
        python_card = make_card(category="python")
        sql_card = make_card(question="SELECT?", category="sql")
        yesterday = NOW - timedelta(days=1)
        use_case.record(1, python_card.id, True, attempted_at=yesterday)
        use_case.record(1, python_card.id, False, attempted_at=yesterday)
        use_case.record(1, python_card.id, True, attempted_at=NOW)
        use_case.record(1, sql_card.id, False, attempted_at=NOW)

        stats = use_case.daily_histogram(1, category="python", window_days=7)

        assert [(s.day, s.correct, s.incorrect) for s in stats] == [
            (yesterday.date(), 1, 1),
            (NOW.date(), 1, 0),
        ]
        assert stats[0].accuracy == 50.0

    def test_attempts_outside_window_are_ignored(self, use_case, make_card) -> None:
        card = make_card()
        use_case.record(1, card.id, True, attempted_at=NOW - timedelta(days=10))

        assert use_case.daily_histogram(1, window_days=7) == []

    def test_unknown_category(self, use_case, make_card) -> None:
        card = make_card()
        use_case.record(1, card.id, True)

        assert use_case.daily_histogram(1, category="nope") == []


def test_maintenance_purge_uses_configured_retention(
    db_session: Session, make_card, monkeypatch: pytest.MonkeyPatch
) -> None:
    card = make_card()
    now = datetime.now(UTC)
    db_session.add_all(
        [
            models.SessionAttempt(
                user_id=1,
                flashcard_id=card.id,
                attempted_at=now - timedelta(days=days),
                is_correct=True,
            )
            for days in (1, 8, 40)
        ]
    )
    db_session.commit()

    @contextmanager
    def scope(settings):
        yield db_session

    monkeypatch.setattr("cardwise.maintenance.session_scope", scope)

    assert purge_session_attempts() == 2
    assert purge_session_attempts(older_than_days=0) == 1
