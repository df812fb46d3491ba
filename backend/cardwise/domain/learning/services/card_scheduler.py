"""
Card scheduler domain service.

The review state machine of the study engine. Given the current progress of a
card, an outcome and the current time it returns the next progress record.

    NEW ──any──▶ LEARNING ──good (steps exhausted) / easy──▶ REVIEW
                    ▲ │again: back to step 0              │ again
                    └─┘                                   ▼
                              REVIEW ◀──graduate── RELEARNING

Pure: no I/O, no clock access, no randomness.
"""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import TYPE_CHECKING

from cardwise.domain.common.value_objects import FlashcardId, UserId
from cardwise.domain.learning.entities.progress_record import (
    DEFAULT_EASE_FACTOR,
    MAX_EASE_FACTOR,
    MIN_EASE_FACTOR,
    ProgressRecord,
)
from cardwise.domain.learning.exceptions import CorruptStateError
from cardwise.domain.learning.value_objects import CardState, ReviewOutcome

if TYPE_CHECKING:
    from cardwise.config import Settings

# Ease adjustment per outcome while in REVIEW; failures also pay the lapse penalty
EASE_ADJUSTMENTS: dict[ReviewOutcome, float] = {
    ReviewOutcome.AGAIN: 0.0,
    ReviewOutcome.HARD: -0.15,
    ReviewOutcome.GOOD: 0.0,
    ReviewOutcome.EASY: 0.15,
}


@dataclass(frozen=True)
class SchedulerConfig:
    """Tunable constants of the scheduling policy."""

    learning_steps: tuple[timedelta, ...] = (timedelta(minutes=10), timedelta(minutes=60))
    relearning_steps: tuple[timedelta, ...] = (timedelta(minutes=10),)
    graduating_interval_days: int = 1
    easy_interval_days: int = 4
    maximum_interval_days: int = 36500
    # Upper bound on interval growth per successful review
    maximum_growth: float = 4.0
    hard_multiplier: float = 1.2
    easy_bonus: float = 1.3
    lapse_multiplier: float = 0.5
    lapse_penalty: float = 0.2

    def __post_init__(self) -> None:
        if not self.learning_steps or not self.relearning_steps:
            raise ValueError("Step sequences cannot be empty")
        if self.maximum_growth < 1.0:
            raise ValueError("maximum_growth must be at least 1.0")

    @classmethod
    def from_settings(cls, settings: "Settings") -> "SchedulerConfig":
        return cls(
            learning_steps=tuple(timedelta(minutes=m) for m in settings.LEARNING_STEPS_MINUTES),
            relearning_steps=tuple(
                timedelta(minutes=m) for m in settings.RELEARNING_STEPS_MINUTES
            ),
            graduating_interval_days=settings.GRADUATING_INTERVAL_DAYS,
            easy_interval_days=settings.EASY_INTERVAL_DAYS,
            maximum_interval_days=settings.MAXIMUM_INTERVAL_DAYS,
            maximum_growth=settings.MAXIMUM_INTERVAL_GROWTH,
        )


def clamp_ease(value: float) -> float:
    """Keep an ease factor inside [1.3, 2.5], rounded to avoid float drift."""
    return round(min(MAX_EASE_FACTOR, max(MIN_EASE_FACTOR, value)), 2)


class CardScheduler:
    """Spaced-repetition state machine over the four card states."""

    def __init__(self, config: SchedulerConfig | None = None) -> None:
        self.config = config or SchedulerConfig()
        self._transitions: dict[
            CardState, Callable[[ProgressRecord, ReviewOutcome, datetime], ProgressRecord]
        ] = {
            CardState.NEW: self._first_review,
            CardState.LEARNING: self._learning_review,
            CardState.REVIEW: self._review,
            CardState.RELEARNING: self._relearning_review,
        }

    @property
    def handled_states(self) -> frozenset[CardState]:
        return frozenset(self._transitions)

    def schedule(
        self,
        user_id: UserId,
        flashcard_id: FlashcardId,
        current: ProgressRecord | None,
        outcome: ReviewOutcome | str | bool,
        now: datetime,
    ) -> ProgressRecord:
        """
        Compute the progress record that follows a review.

        Args:
            user_id: Owner of the record
            flashcard_id: Reviewed card
            current: Existing record, or None for a card never reviewed
            outcome: Review outcome (again/hard/good/easy, correct/incorrect)
            now: Time of the review

        Returns:
            A new ProgressRecord; `current` is left untouched

        Raises:
            InvalidOutcomeError: If the outcome is not recognized
            CorruptStateError: If the record's state is not one of the four states
        """
        parsed = ReviewOutcome.parse(outcome)
        record = current or ProgressRecord.create(user_id, flashcard_id)

        transition = self._transitions.get(record.state) if isinstance(
            record.state, CardState
        ) else None
        if transition is None:
            raise CorruptStateError(record.state, flashcard_id.value)

        return transition(record, parsed, now)

    def _first_review(
        self, record: ProgressRecord, outcome: ReviewOutcome, now: datetime
    ) -> ProgressRecord:
        # Every first review enters LEARNING at step 0, whatever the outcome
        return record.evolve(
            state=CardState.LEARNING,
            current_step=0,
            ease_factor=DEFAULT_EASE_FACTOR,
            interval_days=0,
            next_review_date=now + self.config.learning_steps[0],
            review_count=0,
            last_correct=outcome.is_correct,
        )

    def _learning_review(
        self, record: ProgressRecord, outcome: ReviewOutcome, now: datetime
    ) -> ProgressRecord:
        return self._step_review(record, outcome, now, self.config.learning_steps)

    def _relearning_review(
        self, record: ProgressRecord, outcome: ReviewOutcome, now: datetime
    ) -> ProgressRecord:
        return self._step_review(record, outcome, now, self.config.relearning_steps)

    def _step_review(
        self,
        record: ProgressRecord,
        outcome: ReviewOutcome,
        now: datetime,
        steps: tuple[timedelta, ...],
    ) -> ProgressRecord:
        """Shared LEARNING / RELEARNING behaviour; only the graduation differs."""
        if outcome is ReviewOutcome.AGAIN:
            return record.evolve(
                current_step=0,
                next_review_date=now + steps[0],
                last_correct=False,
            )

        # Steps may have been shortened by configuration since the record was written
        step = min(record.current_step, len(steps) - 1)

        if outcome is ReviewOutcome.HARD:
            return record.evolve(
                current_step=step,
                next_review_date=now + steps[step],
                last_correct=True,
            )

        next_step = step + 1
        if outcome is ReviewOutcome.EASY or next_step >= len(steps):
            return self._graduate(record, outcome, now)

        return record.evolve(
            current_step=next_step,
            next_review_date=now + steps[next_step],
            last_correct=True,
        )

    def _graduate(
        self, record: ProgressRecord, outcome: ReviewOutcome, now: datetime
    ) -> ProgressRecord:
        if record.state is CardState.RELEARNING:
            # Back to REVIEW keeping the degraded ease and the accumulated count
            lapsed = round(record.interval_days * self.config.lapse_multiplier)
            interval = max(self.config.graduating_interval_days, lapsed)
            ease = record.ease_factor
        else:
            interval = (
                self.config.easy_interval_days
                if outcome is ReviewOutcome.EASY
                else self.config.graduating_interval_days
            )
            ease = DEFAULT_EASE_FACTOR

        interval = min(interval, self.config.maximum_interval_days)
        return record.evolve(
            state=CardState.REVIEW,
            current_step=0,
            ease_factor=ease,
            interval_days=interval,
            next_review_date=now + timedelta(days=interval),
            last_correct=True,
        )

    def _review(
        self, record: ProgressRecord, outcome: ReviewOutcome, now: datetime
    ) -> ProgressRecord:
        if outcome is ReviewOutcome.AGAIN:
            return record.evolve(
                state=CardState.RELEARNING,
                current_step=0,
                ease_factor=clamp_ease(record.ease_factor - self.config.lapse_penalty),
                next_review_date=now + self.config.relearning_steps[0],
                last_correct=False,
            )

        interval = self._next_interval(record.interval_days, record.ease_factor, outcome)
        return record.evolve(
            current_step=0,
            ease_factor=clamp_ease(record.ease_factor + EASE_ADJUSTMENTS[outcome]),
            interval_days=interval,
            next_review_date=now + timedelta(days=interval),
            review_count=record.review_count + 1,
            last_correct=True,
        )

    def _next_interval(self, previous: int, ease: float, outcome: ReviewOutcome) -> int:
        """Grow the interval, bounded by maximum_growth and maximum_interval_days."""
        previous = max(1, previous)
        if outcome is ReviewOutcome.HARD:
            raw = previous * self.config.hard_multiplier
        elif outcome is ReviewOutcome.EASY:
            raw = previous * ease * self.config.easy_bonus
        else:
            raw = previous * ease

        capped = min(raw, previous * self.config.maximum_growth)
        grown = max(previous + 1, round(capped))
        return min(grown, self.config.maximum_interval_days)
