"""Pydantic schemas for the study API."""

from datetime import date, datetime

from pydantic import BaseModel, Field

from cardwise.application.learning.use_cases.dtos import StudyCard
from cardwise.domain.learning.entities.flashcard import Flashcard as FlashcardEntity
from cardwise.domain.learning.entities.progress_record import ProgressRecord
from cardwise.domain.learning.entities.session_attempt import DailyAttemptStats, SessionAttempt
from cardwise.domain.learning.services import DueForecast


class Progress(BaseModel):
    """Schema for a card's scheduling state."""

    flashcard_id: int
    state: str
    current_step: int
    ease_factor: float
    interval_days: int
    next_review_date: datetime | None
    review_count: int
    last_correct: bool | None
    important: bool

    @classmethod
    def from_domain(cls, record: ProgressRecord) -> "Progress":
        return cls(
            flashcard_id=record.flashcard_id.value,
            state=record.state.value,
            current_step=record.current_step,
            ease_factor=record.ease_factor,
            interval_days=record.interval_days,
            next_review_date=record.next_review_date,
            review_count=record.review_count,
            last_correct=record.last_correct,
            important=record.important,
        )


class Flashcard(BaseModel):
    """Schema for a catalogue card."""

    id: int
    question: str
    answer: str | list[str]
    card_type: str
    category: str
    topic: str | None = None
    lists: list[str] = Field(default_factory=list)
    options: list[str] | None = None
    deck_id: int | None = None

    @classmethod
    def from_domain(cls, card: FlashcardEntity) -> "Flashcard":
        return cls(
            id=card.id.value,
            question=card.question,
            answer=card.answer,
            card_type=card.card_type.value,
            category=card.category,
            topic=card.topic,
            lists=card.lists,
            options=card.options,
            deck_id=card.deck_id.value if card.deck_id else None,
        )


class StudyCardResponse(BaseModel):
    """Schema for a card in a study session."""

    flashcard: Flashcard
    progress: Progress | None = None
    top_up: bool = Field(
        False, description="Recently answered correctly, added to fill the session"
    )

    @classmethod
    def from_dto(cls, study_card: StudyCard) -> "StudyCardResponse":
        return cls(
            flashcard=Flashcard.from_domain(study_card.flashcard),
            progress=Progress.from_domain(study_card.progress) if study_card.progress else None,
            top_up=study_card.top_up,
        )


class StudySessionResponse(BaseModel):
    """Schema for a study session."""

    cards: list[StudyCardResponse]
    candidate_count: int = Field(..., description="Cards in scope")
    due_count: int = Field(..., description="Cards in scope that are due")
    suppressed_count: int = Field(..., description="Due cards skipped as recently attempted")
    capped: bool = Field(False, description="Whether the plan's session size cut the list")


class ReviewRequest(BaseModel):
    """Schema for submitting an answer."""

    outcome: str | bool = Field(
        ..., description="again, hard, good or easy; correct/incorrect or a boolean"
    )
    session_id: str | None = Field(None, max_length=64)
    require_due: bool = Field(False, description="Reject the review if the card is not due")


class SessionAttemptResponse(BaseModel):
    """Schema for a logged attempt."""

    id: int
    flashcard_id: int
    attempted_at: datetime
    is_correct: bool
    session_id: str | None = None

    @classmethod
    def from_domain(cls, attempt: SessionAttempt) -> "SessionAttemptResponse":
        return cls(
            id=attempt.id.value,
            flashcard_id=attempt.flashcard_id.value,
            attempted_at=attempt.attempted_at,
            is_correct=attempt.is_correct,
            session_id=attempt.session_id,
        )


class ReviewResponse(BaseModel):
    """Schema for the result of an answer."""

    progress: Progress
    attempt: SessionAttemptResponse


class ImportantRequest(BaseModel):
    """Schema for flagging a card."""

    important: bool


class ImportantCardsResponse(BaseModel):
    """Schema for the list of important cards."""

    cards: list[StudyCardResponse]


class DueForecastResponse(BaseModel):
    """Schema for the due-time summary."""

    due_now: int
    due_in_15_minutes: int
    due_in_next_hour: int
    due_today: int
    due_tomorrow: int
    total: int

    @classmethod
    def from_domain(cls, forecast: DueForecast) -> "DueForecastResponse":
        return cls(
            due_now=forecast.due_now,
            due_in_15_minutes=forecast.due_in_15_minutes,
            due_in_next_hour=forecast.due_in_next_hour,
            due_today=forecast.due_today,
            due_tomorrow=forecast.due_tomorrow,
            total=forecast.total,
        )


class AttemptHistoryResponse(BaseModel):
    """Schema for a card's recent attempts, newest first."""

    attempts: list[SessionAttemptResponse]


class DailyAttemptStatsResponse(BaseModel):
    """Schema for one day of the accuracy chart."""

    day: date
    correct: int
    incorrect: int
    total: int
    accuracy: float = Field(..., description="Percentage, one decimal")

    @classmethod
    def from_domain(cls, stats: DailyAttemptStats) -> "DailyAttemptStatsResponse":
        return cls(
            day=stats.day,
            correct=stats.correct,
            incorrect=stats.incorrect,
            total=stats.total,
            accuracy=stats.accuracy,
        )


class DailyHistogramResponse(BaseModel):
    """Schema for the accuracy chart."""

    days: list[DailyAttemptStatsResponse]


class PurgeResponse(BaseModel):
    """Schema for an attempt purge."""

    deleted: int
