"""Pydantic schemas for metered AI endpoints."""

from pydantic import BaseModel, Field

from cardwise.application.learning.protocols.ai_flashcard_service import GeneratedFlashcard
from cardwise.domain.learning.entities.quota import QuotaReservation, QuotaStatus


class UsageResponse(BaseModel):
    """Schema for the advisory usage view."""

    usage_count: int
    limit: int
    remaining: int
    is_premium: bool
    can_use: bool
    period_key: str = Field(..., description="Billing month, YYYY-MM")

    @classmethod
    def from_domain(cls, status: QuotaStatus) -> "UsageResponse":
        return cls(
            usage_count=status.usage_count,
            limit=status.limit,
            remaining=status.remaining,
            is_premium=status.is_premium,
            can_use=status.can_use,
            period_key=status.period_key,
        )


class ReserveRequest(BaseModel):
    """Schema for reserving usage units."""

    count: int = Field(1, ge=1, le=100)


class ReservationResponse(BaseModel):
    """Schema for a reservation result; a rejection is not an error."""

    success: bool
    usage_count: int
    limit: int
    remaining: int

    @classmethod
    def from_domain(cls, reservation: QuotaReservation) -> "ReservationResponse":
        return cls(
            success=reservation.success,
            usage_count=reservation.usage_count,
            limit=reservation.limit,
            remaining=reservation.remaining,
        )


class GenerateFlashcardRequest(BaseModel):
    """Schema for generating a card from a topic."""

    topic: str = Field(..., min_length=1, max_length=500)
    context: str | None = Field(None, max_length=2000)


class TransformFlashcardRequest(BaseModel):
    """Schema for converting a card to another type."""

    question: str = Field(..., min_length=1)
    answer: str = Field(..., min_length=1)
    current_type: str = Field(..., description="Card type the card has now")
    target_type: str = Field(..., description="Card type to convert to")


class GeneratedFlashcardResponse(BaseModel):
    """Schema for a generated card."""

    question: str
    answer: str | list[str]
    card_type: str
    options: list[str] = Field(default_factory=list)
    category: str | None = None

    @classmethod
    def from_dto(cls, card: GeneratedFlashcard) -> "GeneratedFlashcardResponse":
        return cls(
            question=card.question,
            answer=card.answer,
            card_type=card.card_type.value,
            options=card.options,
            category=card.category,
        )


class GenerationResponse(BaseModel):
    """Schema for generation and transform results."""

    success: bool = True
    flashcard: GeneratedFlashcardResponse
