"""Use case for AI-assisted flashcard generation, metered by the usage quota."""

import structlog

from cardwise.application.learning.protocols.ai_flashcard_service import (
    AIFlashcardServiceProtocol,
    GeneratedFlashcard,
)
from cardwise.application.learning.use_cases.quota_use_case import QuotaUseCase
from cardwise.domain.learning.value_objects import CardType
from cardwise.exceptions import GenerationServiceError, ValidationError

logger = structlog.get_logger(__name__)


def _parse_card_type(raw: str, field_name: str) -> CardType:
    try:
        return CardType(raw)
    except ValueError:
        allowed = ", ".join(card_type.value for card_type in CardType)
        raise ValidationError(f"{field_name} must be one of: {allowed}") from None


class FlashcardGenerationUseCase:
    """
    Generate or reformat cards with the AI collaborator.

    Every call reserves one usage unit before contacting the collaborator. A
    unit reserved for a call that then fails stays consumed.
    """

    def __init__(
        self,
        quota_use_case: QuotaUseCase,
        ai_service: AIFlashcardServiceProtocol,
    ) -> None:
        """Initialize use case with the quota guard and the AI collaborator."""
        self.quota_use_case = quota_use_case
        self.ai_service = ai_service

    async def generate_flashcard(
        self, user_id: int, topic: str, context: str | None = None
    ) -> GeneratedFlashcard:
        """
        Generate a single flashcard about a topic.

        Args:
            user_id: ID of the user
            topic: What the card should be about
            context: Optional extra guidance

        Returns:
            The generated card

        Raises:
            ValidationError: If the topic is empty
            QuotaExceededError: If the monthly allotment is used up
            GenerationServiceError: If the AI service failed
        """
        topic = topic.strip()
        if not topic:
            raise ValidationError("Topic is required and must be a non-empty string")
        context = context.strip() if context and context.strip() else None

        reservation = self.quota_use_case.require(user_id)

        try:
            flashcard = await self.ai_service.generate_flashcard(topic, context)
        except GenerationServiceError:
            logger.warning(
                "flashcard_generation_failed",
                user_id=user_id,
                usage_count=reservation.usage_count,
            )
            raise

        logger.info(
            "flashcard_generated",
            user_id=user_id,
            usage_count=reservation.usage_count,
            remaining=reservation.remaining,
        )
        return flashcard

    async def transform_flashcard(
        self,
        user_id: int,
        question: str,
        answer: str,
        current_type: str,
        target_type: str,
    ) -> GeneratedFlashcard:
        """
        Rewrite a card in another card type.

        Raises:
            ValidationError: If a field is empty or a card type is unknown
            QuotaExceededError: If the monthly allotment is used up
            GenerationServiceError: If the AI service failed
        """
        if not question.strip() or not answer.strip():
            raise ValidationError("Question and answer are required")
        current = _parse_card_type(current_type, "current_type")
        target = _parse_card_type(target_type, "target_type")

        reservation = self.quota_use_case.require(user_id)

        try:
            flashcard = await self.ai_service.transform_flashcard(
                question.strip(), answer.strip(), current, target
            )
        except GenerationServiceError:
            logger.warning(
                "flashcard_transform_failed",
                user_id=user_id,
                target_type=target.value,
                usage_count=reservation.usage_count,
            )
            raise

        logger.info(
            "flashcard_transformed",
            user_id=user_id,
            current_type=current.value,
            target_type=target.value,
            usage_count=reservation.usage_count,
        )
        return flashcard
