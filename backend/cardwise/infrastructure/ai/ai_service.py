import httpx
import structlog
from pydantic_ai.exceptions import AgentRunError
from pydantic_ai.settings import ModelSettings

from cardwise.application.learning.protocols.ai_flashcard_service import GeneratedFlashcard
from cardwise.config import get_settings
from cardwise.domain.learning.value_objects import CardType
from cardwise.exceptions import GenerationServiceError
from cardwise.infrastructure.ai.ai_agents import get_generation_agent, get_transform_agent

logger = structlog.get_logger(__name__)


class AIFlashcardService:
    """
    Generation collaborator backed by pydantic-ai agents.

    Provider, network and malformed-output failures all surface as
    GenerationServiceError. Nothing is retried here.
    """

    async def generate_flashcard(self, topic: str, context: str | None) -> GeneratedFlashcard:
        prompt = f"Topic: {topic}"
        if context:
            prompt += f"\nContext: {context}"

        agent = get_generation_agent()
        try:
            result = await agent.run(prompt, model_settings=self._model_settings())
        except (AgentRunError, httpx.HTTPError, TimeoutError) as e:
            logger.error("ai_generation_failed", error=str(e), exc_info=True)
            raise GenerationServiceError() from e

        card = result.output
        return GeneratedFlashcard(
            question=card.question,
            answer=card.answer,
            card_type=CardType.BASIC,
            category=card.category,
        )

    async def transform_flashcard(
        self, question: str, answer: str, current_type: CardType, target_type: CardType
    ) -> GeneratedFlashcard:
        prompt = (
            f'Transform this flashcard from "{current_type.value}" format '
            f'to "{target_type.value}" format.\n\n'
            f"Current Question: {question}\n"
            f"Current Answer: {answer}"
        )

        agent = get_transform_agent(target_type.value)
        try:
            result = await agent.run(prompt, model_settings=self._model_settings())
        except (AgentRunError, httpx.HTTPError, TimeoutError) as e:
            logger.error(
                "ai_transform_failed", target_type=target_type.value, error=str(e), exc_info=True
            )
            raise GenerationServiceError() from e

        card = result.output
        if target_type is CardType.MULTIPLE_CHOICE and len(card.options) < 2:
            logger.error("ai_transform_invalid_output", target_type=target_type.value)
            raise GenerationServiceError("AI service returned an invalid flashcard")

        # The requested type wins over whatever the model claims
        return GeneratedFlashcard(
            question=card.question,
            answer=card.answer,
            card_type=target_type,
            options=card.options,
        )

    @staticmethod
    def _model_settings() -> ModelSettings:
        return ModelSettings(timeout=get_settings().AI_TIMEOUT_SECONDS)
