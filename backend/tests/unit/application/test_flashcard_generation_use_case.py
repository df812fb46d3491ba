"""Tests for FlashcardGenerationUseCase: the quota is reserved before the AI call."""

import pytest

from cardwise.application.learning.protocols.ai_flashcard_service import GeneratedFlashcard
from cardwise.application.learning.use_cases.flashcard_generation_use_case import (
    FlashcardGenerationUseCase,
)
from cardwise.application.learning.use_cases.quota_use_case import QuotaUseCase
from cardwise.domain.learning.entities.quota import QuotaReservation
from cardwise.domain.learning.value_objects import CardType
from cardwise.exceptions import GenerationServiceError, QuotaExceededError, ValidationError


class InMemoryQuotaRepository:
    def __init__(self, usage: int = 0) -> None:
        self.usage = usage

    def check_and_reserve(self, user_id, period_key, count, limit):
        if self.usage + count > limit:
            return QuotaReservation.rejected(self.usage, limit)
        self.usage += count
        return QuotaReservation.accepted(self.usage, limit)

    def get_usage(self, user_id, period_key):
        return self.usage


class FreePlan:
    def is_premium(self, user_id):
        return False


class FakeAIService:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.calls: list[tuple] = []

    async def generate_flashcard(self, topic, context):
        self.calls.append(("generate", topic, context))
        if self.fail:
            raise GenerationServiceError()
        return GeneratedFlashcard(question=f"What is {topic}?", answer="An answer", category="cs")

    async def transform_flashcard(self, question, answer, current_type, target_type):
        self.calls.append(("transform", current_type, target_type))
        if self.fail:
            raise GenerationServiceError()
        return GeneratedFlashcard(
            question=question,
            answer=[answer],
            card_type=target_type,
            options=[answer, "Something else"],
        )


def _use_case(
    repository: InMemoryQuotaRepository, ai_service: FakeAIService
) -> FlashcardGenerationUseCase:
    quota = QuotaUseCase(repository, FreePlan(), free_limit=10, premium_limit=1000)
    return FlashcardGenerationUseCase(quota_use_case=quota, ai_service=ai_service)


class TestGenerateFlashcard:
    async def test_reserves_one_unit_and_returns_card(self):
        repository = InMemoryQuotaRepository(usage=3)
        ai_service = FakeAIService()

        card = await _use_case(repository, ai_service).generate_flashcard(1, " closures ")

        assert card.question == "What is closures?"
        assert repository.usage == 4
        assert ai_service.calls == [("generate", "closures", None)]

    async def test_rejected_reservation_never_calls_the_service(self):
        repository = InMemoryQuotaRepository(usage=10)
        ai_service = FakeAIService()

        with pytest.raises(QuotaExceededError) as exc_info:
            await _use_case(repository, ai_service).generate_flashcard(1, "closures")

        assert ai_service.calls == []
        assert repository.usage == 10
        assert exc_info.value.remaining == 0
        assert exc_info.value.limit == 10

    async def test_service_failure_keeps_the_reserved_unit(self):
        repository = InMemoryQuotaRepository(usage=5)

        with pytest.raises(GenerationServiceError):
            await _use_case(repository, FakeAIService(fail=True)).generate_flashcard(1, "sql")

        assert repository.usage == 6

    async def test_blank_topic_is_rejected_before_reserving(self):
        repository = InMemoryQuotaRepository()

        with pytest.raises(ValidationError):
            await _use_case(repository, FakeAIService()).generate_flashcard(1, "   ")

        assert repository.usage == 0


class TestTransformFlashcard:
    async def test_transform_to_multiple_choice(self):
        repository = InMemoryQuotaRepository()
        ai_service = FakeAIService()

        card = await _use_case(repository, ai_service).transform_flashcard(
            1, "Capital of France?", "Paris", "basic", "multiple_choice"
        )

        assert card.card_type is CardType.MULTIPLE_CHOICE
        assert ai_service.calls == [("transform", CardType.BASIC, CardType.MULTIPLE_CHOICE)]
        assert repository.usage == 1

    async def test_unknown_target_type(self):
        repository = InMemoryQuotaRepository()
        ai_service = FakeAIService()

        with pytest.raises(ValidationError):
            await _use_case(repository, ai_service).transform_flashcard(
                1, "Capital of France?", "Paris", "basic", "essay"
            )

        assert ai_service.calls == []
        assert repository.usage == 0
