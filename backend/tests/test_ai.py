"""Tests for the metered AI endpoints."""

from collections.abc import Generator

import pytest
from dependency_injector import providers
from fastapi import status
from fastapi.testclient import TestClient

from cardwise.application.learning.protocols.ai_flashcard_service import GeneratedFlashcard
from cardwise.config import get_settings
from cardwise.core import container
from cardwise.domain.learning.value_objects import CardType
from cardwise.exceptions import GenerationServiceError

API = "/api/v1/ai"


class StubAIService:
    def __init__(self) -> None:
        self.calls = 0
        self.fail = False

    async def generate_flashcard(self, topic, context):
        self.calls += 1
        if self.fail:
            raise GenerationServiceError()
        return GeneratedFlashcard(question=f"What is {topic}?", answer="A thing", category="cs")

    async def transform_flashcard(self, question, answer, current_type, target_type):
        self.calls += 1
        return GeneratedFlashcard(
            question=question,
            answer=["True"],
            card_type=target_type,
            options=["True", "False"],
        )


@pytest.fixture
def ai_service(monkeypatch: pytest.MonkeyPatch) -> Generator[StubAIService, None, None]:
    """Enable AI with a stubbed provider."""
    monkeypatch.setenv("AI_PROVIDER", "openai")
    monkeypatch.setenv("AI_MODEL_NAME", "test-model")
    monkeypatch.setenv("OPENAI_API_KEY", "test-key")
    get_settings.cache_clear()

    service = StubAIService()
    with container.ai_flashcard_service.override(providers.Object(service)):
        yield service


class TestUsage:
    def test_fresh_user(self, client: TestClient, auth_headers: dict[str, str]) -> None:
        response = client.get(f"{API}/usage", headers=auth_headers)

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["usage_count"] == 0
        assert data["limit"] == 10
        assert data["remaining"] == 10
        assert data["is_premium"] is False
        assert data["can_use"] is True

    def test_premium_limit(
        self, client: TestClient, auth_headers: dict[str, str], make_premium
    ) -> None:
        make_premium()

        data = client.get(f"{API}/usage", headers=auth_headers).json()

        assert data["limit"] == 1000
        assert data["is_premium"] is True

    def test_requires_authentication(self, client: TestClient) -> None:
        assert client.get(f"{API}/usage").status_code == status.HTTP_401_UNAUTHORIZED


class TestReserve:
    def test_reserve_counts_usage(self, client: TestClient, auth_headers: dict[str, str]) -> None:
        response = client.post(f"{API}/usage/reserve", json={"count": 3}, headers=auth_headers)

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {"success": True, "usage_count": 3, "limit": 10, "remaining": 7}
        assert client.get(f"{API}/usage", headers=auth_headers).json()["usage_count"] == 3

    def test_rejection_is_not_an_error(
        self, client: TestClient, auth_headers: dict[str, str]
    ) -> None:
        client.post(f"{API}/usage/reserve", json={"count": 9}, headers=auth_headers)

        response = client.post(f"{API}/usage/reserve", json={"count": 2}, headers=auth_headers)

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {"success": False, "usage_count": 9, "limit": 10, "remaining": 1}

    def test_count_must_be_positive(
        self, client: TestClient, auth_headers: dict[str, str]
    ) -> None:
        response = client.post(f"{API}/usage/reserve", json={"count": 0}, headers=auth_headers)

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_default_count_is_one(self, client: TestClient, auth_headers: dict[str, str]) -> None:
        response = client.post(f"{API}/usage/reserve", json={}, headers=auth_headers)

        assert response.json()["usage_count"] == 1

    def test_reserve_is_not_rate_limited(
        self, client: TestClient, auth_headers: dict[str, str], make_premium
    ) -> None:
        make_premium()
        responses = [
            client.post(f"{API}/usage/reserve", json={}, headers=auth_headers) for _ in range(12)
        ]

        assert all(r.status_code == status.HTTP_200_OK for r in responses)
        assert all(r.json()["success"] is True for r in responses)
        assert responses[-1].json()["usage_count"] == 12


class TestGenerate:
    def test_disabled_without_provider(
        self, client: TestClient, auth_headers: dict[str, str]
    ) -> None:
        response = client.post(
            f"{API}/flashcards/generate", json={"topic": "closures"}, headers=auth_headers
        )

        assert response.status_code == status.HTTP_410_GONE

    def test_generate_consumes_one_unit(
        self, client: TestClient, auth_headers: dict[str, str], ai_service: StubAIService
    ) -> None:
        response = client.post(
            f"{API}/flashcards/generate", json={"topic": "closures"}, headers=auth_headers
        )

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["success"] is True
        assert data["flashcard"]["question"] == "What is closures?"
        assert data["flashcard"]["card_type"] == "basic"
        assert client.get(f"{API}/usage", headers=auth_headers).json()["usage_count"] == 1

    def test_exhausted_quota_blocks_the_call(
        self, client: TestClient, auth_headers: dict[str, str], ai_service: StubAIService
    ) -> None:
        client.post(f"{API}/usage/reserve", json={"count": 10}, headers=auth_headers)

        response = client.post(
            f"{API}/flashcards/generate", json={"topic": "closures"}, headers=auth_headers
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN
        data = response.json()
        assert data["usage_count"] == 10
        assert data["limit"] == 10
        assert data["remaining"] == 0
        assert ai_service.calls == 0

    def test_service_failure_keeps_the_reservation(
        self, client: TestClient, auth_headers: dict[str, str], ai_service: StubAIService
    ) -> None:
        ai_service.fail = True

        response = client.post(
            f"{API}/flashcards/generate", json={"topic": "closures"}, headers=auth_headers
        )

        assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
        assert response.json()["detail"] == "AI service temporarily unavailable"
        assert client.get(f"{API}/usage", headers=auth_headers).json()["usage_count"] == 1

    def test_blank_topic(
        self, client: TestClient, auth_headers: dict[str, str], ai_service: StubAIService
    ) -> None:
        response = client.post(
            f"{API}/flashcards/generate", json={"topic": ""}, headers=auth_headers
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert ai_service.calls == 0

    def test_rate_limited_per_user(
        self,
        client: TestClient,
        auth_headers: dict[str, str],
        other_auth_headers: dict[str, str],
        make_premium,
        ai_service: StubAIService,
    ) -> None:
        make_premium()
        url = f"{API}/flashcards/generate"
        responses = [
            client.post(url, json={"topic": "closures"}, headers=auth_headers) for _ in range(11)
        ]

        assert all(r.status_code == status.HTTP_200_OK for r in responses[:10])
        assert responses[10].status_code == status.HTTP_429_TOO_MANY_REQUESTS
        assert ai_service.calls == 10
        other = client.post(url, json={"topic": "closures"}, headers=other_auth_headers)
        assert other.status_code == status.HTTP_200_OK


class TestTransform:
    def test_transform(
        self, client: TestClient, auth_headers: dict[str, str], ai_service: StubAIService
    ) -> None:
        response = client.post(
            f"{API}/flashcards/transform",
            json={
                "question": "Python is compiled to bytecode.",
                "answer": "True",
                "current_type": "basic",
                "target_type": CardType.TRUE_FALSE.value,
            },
            headers=auth_headers,
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["flashcard"]["card_type"] == CardType.TRUE_FALSE.value

    def test_unknown_target_type(
        self, client: TestClient, auth_headers: dict[str, str], ai_service: StubAIService
    ) -> None:
        response = client.post(
            f"{API}/flashcards/transform",
            json={
                "question": "Q?",
                "answer": "A",
                "current_type": "basic",
                "target_type": "essay",
            },
            headers=auth_headers,
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert ai_service.calls == 0
        assert client.get(f"{API}/usage", headers=auth_headers).json()["usage_count"] == 0
