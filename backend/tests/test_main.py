"""Tests for main API endpoints."""

from fastapi.testclient import TestClient


def test_root_endpoint(client: TestClient) -> None:
    """Test root endpoint returns welcome message."""
    response = client.get("/")
    assert response.status_code == 200
    assert response.json() == {"message": "Welcome to cardwise API"}


def test_health_endpoint(client: TestClient) -> None:
    """Test health check endpoint."""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


def test_api_root_endpoint(client: TestClient) -> None:
    """Test API v1 root endpoint."""
    response = client.get("/api/v1/")
    assert response.status_code == 200
    data = response.json()
    assert data["message"] == "cardwise API v1"
    assert data["version"] == "0.1.0"
    assert data["docs"] == "/api/v1/docs"


def test_openapi_lists_study_routes(client: TestClient) -> None:
    """The study and AI routers are mounted under the API prefix."""
    paths = client.get("/api/v1/openapi.json").json()["paths"]
    assert "/api/v1/study/session" in paths
    assert "/api/v1/study/cards/{flashcard_id}/review" in paths
    assert "/api/v1/ai/usage/reserve" in paths
