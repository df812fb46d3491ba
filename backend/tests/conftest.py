"""Pytest configuration and fixtures."""

import os

os.environ.setdefault("SECRET_KEY", "test-secret-key-with-enough-length-for-hs256")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ENVIRONMENT", "test")

from collections.abc import Callable, Generator  # noqa: E402
from datetime import UTC, datetime  # noqa: E402
from typing import Any  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from cardwise import models  # noqa: E402
from cardwise.config import get_settings  # noqa: E402
from cardwise.database import Base, get_db  # noqa: E402
from cardwise.infrastructure.identity.token_service import create_access_token  # noqa: E402
from cardwise.infrastructure.learning.routers.ai import limiter  # noqa: E402
from cardwise.main import app  # noqa: E402

TEST_USER_ID = 1
OTHER_USER_ID = 2

# Test database URL (in-memory SQLite)
TEST_DATABASE_URL = "sqlite://"

# Create test engine; one shared connection so every thread sees the same database
test_engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

# Create test session factory
TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


@pytest.fixture(autouse=True)
def _fresh_settings() -> Generator[None, None, None]:
    """Settings are cached; tests that patch the environment get a clean copy."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def db_session() -> Generator[Session, None, None]:
    """Create a fresh database session for each test."""
    # Create all tables
    Base.metadata.create_all(bind=test_engine)

    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.close()
        # Drop all tables after test
        Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def client(db_session: Session) -> Generator[TestClient, Any, None]:
    """Create a test client with database session."""

    def override_get_db() -> Generator[Session, None, None]:
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    limiter.reset()

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers() -> dict[str, str]:
    """Bearer token for TEST_USER_ID."""
    return {"Authorization": f"Bearer {create_access_token(TEST_USER_ID)}"}


@pytest.fixture
def other_auth_headers() -> dict[str, str]:
    """Bearer token for OTHER_USER_ID."""
    return {"Authorization": f"Bearer {create_access_token(OTHER_USER_ID)}"}


@pytest.fixture
def make_card(db_session: Session) -> Callable[..., models.Flashcard]:
    """Insert a catalogue card; keyword arguments override the defaults."""

    def _make_card(
        question: str = "What does HTTP stand for?",
        answer: Any = "HyperText Transfer Protocol",
        category: str = "networking",
        lists: list[str] | None = None,
        **kwargs: Any,
    ) -> models.Flashcard:
        card = models.Flashcard(question=question, answer=answer, category=category, **kwargs)
        for name in lists or []:
            card.list_entries.append(models.FlashcardListEntry(name=name))
        db_session.add(card)
        db_session.commit()
        db_session.refresh(card)
        return card

    return _make_card


@pytest.fixture
def make_premium(db_session: Session) -> Callable[..., models.Subscription]:
    """Give a user an active premium subscription."""

    def _make_premium(user_id: int = TEST_USER_ID, **kwargs: Any) -> models.Subscription:
        subscription = models.Subscription(
            user_id=user_id, plan="premium", status=kwargs.pop("status", "active"), **kwargs
        )
        db_session.add(subscription)
        db_session.commit()
        return subscription

    return _make_premium


@pytest.fixture
def now() -> datetime:
    return datetime.now(UTC)
