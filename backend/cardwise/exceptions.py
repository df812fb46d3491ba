"""Custom exception hierarchy for the cardwise application."""

from fastapi import HTTPException
from starlette import status


class CardwiseError(Exception):
    """Base exception for all cardwise errors."""

    def __init__(self, message: str, status_code: int = 500) -> None:
        """Initialize exception with message and optional status code."""
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class NotFoundError(CardwiseError):
    """Resource not found error."""

    def __init__(self, message: str) -> None:
        """Initialize with message and 404 status code."""
        super().__init__(message, status_code=404)


class FlashcardNotFoundError(NotFoundError):
    """Flashcard not found error."""

    def __init__(self, flashcard_id: int | None = None, *, message: str | None = None) -> None:
        """Initialize with flashcard ID or custom message."""
        self.flashcard_id = flashcard_id
        if message:
            super().__init__(message)
        elif flashcard_id is not None:
            super().__init__(f"Flashcard with id {flashcard_id} not found")
        else:
            super().__init__("Flashcard not found")


class ValidationError(CardwiseError):
    """Validation error."""

    def __init__(self, message: str) -> None:
        """Initialize with message and 400 status code."""
        super().__init__(message, status_code=400)


class PolicyRejectionError(CardwiseError):
    """An expected, user-facing refusal. Not a failure; never logged as one."""

    def __init__(self, message: str, status_code: int = 403) -> None:
        """Initialize with message and a 4xx status code."""
        super().__init__(message, status_code=status_code)


class QuotaExceededError(PolicyRejectionError):
    """The monthly allotment of metered AI operations is exhausted."""

    def __init__(self, usage_count: int, limit: int, remaining: int) -> None:
        """Initialize with the usage snapshot taken at rejection time."""
        self.usage_count = usage_count
        self.limit = limit
        self.remaining = remaining
        super().__init__(f"You've reached your monthly limit of {limit} AI generations.")


class ImportantLimitReachedError(PolicyRejectionError):
    """Free plan users can only flag a few cards as important."""

    def __init__(self, limit: int) -> None:
        """Initialize with the plan limit."""
        self.limit = limit
        super().__init__(f"Free plan allows at most {limit} important cards.")


class ServiceError(CardwiseError):
    """Service layer error."""


class StorageUnavailableError(ServiceError):
    """The database could not be reached or refused the operation."""

    def __init__(self, message: str = "Storage is temporarily unavailable") -> None:
        """Initialize with message and 503 status code."""
        super().__init__(message, status_code=503)


class GenerationServiceError(ServiceError):
    """The content-generation collaborator failed or timed out."""

    def __init__(self, message: str = "AI service temporarily unavailable") -> None:
        """Initialize with message and 503 status code."""
        super().__init__(message, status_code=503)


CredentialsException = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Could not validate credentials",
    headers={"WWW-Authenticate": "Bearer"},
)
