"""API routes for metered AI usage and AI flashcard generation."""

import structlog
from fastapi import APIRouter, Depends, HTTPException, Request, status
from slowapi import Limiter
from slowapi.util import get_remote_address

from cardwise.application.learning.use_cases.flashcard_generation_use_case import (
    FlashcardGenerationUseCase,
)
from cardwise.application.learning.use_cases.quota_use_case import QuotaUseCase
from cardwise.config import get_settings
from cardwise.core import container
from cardwise.domain.common.exceptions import DomainError
from cardwise.exceptions import CardwiseError
from cardwise.infrastructure.common.dependencies import require_ai_enabled
from cardwise.infrastructure.common.di import inject_use_case
from cardwise.infrastructure.identity.dependencies import CurrentUserId
from cardwise.infrastructure.identity.token_service import verify_access_token
from cardwise.infrastructure.learning.schemas.ai_schemas import (
    GeneratedFlashcardResponse,
    GenerateFlashcardRequest,
    GenerationResponse,
    ReservationResponse,
    ReserveRequest,
    TransformFlashcardRequest,
    UsageResponse,
)

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/ai", tags=["ai"])


def user_or_remote_address(request: Request) -> str:
    """Rate limit per authenticated user, falling back to the client address."""
    authorization = request.headers.get("Authorization", "")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() == "bearer" and token:
        user_id = verify_access_token(token)
        if user_id is not None:
            return f"user:{user_id}"
    return get_remote_address(request)


limiter = Limiter(key_func=user_or_remote_address)


@router.get("/usage", response_model=UsageResponse, status_code=status.HTTP_200_OK)
def get_usage(
    user_id: CurrentUserId,
    use_case: QuotaUseCase = Depends(inject_use_case(container.quota_use_case)),
) -> UsageResponse:
    """
    Get the current month's AI usage.

    The figures are advisory; only a reservation decides whether a call may run.
    """
    return UsageResponse.from_domain(use_case.query(user_id))


@router.post(
    "/usage/reserve",
    response_model=ReservationResponse,
    status_code=status.HTTP_200_OK,
)
def reserve_usage(
    body: ReserveRequest,
    user_id: CurrentUserId,
    use_case: QuotaUseCase = Depends(inject_use_case(container.quota_use_case)),
) -> ReservationResponse:
    """
    Reserve usage units for an external AI operation.

    A rejection is returned with success=false rather than as an error.
    """
    return ReservationResponse.from_domain(use_case.reserve(user_id, body.count))


@router.post(
    "/flashcards/generate",
    response_model=GenerationResponse,
    status_code=status.HTTP_200_OK,
)
@limiter.limit(get_settings().AI_RATE_LIMIT)  # type: ignore[misc]
@require_ai_enabled
async def generate_flashcard(
    request: Request,
    body: GenerateFlashcardRequest,
    user_id: CurrentUserId,
    use_case: FlashcardGenerationUseCase = Depends(
        inject_use_case(container.flashcard_generation_use_case)
    ),
) -> GenerationResponse:
    """
    Generate a flashcard about a topic.

    Args:
        body: Topic and optional context
        user_id: Authenticated user

    Returns:
        GenerationResponse with the generated card

    Raises:
        HTTPException 403: If the monthly AI allotment is used up
        HTTPException 503: If the AI service failed
        HTTPException 500: For unexpected errors
    """
    try:
        flashcard = await use_case.generate_flashcard(user_id, body.topic, body.context)
        return GenerationResponse(flashcard=GeneratedFlashcardResponse.from_dto(flashcard))
    except (CardwiseError, DomainError):
        raise
    except Exception as e:
        logger.error("flashcard_generation_error", user_id=user_id, error=str(e), exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An unexpected error occurred. Please try again later.",
        ) from e


@router.post(
    "/flashcards/transform",
    response_model=GenerationResponse,
    status_code=status.HTTP_200_OK,
)
@limiter.limit(get_settings().AI_RATE_LIMIT)  # type: ignore[misc]
@require_ai_enabled
async def transform_flashcard(
    request: Request,
    body: TransformFlashcardRequest,
    user_id: CurrentUserId,
    use_case: FlashcardGenerationUseCase = Depends(
        inject_use_case(container.flashcard_generation_use_case)
    ),
) -> GenerationResponse:
    """Rewrite a flashcard as another card type."""
    try:
        flashcard = await use_case.transform_flashcard(
            user_id, body.question, body.answer, body.current_type, body.target_type
        )
        return GenerationResponse(flashcard=GeneratedFlashcardResponse.from_dto(flashcard))
    except (CardwiseError, DomainError):
        raise
    except Exception as e:
        logger.error("flashcard_transform_error", user_id=user_id, error=str(e), exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An unexpected error occurred. Please try again later.",
        ) from e
