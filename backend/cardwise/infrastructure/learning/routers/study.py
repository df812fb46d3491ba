"""API routes for study sessions, reviews and attempt history."""

import logging
from datetime import timedelta
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status

from cardwise.application.learning.use_cases.session_attempt_use_case import (
    SessionAttemptUseCase,
)
from cardwise.application.learning.use_cases.study_session_use_case import StudySessionUseCase
from cardwise.core import container
from cardwise.domain.common.exceptions import DomainError
from cardwise.domain.learning.value_objects import ScopeKind, SessionScope
from cardwise.exceptions import CardwiseError, ValidationError
from cardwise.infrastructure.common.di import inject_use_case
from cardwise.infrastructure.identity.dependencies import CurrentUserId
from cardwise.infrastructure.learning.schemas.study_schemas import (
    AttemptHistoryResponse,
    DailyAttemptStatsResponse,
    DailyHistogramResponse,
    DueForecastResponse,
    ImportantCardsResponse,
    ImportantRequest,
    Progress,
    PurgeResponse,
    ReviewRequest,
    ReviewResponse,
    SessionAttemptResponse,
    StudyCardResponse,
    StudySessionResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/study", tags=["study"])


def _scope_from_query(
    category: str | None,
    list_name: str | None,
    topic: str | None,
    deck: str | None,
    important: bool,
) -> SessionScope:
    given: list[tuple[ScopeKind, str | None]] = [
        (kind, value.strip())
        for kind, value in (
            (ScopeKind.CATEGORY, category),
            (ScopeKind.LIST, list_name),
            (ScopeKind.TOPIC, topic),
            (ScopeKind.DECK, deck),
        )
        if value is not None
    ]
    if important:
        given.append((ScopeKind.IMPORTANT, None))

    if len(given) > 1:
        raise ValidationError("Only one of category, list, topic, deck or important may be given")
    if not given:
        return SessionScope.all_cards()

    kind, value = given[0]
    if kind is not ScopeKind.IMPORTANT and not value:
        raise ValidationError(f"{kind.value} must not be blank")
    return SessionScope(kind=kind, value=value)


@router.get("/session", response_model=StudySessionResponse, status_code=status.HTTP_200_OK)
def get_study_session(
    user_id: CurrentUserId,
    category: str | None = None,
    list_name: Annotated[str | None, Query(alias="list")] = None,
    topic: str | None = None,
    deck: str | None = None,
    important: bool = False,
    limit: Annotated[int | None, Query(ge=1, le=500)] = None,
    use_case: StudySessionUseCase = Depends(inject_use_case(container.study_session_use_case)),
) -> StudySessionResponse:
    """
    Get the due cards of a scope, skipping the ones answered in the last minutes.

    At most one of category, list, topic, deck or important may be given;
    without any, every card is in scope.
    """
    try:
        scope = _scope_from_query(category, list_name, topic, deck, important)
        session = use_case.select_session(user_id, scope, limit)
        return StudySessionResponse(
            cards=[StudyCardResponse.from_dto(card) for card in session.cards],
            candidate_count=session.candidate_count,
            due_count=session.due_count,
            suppressed_count=session.suppressed_count,
            capped=session.capped,
        )
    except (CardwiseError, DomainError):
        raise
    except Exception as e:
        logger.error(f"Failed to select study session for user {user_id}: {e!s}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An unexpected error occurred. Please try again later.",
        ) from e


@router.post(
    "/cards/{flashcard_id}/review",
    response_model=ReviewResponse,
    status_code=status.HTTP_200_OK,
)
def review_card(
    flashcard_id: int,
    request: ReviewRequest,
    user_id: CurrentUserId,
    use_case: StudySessionUseCase = Depends(inject_use_case(container.study_session_use_case)),
) -> ReviewResponse:
    """
    Submit an answer for a card.

    Args:
        flashcard_id: ID of the answered card
        request: Outcome, optional session id and strictness

    Returns:
        The card's new progress and the logged attempt

    Raises:
        HTTPException: 400 for an unknown outcome, 404 for an unknown card,
            409 when require_due is set and the card is not due
    """
    try:
        result = use_case.review_outcome(
            user_id=user_id,
            flashcard_id=flashcard_id,
            outcome=request.outcome,
            session_id=request.session_id,
            require_due=request.require_due,
        )
        return ReviewResponse(
            progress=Progress.from_domain(result.progress),
            attempt=SessionAttemptResponse.from_domain(result.attempt),
        )
    except (CardwiseError, DomainError):
        raise
    except Exception as e:
        logger.error(f"Failed to review flashcard {flashcard_id}: {e!s}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An unexpected error occurred. Please try again later.",
        ) from e


@router.get(
    "/cards/{flashcard_id}/progress",
    response_model=Progress | None,
    status_code=status.HTTP_200_OK,
)
def get_card_progress(
    flashcard_id: int,
    user_id: CurrentUserId,
    use_case: StudySessionUseCase = Depends(inject_use_case(container.study_session_use_case)),
) -> Progress | None:
    """Get a card's progress; null when it was never reviewed."""
    record = use_case.progress(user_id, flashcard_id)
    return Progress.from_domain(record) if record else None


@router.put(
    "/cards/{flashcard_id}/important",
    response_model=Progress,
    status_code=status.HTTP_200_OK,
)
def set_card_important(
    flashcard_id: int,
    request: ImportantRequest,
    user_id: CurrentUserId,
    use_case: StudySessionUseCase = Depends(inject_use_case(container.study_session_use_case)),
) -> Progress:
    """Flag or unflag a card as important. Free plans allow a few flagged cards."""
    record = use_case.set_important(user_id, flashcard_id, request.important)
    return Progress.from_domain(record)


@router.get("/important", response_model=ImportantCardsResponse, status_code=status.HTTP_200_OK)
def get_important_cards(
    user_id: CurrentUserId,
    use_case: StudySessionUseCase = Depends(inject_use_case(container.study_session_use_case)),
) -> ImportantCardsResponse:
    """Get the cards flagged important, due or not."""
    cards = use_case.important_cards(user_id)
    return ImportantCardsResponse(cards=[StudyCardResponse.from_dto(card) for card in cards])


@router.get("/forecast", response_model=DueForecastResponse, status_code=status.HTTP_200_OK)
def get_due_forecast(
    user_id: CurrentUserId,
    use_case: StudySessionUseCase = Depends(inject_use_case(container.study_session_use_case)),
) -> DueForecastResponse:
    """Count cards due now, within 15 minutes, the hour, today and tomorrow."""
    return DueForecastResponse.from_domain(use_case.due_forecast(user_id))


@router.get(
    "/cards/{flashcard_id}/attempts",
    response_model=AttemptHistoryResponse,
    status_code=status.HTTP_200_OK,
)
def get_attempt_history(
    flashcard_id: int,
    user_id: CurrentUserId,
    limit: Annotated[int, Query(ge=1, le=100)] = 10,
    use_case: SessionAttemptUseCase = Depends(
        inject_use_case(container.session_attempt_use_case)
    ),
) -> AttemptHistoryResponse:
    """Get a card's most recent attempts, newest first."""
    attempts = use_case.history(user_id, flashcard_id, limit)
    return AttemptHistoryResponse(
        attempts=[SessionAttemptResponse.from_domain(attempt) for attempt in attempts]
    )


@router.get(
    "/attempts/daily",
    response_model=DailyHistogramResponse,
    status_code=status.HTTP_200_OK,
)
def get_daily_histogram(
    user_id: CurrentUserId,
    category: str | None = None,
    days: Annotated[int, Query(ge=1, le=365)] = 30,
    use_case: SessionAttemptUseCase = Depends(
        inject_use_case(container.session_attempt_use_case)
    ),
) -> DailyHistogramResponse:
    """Correct and incorrect answers per day; days without attempts are omitted."""
    stats = use_case.daily_histogram(user_id, category, days)
    return DailyHistogramResponse(
        days=[DailyAttemptStatsResponse.from_domain(day) for day in stats]
    )


@router.delete("/attempts", response_model=PurgeResponse, status_code=status.HTTP_200_OK)
def purge_attempts(
    user_id: CurrentUserId,
    older_than_days: Annotated[int | None, Query(ge=0)] = None,
    use_case: SessionAttemptUseCase = Depends(
        inject_use_case(container.session_attempt_use_case)
    ),
) -> PurgeResponse:
    """Delete the user's attempts older than the retention horizon (or the given days)."""
    older_than = None
    if older_than_days is not None:
        older_than = use_case.clock() - timedelta(days=older_than_days)
    return PurgeResponse(deleted=use_case.purge(user_id, older_than))
