from datetime import timedelta

from dependency_injector import containers, providers
from sqlalchemy.orm import Session

from cardwise.application.learning.use_cases.flashcard_generation_use_case import (
    FlashcardGenerationUseCase,
)
from cardwise.application.learning.use_cases.quota_use_case import QuotaUseCase
from cardwise.application.learning.use_cases.session_attempt_use_case import (
    SessionAttemptUseCase,
)
from cardwise.application.learning.use_cases.study_session_use_case import StudySessionUseCase
from cardwise.config import get_settings
from cardwise.domain.learning.services import CardScheduler, SchedulerConfig
from cardwise.infrastructure.ai.ai_service import AIFlashcardService
from cardwise.infrastructure.learning.repositories.card_repository import CardRepository
from cardwise.infrastructure.learning.repositories.progress_repository import (
    ProgressRepository,
)
from cardwise.infrastructure.learning.repositories.quota_repository import QuotaRepository
from cardwise.infrastructure.learning.repositories.session_attempt_repository import (
    SessionAttemptRepository,
)
from cardwise.infrastructure.learning.services.entitlement_service import (
    SubscriptionEntitlementService,
)


class Container(containers.DeclarativeContainer):
    """Dependency injection container."""

    # Declare db as a dependency that will be provided at runtime
    db = providers.Dependency(instance_of=Session)

    settings = providers.Callable(get_settings)

    # Repositories
    card_repository = providers.Factory(CardRepository, db=db)
    progress_repository = providers.Factory(ProgressRepository, db=db)
    session_attempt_repository = providers.Factory(SessionAttemptRepository, db=db)
    quota_repository = providers.Factory(QuotaRepository, db=db)

    # Collaborators
    entitlement_service = providers.Factory(SubscriptionEntitlementService, db=db)
    ai_flashcard_service = providers.Singleton(AIFlashcardService)

    # Domain services (pure domain logic, no db)
    card_scheduler = providers.Factory(
        CardScheduler,
        config=providers.Factory(SchedulerConfig.from_settings, settings),
    )

    suppression_window = providers.Factory(
        timedelta, minutes=settings.provided.SUPPRESSION_WINDOW_MINUTES
    )
    attempt_retention = providers.Factory(timedelta, days=settings.provided.ATTEMPT_RETENTION_DAYS)

    # Learning module, application use cases
    session_attempt_use_case = providers.Factory(
        SessionAttemptUseCase,
        attempt_repository=session_attempt_repository,
        card_repository=card_repository,
        suppression_window=suppression_window,
        retention=attempt_retention,
    )

    study_session_use_case = providers.Factory(
        StudySessionUseCase,
        card_repository=card_repository,
        progress_repository=progress_repository,
        attempt_repository=session_attempt_repository,
        entitlement_service=entitlement_service,
        scheduler=card_scheduler,
        suppression_window=suppression_window,
        top_up_threshold=settings.provided.SESSION_TOP_UP_THRESHOLD,
        free_max_cards_per_session=settings.provided.FREE_MAX_CARDS_PER_SESSION,
        free_max_important_cards=settings.provided.FREE_MAX_IMPORTANT_CARDS,
    )

    quota_use_case = providers.Factory(
        QuotaUseCase,
        quota_repository=quota_repository,
        entitlement_service=entitlement_service,
        free_limit=settings.provided.FREE_MONTHLY_AI_LIMIT,
        premium_limit=settings.provided.PREMIUM_MONTHLY_AI_LIMIT,
    )

    flashcard_generation_use_case = providers.Factory(
        FlashcardGenerationUseCase,
        quota_use_case=quota_use_case,
        ai_service=ai_flashcard_service,
    )


container = Container()
