"""Main FastAPI application."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from cardwise.config import configure_logging, get_settings
from cardwise.database import dispose_engine, initialize_database
from cardwise.domain.common.exceptions import DomainError
from cardwise.domain.learning.exceptions import (
    CardNotDueError,
    CorruptStateError,
    InvalidOutcomeError,
)
from cardwise.exceptions import CardwiseError, PolicyRejectionError, QuotaExceededError
from cardwise.infrastructure.learning.routers import ai, study

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Set up logging and the database engine; release the engine on shutdown."""
    settings = get_settings()
    configure_logging(settings.ENVIRONMENT)
    initialize_database(settings)
    logger.info(f"Starting {settings.PROJECT_NAME} v{settings.VERSION}")
    yield
    dispose_engine()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.VERSION,
        docs_url=f"{settings.API_V1_PREFIX}/docs",
        openapi_url=f"{settings.API_V1_PREFIX}/openapi.json",
        lifespan=lifespan,
    )

    app.state.limiter = ai.limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)  # type: ignore[arg-type]
    app.add_exception_handler(CardwiseError, cardwise_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(DomainError, domain_error_handler)  # type: ignore[arg-type]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(study.router, prefix=settings.API_V1_PREFIX)
    app.include_router(ai.router, prefix=settings.API_V1_PREFIX)

    @app.get("/")
    async def root() -> dict[str, str]:
        """Root endpoint."""
        return {"message": f"Welcome to {settings.PROJECT_NAME}"}

    @app.get(f"{settings.API_V1_PREFIX}/")
    async def api_root() -> dict[str, str]:
        """API v1 root endpoint."""
        return {
            "message": f"{settings.PROJECT_NAME} v1",
            "version": settings.VERSION,
            "docs": f"{settings.API_V1_PREFIX}/docs",
        }

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "healthy"}

    return app


async def cardwise_error_handler(request: Request, exc: CardwiseError) -> JSONResponse:
    """Translate application errors into their HTTP status."""
    content: dict[str, object] = {"detail": exc.message}

    if isinstance(exc, QuotaExceededError):
        content.update(usage_count=exc.usage_count, limit=exc.limit, remaining=exc.remaining)

    if isinstance(exc, PolicyRejectionError):
        logger.info(f"{request.method} {request.url.path} rejected: {exc.message}")
    elif exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")

    return JSONResponse(status_code=exc.status_code, content=content)


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    """Translate domain rule violations into HTTP responses."""
    if isinstance(exc, InvalidOutcomeError):
        status_code = status.HTTP_400_BAD_REQUEST
    elif isinstance(exc, CardNotDueError):
        status_code = status.HTTP_409_CONFLICT
    elif isinstance(exc, CorruptStateError):
        logger.error(
            f"Corrupt progress record for flashcard {exc.flashcard_id}: state {exc.state!r}"
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Stored progress for this card is corrupt."},
        )
    else:
        logger.error(f"{request.method} {request.url.path} violated a domain rule: {exc!s}")
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    return JSONResponse(status_code=status_code, content={"detail": exc.message})


app = create_app()
