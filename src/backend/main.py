"""
CivicVision Backend Application

Community governance: stakeholders propose visions, vote on them with
reputation-weighted ballots, and track approved visions through milestones.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.v1 import router as api_v1_router
from core.config import settings
from core.events import create_start_app_handler, create_stop_app_handler
from core.exceptions import (
    AlreadyRegistered,
    AlreadyVoted,
    DuplicateMilestone,
    GovernanceError,
    InvalidInput,
    InvalidState,
    NotAuthorized,
    NotFound,
    VotingClosed,
)
from core.middleware import RequestContextMiddleware, SecurityHeadersMiddleware

logger = structlog.get_logger(__name__)

# Most specific first; the first matching kind decides the status code
ERROR_STATUS_CODES: list[tuple[type[GovernanceError], int]] = [
    (AlreadyRegistered, status.HTTP_409_CONFLICT),
    (NotAuthorized, status.HTTP_403_FORBIDDEN),
    (InvalidInput, status.HTTP_400_BAD_REQUEST),
    (NotFound, status.HTTP_404_NOT_FOUND),
    (AlreadyVoted, status.HTTP_409_CONFLICT),
    (DuplicateMilestone, status.HTTP_409_CONFLICT),
    (VotingClosed, status.HTTP_409_CONFLICT),
    (InvalidState, status.HTTP_409_CONFLICT),
]


def status_code_for(exc: GovernanceError) -> int:
    for kind, code in ERROR_STATUS_CODES:
        if isinstance(exc, kind):
            return code
    return status.HTTP_400_BAD_REQUEST


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager for startup and shutdown events."""
    # Startup
    await create_start_app_handler(app)()
    yield
    # Shutdown
    await create_stop_app_handler(app)()


def create_application() -> FastAPI:
    """Create and configure the FastAPI application."""
    application = FastAPI(
        title=settings.APP_NAME,
        description="Community governance: weighted voting on visions and milestone tracking",
        version="1.0.0",
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
        openapi_url="/openapi.json" if settings.DEBUG else None,
        lifespan=lifespan,
    )

    # Add middleware (order matters - processed in reverse)
    # 1. Security headers - added to all responses
    application.add_middleware(SecurityHeadersMiddleware)

    # 2. Request correlation id bound into structlog context
    application.add_middleware(RequestContextMiddleware)

    # 3. CORS - restricted to specific methods and headers
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
        expose_headers=["X-Request-ID"],
    )

    # Include routers
    application.include_router(api_v1_router, prefix="/api/v1")

    @application.exception_handler(GovernanceError)
    async def governance_exception_handler(request: Request, exc: GovernanceError) -> JSONResponse:
        """Translate governance error kinds into HTTP responses."""
        code = status_code_for(exc)
        logger.info(
            "governance_request_rejected",
            error=exc.code,
            status_code=code,
            path=request.url.path,
        )
        return JSONResponse(status_code=code, content={"detail": exc.message, "error": exc.code})

    # Add global exception handler to ensure CORS headers are present on error responses
    @application.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Catch unhandled exceptions and return a structured JSON 500."""
        logger.exception(
            "Unhandled exception",
            error=str(exc),
            error_type=type(exc).__name__,
            path=request.url.path,
            method=request.method,
        )

        return JSONResponse(
            status_code=500,
            content={
                "detail": "An internal server error occurred. Please try again later.",
                "error_type": type(exc).__name__ if settings.DEBUG else "InternalServerError",
            },
        )

    return application


app = create_application()


@app.get("/health", tags=["Health"])
async def health_check() -> dict[str, str]:
    """Health check endpoint for load balancers and monitoring."""
    return {"status": "healthy", "service": "civicvision-api"}


@app.get("/", tags=["Root"])
async def root() -> dict[str, str]:
    """Root endpoint with API information."""
    return {
        "name": settings.APP_NAME,
        "version": "1.0.0",
        "docs": "/docs" if settings.DEBUG else "Documentation disabled in production",
    }
