"""
Helpdesk API - FastAPI Application

Main entry point for the FastAPI application.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import DataError, IntegrityError, NoResultFound, OperationalError

from helpdesk.config import get_settings
from helpdesk.core.database import close_db, init_db
from helpdesk.models.contracts.common import ErrorResponse
from helpdesk.routers import (
    api_keys_router,
    attachments_router,
    comments_router,
    contacts_router,
    health_router,
    organizations_router,
    status_codes_router,
    teams_router,
    tickets_router,
    users_router,
)

# Configure logging
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan manager.

    Handles startup and shutdown events.
    """
    # Startup
    logger.info("Starting Helpdesk API...")
    settings = get_settings()
    settings.validate_paths()

    logger.info("Initializing database connection...")
    await init_db()
    logger.info("Database connection established")

    logger.info(f"Helpdesk API started in {settings.environment} mode")

    yield

    # Shutdown
    logger.info("Shutting down Helpdesk API...")
    await close_db()
    logger.info("Helpdesk API shutdown complete")


def _field_errors(errors: list[dict]) -> dict[str, str]:
    return {".".join(str(loc) for loc in e["loc"]): e["msg"] for e in errors}


def _error_response(
    status_code: int, error: str, message: str, details: dict | None = None
) -> JSONResponse:
    body = ErrorResponse(error=error, message=message, details=details)
    return JSONResponse(status_code=status_code, content=body.model_dump())


def create_app() -> FastAPI:
    """
    Create and configure FastAPI application.

    Interactive docs are only served in debug mode; every other route
    except /health sits behind admission control.

    Returns:
        Configured FastAPI application instance
    """
    settings = get_settings()

    app = FastAPI(
        title="Helpdesk API",
        description="Multi-tenant support ticketing API",
        version="1.0.0",
        docs_url="/docs" if settings.debug else None,
        redoc_url=None,
        openapi_url="/openapi.json" if settings.debug else None,
        lifespan=lifespan,
    )

    # ==========================================================================
    # CORS Middleware
    # ==========================================================================
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["x-ratelimit-limit", "x-ratelimit-remaining", "x-ratelimit-reset"],
    )

    # ==========================================================================
    # Rate limit headers
    # ==========================================================================
    @app.middleware("http")
    async def rate_limit_headers_middleware(request: Request, call_next):
        """Copy admission's rate limit headers onto every admitted response."""
        response = await call_next(request)
        for name, value in getattr(request.state, "rate_limit_headers", {}).items():
            response.headers.setdefault(name, value)
        return response

    # ==========================================================================
    # Global Exception Handlers
    # ==========================================================================
    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Malformed query parameters or body -> 400."""
        return _error_response(
            400, "validation_error", "Validation failed", {"fields": _field_errors(exc.errors())}
        )

    @app.exception_handler(PydanticValidationError)
    async def model_validation_handler(
        request: Request, exc: PydanticValidationError
    ) -> JSONResponse:
        return _error_response(
            400, "validation_error", "Validation failed", {"fields": _field_errors(exc.errors())}
        )

    @app.exception_handler(IntegrityError)
    async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
        """Unique violations -> 409, dangling references -> 400."""
        reason = str(exc.orig or exc).lower()
        logger.warning(f"Constraint violation on {request.url.path}: {reason}")

        if "foreign key" in reason:
            return _error_response(400, "invalid_reference", "Referenced resource not found")
        if "unique" in reason or "duplicate" in reason:
            return _error_response(409, "conflict", "Resource already exists")
        return _error_response(409, "conflict", "Database constraint violation")

    @app.exception_handler(NoResultFound)
    async def not_found_handler(request: Request, exc: NoResultFound) -> JSONResponse:
        return _error_response(404, "not_found", "Resource not found")

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
        """Domain validation (invalid cursor, contact without identifiers) -> 400."""
        return _error_response(400, "validation_error", str(exc))

    @app.exception_handler(OverflowError)
    @app.exception_handler(DataError)
    async def out_of_range_handler(request: Request, exc: Exception) -> JSONResponse:
        """Identifiers or values the database column cannot hold -> 400."""
        logger.warning(f"Out of range value on {request.url.path}: {exc}")
        return _error_response(400, "validation_error", "Value out of range")

    @app.exception_handler(OperationalError)
    @app.exception_handler(TimeoutError)
    async def unavailable_handler(request: Request, exc: Exception) -> JSONResponse:
        """Database unreachable or a storage call timed out -> 503."""
        logger.error(
            f"Storage unavailable on {request.method} {request.url.path}: {exc}", exc_info=True
        )
        return _error_response(503, "service_unavailable", "Service temporarily unavailable")

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Anything else -> 500 without internal detail."""
        logger.error(
            f"Unhandled exception on {request.method} {request.url.path}: {exc}",
            exc_info=True,
        )
        response = _error_response(500, "internal_error", "An unexpected error occurred")
        # Runs outside the http middleware stack, so copy admission headers here
        response.headers.update(getattr(request.state, "rate_limit_headers", {}))
        return response

    # ==========================================================================
    # Register Routers
    # ==========================================================================
    app.include_router(health_router)
    app.include_router(organizations_router)
    app.include_router(users_router)
    app.include_router(api_keys_router)
    app.include_router(teams_router)
    app.include_router(contacts_router)
    app.include_router(tickets_router)
    app.include_router(comments_router)
    app.include_router(attachments_router)
    app.include_router(status_codes_router)

    return app


# Create app instance
app = create_app()


def main() -> None:
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "helpdesk.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.is_development,
    )


if __name__ == "__main__":
    main()
