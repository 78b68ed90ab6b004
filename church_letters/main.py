"""FastAPI application for letter templates and generated letters.

Run with ``uvicorn church_letters.main:app`` or ``python -m church_letters.main``.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from church_letters.api.letters import router as letters_router
from church_letters.api.schemas import ErrorResponse
from church_letters.api.templates import router as templates_router
from church_letters.core.config import Settings, get_settings
from church_letters.core.exceptions import LetterServiceError
from church_letters.core.factory import ComponentFactory
from church_letters.core.logging_config import setup_logging
from church_letters.db.session import close_db, init_db

logger = logging.getLogger(__name__)

API_VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create and seed the database on startup, dispose of the engine on shutdown."""
    settings: Settings = app.state.settings

    logger.info("Starting Church Letters API...")

    try:
        logger.info("Initializing database...")
        await init_db(settings)
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}", exc_info=True)
        raise

    yield

    logger.info("Shutting down Church Letters API...")

    try:
        await close_db(settings)
        logger.info("Database connections closed")
    except Exception as e:
        logger.error(f"Error closing database: {e}", exc_info=True)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Optional settings. If None, loads from environment.

    Returns:
        Configured FastAPI application instance.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Letter and certificate templates with variable substitution",
        version=API_VERSION,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.state.settings = settings
    app.state.factory = ComponentFactory(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(templates_router)
    app.include_router(letters_router)
    logger.info("Registered templates and letters routers")

    @app.get("/health", tags=["health"])
    async def health_check():
        """Liveness probe. Does not touch the database."""
        return {
            "status": "healthy",
            "service": settings.app_name,
            "version": API_VERSION,
        }

    @app.exception_handler(LetterServiceError)
    async def letter_service_exception_handler(request: Request, exc: LetterServiceError):
        """Turn domain errors into the standard error envelope."""
        if exc.status_code >= 500:
            logger.error(f"{exc.error_code}: {exc.message}")
        else:
            logger.warning(f"{exc.error_code}: {exc.message}")
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(**exc.to_dict()).model_dump(),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Malformed request bodies, unknown fields included."""
        logger.warning(f"Validation error: {exc.errors()}")
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={
                "detail": "Validation error",
                "errors": jsonable_errors(exc),
            },
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Last resort: never leak tracebacks to clients."""
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=ErrorResponse(
                detail="Internal server error",
                error_code="INTERNAL_ERROR",
            ).model_dump(),
        )

    logger.info("FastAPI application created successfully")
    return app


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    """Strip non-serializable context (e.g. exception objects) from validation errors."""
    from fastapi.encoders import jsonable_encoder

    return jsonable_encoder(exc.errors(), custom_encoder={Exception: str})


setup_logging()
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    logger.info("Starting uvicorn server on port 8000...")
    uvicorn.run(
        "church_letters.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level=settings.log_level.lower(),
    )
