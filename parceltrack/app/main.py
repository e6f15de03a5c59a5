"""
FastAPI Application Entry Point.

Builds the Parcel Tracker application. Each application instance owns one
database engine; tests pass in their own.
"""

from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI
from starlette.exceptions import HTTPException
from fastapi.exceptions import RequestValidationError
from sqlalchemy.ext.asyncio import AsyncEngine
from parceltrack.app.core.config import Settings, settings as default_settings
from parceltrack.app.api.v1.router import router as api_v1_router
from parceltrack.app.core.observability import ObservabilityMiddleware, configure_logging
from parceltrack.app.db.session import Base, create_engine, create_session_factory
from parceltrack.app.core.exceptions import (
    AppException,
    app_exception_handler,
    http_exception_handler,
    validation_exception_handler,
    generic_exception_handler
)

# Import models to ensure they are registered with Base
from parceltrack.app.models.parcel import Parcel


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for application startup/shutdown.
    
    1. Creates database tables on startup.
    2. Disposes of the engine's connections on shutdown.
    """
    async with app.state.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    await app.state.engine.dispose()


def create_app(settings: Optional[Settings] = None, engine: Optional[AsyncEngine] = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        settings: Application settings (environment-derived by default)
        engine: Pre-built engine; one is created from ``settings`` if omitted

    Returns:
        Configured FastAPI application
    """
    settings = settings or default_settings
    configure_logging(settings)

    app = FastAPI(
        title=settings.app_name,
        version=settings.api_version,
        debug=settings.debug,
        description="Parcel tracking store with status-gated mutations",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.engine = engine or create_engine(settings)
    app.state.session_factory = create_session_factory(app.state.engine)

    app.add_middleware(ObservabilityMiddleware)

    # Register global exception handlers
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    @app.get("/health", tags=["Health"])
    async def health_check():
        """
        Health check endpoint.
        
        Returns:
            dict: Status and application information
        """
        return {
            "status": "healthy",
            "app_name": settings.app_name,
            "version": settings.api_version,
        }

    # Include API v1 router
    app.include_router(api_v1_router, prefix=f"/{settings.api_version}")

    return app


app = create_app()
