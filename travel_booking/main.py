"""FastAPI application initialization and configuration."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from .core.config import Settings, settings
from .core.database import Database, utcnow
from .core.exceptions import register_exception_handlers
from .core.middleware import setup_middleware
from .core.observability import (
    SERVICE_NAME,
    SERVICE_VERSION,
    instrument_fastapi,
    instrument_sqlalchemy,
    setup_metrics,
    setup_structured_logging,
    setup_tracing,
)
from .routers import auth_router, bookings_router, metrics_router, packages_router, travelers_router
from .schemas.health import HealthResponse, HealthStatus, ReadinessResponse
from .services.notification_service import build_notifier

# Configure structured logging
setup_structured_logging()

# Configure traditional logging for compatibility
logging.basicConfig(
    level=getattr(logging, settings.log_level),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

logger = logging.getLogger(__name__)


def _build_lifespan(app_settings: Settings, database: Optional[Database]):

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """
        Application lifespan context manager.

        Builds the database and notifier at startup and releases them at
        shutdown. A database passed to ``create_app`` is used as-is and left
        open for its owner to dispose.
        """
        logger.info("Starting FastAPI application")
        logger.info(f"Environment: {app_settings.environment}")

        owns_database = database is None
        db = database or Database(app_settings.database_url)
        notifier = build_notifier(app_settings)

        try:
            setup_tracing()
            setup_metrics()
            instrument_sqlalchemy(db.engine)
            logger.info("Observability setup completed")

            if not app_settings.is_production:
                await db.create_all()
                logger.info("Database schema ensured")
        except Exception as e:
            logger.error(f"Failed to initialize application: {e}")
            raise

        # Email is advisory; an unreachable relay must not stop startup
        await notifier.verify()

        app.state.database = db
        app.state.notifier = notifier
        logger.info("Application startup complete")

        yield

        logger.info("Shutting down FastAPI application")
        await notifier.close()
        if owns_database:
            await db.dispose()
        logger.info("Application shutdown complete")

    return lifespan


def create_app(
    app_settings: Optional[Settings] = None,
    database: Optional[Database] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        app_settings: Settings to use, defaults to the process-wide settings
        database: Pre-built Database, mainly for tests

    Returns:
        FastAPI: Configured FastAPI application instance
    """
    app_settings = app_settings or settings

    app = FastAPI(
        title="Travel Booking API",
        description="Travel package booking backend: public booking submission, admin confirmation and traveler accounts",
        version=SERVICE_VERSION,
        debug=app_settings.debug,
        lifespan=_build_lifespan(app_settings, database),
        docs_url="/docs" if app_settings.debug else None,
        redoc_url="/redoc" if app_settings.debug else None,
    )

    if database is not None:
        app.state.database = database

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )

    setup_middleware(app, enable_logging=True)

    instrument_fastapi(app)

    register_exception_handlers(app)

    @app.get(
        "/health",
        status_code=status.HTTP_200_OK,
        tags=["Health"],
        summary="Health Check",
        response_model=HealthResponse,
    )
    async def health_check() -> HealthResponse:
        """Liveness probe; does not touch dependencies."""
        return HealthResponse(
            status=HealthStatus.HEALTHY,
            service=SERVICE_NAME,
            version=SERVICE_VERSION,
            environment=app_settings.environment,
            timestamp=utcnow(),
        )

    @app.get(
        "/ready",
        status_code=status.HTTP_200_OK,
        tags=["Health"],
        summary="Readiness Check",
        response_model=ReadinessResponse,
    )
    async def readiness_check(request: Request):
        """
        Readiness check endpoint that verifies the database answers.

        Returns:
            200 when ready, 503 with the failing check otherwise
        """
        try:
            await request.app.state.database.ping()
        except (SQLAlchemyError, OSError) as e:
            logger.warning(f"Readiness check failed: {e}")
            body = ReadinessResponse(
                status=HealthStatus.NOT_READY,
                service=SERVICE_NAME,
                checks={"database": "unavailable"},
            )
            return JSONResponse(status_code=503, content=body.model_dump(mode="json"))

        return ReadinessResponse(
            status=HealthStatus.READY,
            service=SERVICE_NAME,
            checks={"database": "ok"},
        )

    @app.get(
        "/info",
        status_code=status.HTTP_200_OK,
        tags=["Info"],
        summary="Service Information",
        response_model=dict,
    )
    async def service_info():
        """
        Service information endpoint.

        Returns:
            dict: Detailed service information
        """
        return {
            "service": SERVICE_NAME,
            "version": SERVICE_VERSION,
            "environment": app_settings.environment,
            "debug": app_settings.debug,
            "features": {
                "authentication": True,
                "email_notifications": app_settings.email_enabled,
                "tracing": bool(app_settings.otlp_endpoint),
            },
            "endpoints": {
                "health": "/health",
                "readiness": "/ready",
                "info": "/info",
                "metrics": "/metrics",
                "api": app_settings.api_prefix,
                "docs": "/docs" if app_settings.debug else None,
            },
        }

    for router in (auth_router, bookings_router, packages_router, travelers_router):
        app.include_router(router, prefix=app_settings.api_prefix)
    app.include_router(metrics_router)

    logger.info("FastAPI application created and configured")

    return app


# Create the application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "travel_booking.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
        access_log=True,
    )
