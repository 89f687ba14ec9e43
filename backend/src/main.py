"""
FastAPI application entry point for the Vaacay backend.

This module provides the FastAPI application with:
- Signup, login and password reset endpoints
- Trip and notification endpoints
- Health and readiness endpoints
- Request logging with correlation IDs and Prometheus metrics
- CORS and security headers
- MongoDB client management
- Graceful startup and shutdown

``create_app`` accepts pre-built collaborators (database, identity
provider, mail relay) so tests and alternative deployments can inject
their own; anything not supplied is built from settings at startup.
"""

import uvicorn
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, Optional

from fastapi import FastAPI, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry
from pymongo.asynchronous.database import AsyncDatabase
from starlette.exceptions import HTTPException as StarletteHTTPException

from backend.src.config import Settings, get_settings
from backend.src.dependencies import build_repositories, connect_database, ping_database
from backend.src.errors import AppError, UnhandledError, ValidationError
from backend.src.middleware import RequestLoggingMiddleware, SecurityHeadersMiddleware
from backend.src.routers import auth, notifications, trips
from backend.src.services.auth_service import AuthService
from backend.src.services.identity_provider import FirebaseIdentityProvider
from backend.src.services.mail_relay import SmtpMailRelay
from shared.logging import configure_logging, get_logger
from shared.metrics import get_metrics_handler, setup_metrics

logger = get_logger(__name__)


# ============================================================================
# Lifespan Management
# ============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan manager for startup and shutdown events.

    Handles:
    - MongoDB connection (fatal on failure) and index creation
    - Identity provider and mail relay construction
    - Repository and service initialization
    - Closing the MongoDB client on shutdown
    """
    settings: Settings = app.state.settings
    client = None

    logger.info(
        "application_starting",
        app_name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment
    )

    try:
        if app.state.database is None:
            client, app.state.database = await connect_database(settings)

        user_repo, trip_repo, notification_repo = build_repositories(app.state.database)
        for repo in (user_repo, trip_repo, notification_repo):
            await repo.ensure_indexes()

        if app.state.identity_provider is None:
            app.state.identity_provider = FirebaseIdentityProvider.from_settings(settings)
        if app.state.mail_relay is None:
            app.state.mail_relay = SmtpMailRelay.from_settings(settings)

        app.state.user_repo = user_repo
        app.state.trip_repo = trip_repo
        app.state.notification_repo = notification_repo
        app.state.auth_service = AuthService(
            user_repo,
            identity_provider=app.state.identity_provider,
            mail_relay=app.state.mail_relay,
            settings=settings,
            metrics=app.state.auth_metrics
        )
    except Exception as e:
        logger.error("application_startup_failed", error=str(e), exc_info=True)
        if client is not None:
            await client.close()
        raise

    logger.info("application_started", app_name=settings.app_name)

    try:
        yield
    finally:
        logger.info("application_shutting_down")
        if client is not None:
            await client.close()
            logger.info("database_client_closed")
        logger.info("application_shutdown_complete")


# ============================================================================
# Exception Handlers
# ============================================================================

async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Render taxonomy errors as ``{"error": ...}``."""
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        "request_error",
        path=request.url.path,
        status_code=exc.status_code,
        error_type=type(exc).__name__,
        error=exc.message
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Map request validation failures onto the API's error responses.

    A body that is not a JSON object is a 400. A field value that cannot be
    cast to its declared type fails the endpoint with its generic 500
    message.
    """
    errors = [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg", "")}
        for error in exc.errors()
    ]
    cast_failures = [
        error for error in exc.errors()
        if error.get("type") != "json_invalid" and len(error.get("loc", ())) > 1
    ]

    if errors and len(cast_failures) == len(errors):
        endpoint = getattr(request.scope.get("route"), "endpoint", None)
        logger.error("field_cast_error", path=request.url.path, errors=errors)
        error = UnhandledError(getattr(endpoint, "failure_message", None))
    else:
        logger.warning("validation_error", path=request.url.path, errors=errors)
        error = ValidationError("Invalid request body", details=errors)

    return JSONResponse(status_code=error.status_code, content=error.to_body())


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    logger.warning(
        "http_exception",
        path=request.url.path,
        status_code=exc.status_code,
        detail=exc.detail
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None)
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last resort for exceptions raised outside the request logging middleware."""
    logger.error(
        "unexpected_exception",
        path=request.url.path,
        error=str(exc),
        exc_info=True
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Server error"}
    )


# ============================================================================
# FastAPI Application
# ============================================================================

def create_app(
    settings: Optional[Settings] = None,
    database: Optional[AsyncDatabase] = None,
    identity_provider: Optional[FirebaseIdentityProvider] = None,
    mail_relay: Optional[SmtpMailRelay] = None
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Application settings (defaults to cached settings)
        database: Pre-built database handle; connects from settings if None
        identity_provider: Pre-built identity provider; Firebase from settings if None
        mail_relay: Pre-built mail relay; SMTP from settings if None

    Returns:
        Configured FastAPI application
    """
    settings = settings or get_settings()

    configure_logging(
        log_level=settings.log_level,
        json_logs=settings.log_format == "json",
        service_name=settings.app_name,
        environment=settings.environment
    )

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Signup/login, password reset, trips and notifications.",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
        debug=settings.debug,
    )

    registry = CollectorRegistry()
    http_metrics, auth_metrics = setup_metrics(registry)

    app.state.settings = settings
    app.state.database = database
    app.state.identity_provider = identity_provider
    app.state.mail_relay = mail_relay
    app.state.auth_metrics = auth_metrics
    app.state.metrics_handler = get_metrics_handler(registry)

    # ========================================================================
    # Middleware Configuration
    # ========================================================================

    if settings.security_headers_enabled:
        app.add_middleware(SecurityHeadersMiddleware)

    app.add_middleware(RequestLoggingMiddleware, metrics=http_metrics)

    # Added last so it wraps everything, including error responses
    if settings.cors_enabled:
        logger.info("configuring_cors", origins=settings.allowed_origins)
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.allowed_origins,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    # ========================================================================
    # Exception Handlers
    # ========================================================================

    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    # ========================================================================
    # Health, Readiness and Metrics Endpoints
    # ========================================================================

    @app.get("/", tags=["Health"], response_class=PlainTextResponse)
    async def root() -> str:
        return "Backend Online"

    @app.get("/health", tags=["Health"])
    async def health_check() -> Dict[str, Any]:
        """
        Health check endpoint.

        Returns basic health status without checking dependencies.
        Use for container health checks.
        """
        return {
            "status": "healthy",
            "service": settings.app_name,
            "version": settings.app_version,
            "environment": settings.environment
        }

    @app.get("/ready", tags=["Health"])
    async def readiness_check(request: Request) -> JSONResponse:
        """
        Readiness check endpoint.

        Reports 503 until MongoDB answers a ping.
        """
        database = request.app.state.database
        healthy = database is not None and await ping_database(database)
        checks = {"database": "healthy" if healthy else "unhealthy"}

        return JSONResponse(
            status_code=status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "ready" if healthy else "not_ready",
                "service": settings.app_name,
                "version": settings.app_version,
                "checks": checks
            }
        )

    if settings.metrics_enabled:
        @app.get("/metrics", tags=["Monitoring"], response_class=PlainTextResponse)
        async def metrics(request: Request) -> Response:
            """Prometheus metrics endpoint."""
            return Response(
                content=request.app.state.metrics_handler(),
                media_type=CONTENT_TYPE_LATEST
            )

    # ========================================================================
    # API Router Registration
    # ========================================================================

    app.include_router(auth.router, prefix=settings.api_prefix)
    app.include_router(trips.router, prefix=settings.api_prefix)
    app.include_router(notifications.router, prefix=settings.api_prefix)

    return app


app = create_app()


# ============================================================================
# Application Entry Point
# ============================================================================

if __name__ == "__main__":
    """
    Run the application with Uvicorn for development.
    """
    settings = get_settings()

    logger.info(
        "starting_uvicorn_server",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )

    uvicorn.run(
        "backend.src.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
        access_log=True,
    )
