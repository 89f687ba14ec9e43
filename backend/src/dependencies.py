"""
FastAPI dependency injection for database access, repositories and services.

Provides:
- MongoDB client construction and connectivity check (startup)
- Index creation
- Injectable repository and service instances

Nothing here is a module-level singleton: the lifespan in ``main`` builds
every collaborator and stores it on ``app.state``; the ``get_*`` functions
below only read it back, so tests can swap any of them.
"""

import structlog
from typing import Tuple
from fastapi import Request
from pymongo import AsyncMongoClient
from pymongo.asynchronous.database import AsyncDatabase

from backend.src.config import Settings
from backend.src.repositories.notification_repo import (
    COLLECTION_NAME as NOTIFICATIONS_COLLECTION, NotificationRepository
)
from backend.src.repositories.trip_repo import COLLECTION_NAME as TRIPS_COLLECTION, TripRepository
from backend.src.repositories.user_repo import COLLECTION_NAME as USERS_COLLECTION, UserRepository
from backend.src.services.auth_service import AuthService

logger = structlog.get_logger(__name__)


# ============================================================================
# DATABASE
# ============================================================================


async def connect_database(settings: Settings) -> Tuple[AsyncMongoClient, AsyncDatabase]:
    """
    Create the MongoDB client and verify the server is reachable.

    Should be called during application startup. A failure here is meant
    to abort startup.

    Args:
        settings: Application settings

    Returns:
        (client, database) tuple

    Raises:
        pymongo.errors.PyMongoError: If the server cannot be reached
    """
    client = AsyncMongoClient(
        settings.mongodb_url,
        serverSelectionTimeoutMS=settings.mongodb_server_selection_timeout_ms,
        tz_aware=True
    )

    try:
        await client.admin.command("ping")
    except Exception as e:
        logger.error("database_connection_failed", error=str(e))
        await client.close()
        raise

    database = client.get_default_database(default=settings.mongodb_database)
    logger.info("database_connected", database=database.name)
    return client, database


async def ping_database(database: AsyncDatabase) -> bool:
    """Return True when the database answers a ping."""
    try:
        await database.command("ping")
        return True
    except Exception as e:
        logger.error("database_health_check_failed", error=str(e))
        return False


def build_repositories(
    database: AsyncDatabase
) -> Tuple[UserRepository, TripRepository, NotificationRepository]:
    """Bind repositories to their collections."""
    return (
        UserRepository(database[USERS_COLLECTION]),
        TripRepository(database[TRIPS_COLLECTION]),
        NotificationRepository(database[NOTIFICATIONS_COLLECTION]),
    )


# ============================================================================
# REQUEST DEPENDENCIES
# ============================================================================


def get_settings_from_app(request: Request) -> Settings:
    return request.app.state.settings


def get_auth_service(request: Request) -> AuthService:
    """
    Get the authentication service.

    Example:
        @router.post("/login")
        async def login(auth_service: AuthService = Depends(get_auth_service)):
            ...
    """
    return request.app.state.auth_service


def get_trip_repository(request: Request) -> TripRepository:
    return request.app.state.trip_repo


def get_notification_repository(request: Request) -> NotificationRepository:
    return request.app.state.notification_repo
