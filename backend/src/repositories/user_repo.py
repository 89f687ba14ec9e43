"""
User repository for database operations.

Provides async operations on the ``users`` collection using pymongo's
asyncio client. Email uniqueness is enforced by a unique index; a duplicate
key on insert is reported as ConflictError.
"""

import structlog
from typing import Optional

from pymongo.asynchronous.collection import AsyncCollection
from pymongo.errors import DuplicateKeyError

from backend.src.errors import ConflictError
from backend.src.models.auth import UserDB

logger = structlog.get_logger(__name__)

COLLECTION_NAME = "users"


class UserRepository:
    """Repository for user database operations."""

    def __init__(self, collection: AsyncCollection):
        """
        Initialize user repository.

        Args:
            collection: ``users`` collection handle
        """
        self.collection = collection

    async def ensure_indexes(self) -> None:
        """Create the unique index on ``email``."""
        await self.collection.create_index("email", unique=True)
        logger.debug("user_indexes_ensured")

    async def create_user(
        self,
        first_name: str,
        last_name: str,
        email: str,
        password_hash: str
    ) -> UserDB:
        """
        Create a new user.

        Args:
            first_name: First name
            last_name: Last name
            email: Email address
            password_hash: Hashed password

        Returns:
            Created user

        Raises:
            ConflictError: If the email already exists
        """
        document = {
            "firstName": first_name,
            "lastName": last_name,
            "email": email,
            "password": password_hash,
        }

        try:
            result = await self.collection.insert_one(document)
        except DuplicateKeyError as e:
            logger.warning("email_already_exists", email=email)
            raise ConflictError() from e
        except Exception as e:
            logger.error("user_create_failed", error=str(e), email=email)
            raise

        document["_id"] = result.inserted_id
        logger.info("user_created", user_id=str(result.inserted_id), email=email)
        return UserDB.from_document(document)

    async def get_user_by_email(self, email: str) -> Optional[UserDB]:
        """
        Get user by email.

        Args:
            email: Email address

        Returns:
            User or None if not found
        """
        try:
            document = await self.collection.find_one({"email": email})
        except Exception as e:
            logger.error("user_get_by_email_failed", error=str(e), email=email)
            raise

        if not document:
            logger.debug("user_not_found", email=email)
            return None

        return UserDB.from_document(document)

    async def email_exists(self, email: str) -> bool:
        """Check whether an account already uses ``email``."""
        return await self.get_user_by_email(email) is not None
