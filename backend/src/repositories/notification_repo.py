"""
Notification repository.

Notifications carry a server-assigned ``createdAt`` and are listed newest
first. Like trips, they cannot be updated and delete does not check that
the notification existed.
"""

import structlog
from typing import List, Optional

from bson import ObjectId
from pymongo import DESCENDING
from pymongo.asynchronous.collection import AsyncCollection

from backend.src.errors import require_fields
from backend.src.models.common import utc_now
from backend.src.models.notification import NotificationResponse

logger = structlog.get_logger(__name__)

COLLECTION_NAME = "notifications"


class NotificationRepository:
    """Repository for notification database operations."""

    def __init__(self, collection: AsyncCollection):
        self.collection = collection

    async def ensure_indexes(self) -> None:
        await self.collection.create_index([("createdAt", DESCENDING)])

    async def add_notification(
        self,
        message: Optional[str],
        type: Optional[str]
    ) -> NotificationResponse:
        """
        Persist a new notification stamped with the current UTC time.

        Args:
            message: Notification text
            type: Notification category

        Returns:
            Created notification

        Raises:
            ValidationError: If message or type is absent
        """
        require_fields("Message and type are required", message=message, type=type)

        document = {"message": message, "type": type, "createdAt": utc_now()}
        result = await self.collection.insert_one(document)
        document["_id"] = result.inserted_id

        logger.info("notification_created", notification_id=str(result.inserted_id), type=type)
        return NotificationResponse.from_document(document)

    async def list_notifications(self) -> List[NotificationResponse]:
        """
        List all notifications, most recent first.

        Ties on ``createdAt`` fall back to insertion order (newest first).
        """
        cursor = self.collection.find({}).sort([("createdAt", DESCENDING), ("_id", DESCENDING)])
        documents = await cursor.to_list()
        logger.debug("notifications_listed", count=len(documents))
        return [NotificationResponse.from_document(document) for document in documents]

    async def delete_notification(self, notification_id: str) -> int:
        """
        Delete a notification by id.

        Returns:
            Number of deleted documents (0 when nothing matched)

        Raises:
            bson.errors.InvalidId: If ``notification_id`` is not a valid ObjectId
        """
        result = await self.collection.delete_one({"_id": ObjectId(notification_id)})
        logger.info(
            "notification_deleted",
            notification_id=notification_id,
            deleted=result.deleted_count
        )
        return result.deleted_count
