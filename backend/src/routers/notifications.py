"""
Notification router: add, list and delete notifications.
"""

import structlog
from typing import List
from fastapi import APIRouter, Depends, status

from backend.src.dependencies import get_notification_repository
from backend.src.errors import AppError, UnhandledError, failure_message
from backend.src.models.common import ERROR_RESPONSES, MessageResponse
from backend.src.models.notification import (
    NotificationCreatedResponse, NotificationCreateRequest, NotificationResponse
)
from backend.src.repositories.notification_repo import NotificationRepository

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/notification", tags=["Notifications"], responses=ERROR_RESPONSES)


@router.post(
    "/add",
    response_model=NotificationCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add Notification"
)
@failure_message("Error adding notification")
async def add_notification(
    notification_request: NotificationCreateRequest,
    notification_repo: NotificationRepository = Depends(get_notification_repository)
) -> NotificationCreatedResponse:
    """Create a notification stamped with the server time."""
    try:
        notification = await notification_repo.add_notification(
            message=notification_request.message,
            type=notification_request.type
        )
        return NotificationCreatedResponse(notification=notification)

    except AppError:
        raise
    except Exception as e:
        logger.error("notification_add_error", error=str(e))
        raise UnhandledError("Error adding notification") from e


@router.get(
    "",
    response_model=List[NotificationResponse],
    summary="List Notifications"
)
async def list_notifications(
    notification_repo: NotificationRepository = Depends(get_notification_repository)
) -> List[NotificationResponse]:
    """All notifications, most recent first."""
    try:
        return await notification_repo.list_notifications()
    except Exception as e:
        logger.error("notification_list_error", error=str(e))
        raise UnhandledError("Error fetching notifications") from e


@router.delete(
    "/delete/{notification_id}",
    response_model=MessageResponse,
    summary="Delete Notification"
)
async def delete_notification(
    notification_id: str,
    notification_repo: NotificationRepository = Depends(get_notification_repository)
) -> MessageResponse:
    """Delete a notification by id; succeeds even when nothing matched."""
    try:
        await notification_repo.delete_notification(notification_id)
        return MessageResponse(message="Notification deleted successfully!")
    except Exception as e:
        logger.error("notification_delete_error", error=str(e), notification_id=notification_id)
        raise UnhandledError("Error deleting notification") from e
