"""
Notification models.
"""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from backend.src.models.common import MongoDocument, TextField, as_utc


class NotificationCreateRequest(BaseModel):
    """Add-notification request."""
    message: TextField = None
    type: TextField = None

    model_config = {
        "json_schema_extra": {
            "example": {
                "message": "Your trip to Lisbon starts tomorrow",
                "type": "reminder"
            }
        }
    }


class NotificationResponse(MongoDocument):
    """Notification as returned by the API."""
    message: str = Field(
        ...,
        description="Notification text"
    )
    type: str = Field(
        ...,
        description="Notification category"
    )
    created_at: datetime = Field(
        ...,
        alias="createdAt",
        description="Creation timestamp (UTC, server assigned)"
    )

    @field_validator("created_at")
    @classmethod
    def normalize_created_at(cls, v: datetime) -> datetime:
        return as_utc(v)


class NotificationCreatedResponse(BaseModel):
    message: str = "Notification added successfully!"
    notification: NotificationResponse
