"""
Shared Pydantic models and helpers for MongoDB-backed resources.
"""

from datetime import datetime, timezone
from typing import Annotated, Any, Dict, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field

from backend.src.errors import is_absent


def utc_now() -> datetime:
    """
    Current UTC time truncated to millisecond precision.

    BSON datetimes only keep milliseconds, so truncating up front makes the
    value returned on create identical to the one read back later.
    """
    return to_bson_precision(datetime.now(timezone.utc))


def to_bson_precision(value: datetime) -> datetime:
    """Convert to UTC and drop sub-millisecond digits."""
    value = as_utc(value)
    return value.replace(microsecond=(value.microsecond // 1000) * 1000)


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes, convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def scalar_to_str(value: Any) -> Any:
    """
    Render a JSON number or boolean sent for a text field as a string.

    Zero and false stay absent. Objects and arrays are left for the type
    check to reject.
    """
    if not isinstance(value, (bool, int, float)):
        return value
    if is_absent(value):
        return None
    if isinstance(value, bool):
        return "true"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


# Optional text field that also accepts numbers and booleans
TextField = Annotated[Optional[str], BeforeValidator(scalar_to_str)]


class MongoDocument(BaseModel):
    """
    Base schema for documents read from MongoDB.

    The ObjectId is exposed as a hex string under ``_id``, matching the
    shape API clients expect.
    """
    id: str = Field(
        ...,
        alias="_id",
        description="Document ID (ObjectId hex string)"
    )

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_document(cls, document: Dict[str, Any]):
        """
        Build the schema from a raw MongoDB document.

        Args:
            document: Document as returned by the driver

        Returns:
            Validated model instance
        """
        data = dict(document)
        data["_id"] = str(data["_id"])
        return cls.model_validate(data)


class MessageResponse(BaseModel):
    """Plain success message."""
    message: str = Field(
        ...,
        description="Human readable outcome"
    )


class ErrorResponse(BaseModel):
    """Error response schema."""
    error: str = Field(
        ...,
        min_length=1,
        description="Error message"
    )
    details: Optional[Any] = Field(
        None,
        description="Extra context for malformed requests"
    )

    model_config = {
        "json_schema_extra": {
            "example": {
                "error": "All fields are required"
            }
        }
    }


ERROR_RESPONSES: Dict[int, Dict[str, Any]] = {
    400: {"model": ErrorResponse, "description": "Bad Request"},
    500: {"model": ErrorResponse, "description": "Internal Server Error"},
}
