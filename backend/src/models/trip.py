"""
Trip models.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from backend.src.models.common import MongoDocument, TextField, as_utc


class TripCreateRequest(BaseModel):
    """Add-trip request; presence of each field is checked by the repository."""
    name: TextField = None
    date: Optional[datetime] = None
    budget: Optional[float] = None

    model_config = {
        "json_schema_extra": {
            "example": {
                "name": "Lisbon",
                "date": "2025-06-01",
                "budget": 1500
            }
        }
    }


class TripResponse(MongoDocument):
    """Trip as returned by the API."""
    name: str = Field(
        ...,
        description="Trip name"
    )
    date: datetime = Field(
        ...,
        description="Trip date (UTC)"
    )
    budget: float = Field(
        ...,
        description="Trip budget"
    )

    @field_validator("date")
    @classmethod
    def normalize_date(cls, v: datetime) -> datetime:
        return as_utc(v)


class TripCreatedResponse(BaseModel):
    message: str = "Trip added successfully!"
    trip: TripResponse
