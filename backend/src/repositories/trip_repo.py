"""
Trip repository.

Trips are created, listed in ascending date order and deleted by id. There
is no update path and delete does not check that the trip existed.
"""

import structlog
from datetime import datetime
from typing import List, Optional

from bson import ObjectId
from pymongo import ASCENDING
from pymongo.asynchronous.collection import AsyncCollection

from backend.src.errors import require_fields
from backend.src.models.common import to_bson_precision
from backend.src.models.trip import TripResponse

logger = structlog.get_logger(__name__)

COLLECTION_NAME = "trips"


class TripRepository:
    """Repository for trip database operations."""

    def __init__(self, collection: AsyncCollection):
        self.collection = collection

    async def ensure_indexes(self) -> None:
        await self.collection.create_index([("date", ASCENDING)])

    async def add_trip(
        self,
        name: Optional[str],
        date: Optional[datetime],
        budget: Optional[float]
    ) -> TripResponse:
        """
        Persist a new trip.

        Args:
            name: Trip name
            date: Trip date
            budget: Trip budget

        Returns:
            Created trip with its assigned id

        Raises:
            ValidationError: If any field is absent
        """
        require_fields(name=name, date=date, budget=budget)

        document = {"name": name, "date": to_bson_precision(date), "budget": budget}
        result = await self.collection.insert_one(document)
        document["_id"] = result.inserted_id

        logger.info("trip_created", trip_id=str(result.inserted_id), name=name)
        return TripResponse.from_document(document)

    async def list_trips(self) -> List[TripResponse]:
        """
        List all trips ordered by ascending date.

        Returns:
            Trips, earliest first; empty list if none
        """
        cursor = self.collection.find({}).sort([("date", ASCENDING), ("_id", ASCENDING)])
        documents = await cursor.to_list()
        logger.debug("trips_listed", count=len(documents))
        return [TripResponse.from_document(document) for document in documents]

    async def delete_trip(self, trip_id: str) -> int:
        """
        Delete a trip by id.

        Args:
            trip_id: ObjectId hex string

        Returns:
            Number of deleted documents (0 when nothing matched)

        Raises:
            bson.errors.InvalidId: If ``trip_id`` is not a valid ObjectId
        """
        result = await self.collection.delete_one({"_id": ObjectId(trip_id)})
        logger.info("trip_deleted", trip_id=trip_id, deleted=result.deleted_count)
        return result.deleted_count
