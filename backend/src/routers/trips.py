"""
Trip router: add, list and delete trips.
"""

import structlog
from typing import List
from fastapi import APIRouter, Depends, status

from backend.src.dependencies import get_trip_repository
from backend.src.errors import AppError, UnhandledError, failure_message
from backend.src.models.common import ERROR_RESPONSES, MessageResponse
from backend.src.models.trip import TripCreatedResponse, TripCreateRequest, TripResponse
from backend.src.repositories.trip_repo import TripRepository

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/trip", tags=["Trips"], responses=ERROR_RESPONSES)


@router.post(
    "/add",
    response_model=TripCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add Trip"
)
@failure_message("Error adding trip")
async def add_trip(
    trip_request: TripCreateRequest,
    trip_repo: TripRepository = Depends(get_trip_repository)
) -> TripCreatedResponse:
    """Create a trip; name, date and budget are all required."""
    try:
        trip = await trip_repo.add_trip(
            name=trip_request.name,
            date=trip_request.date,
            budget=trip_request.budget
        )
        return TripCreatedResponse(trip=trip)

    except AppError:
        raise
    except Exception as e:
        logger.error("trip_add_error", error=str(e))
        raise UnhandledError("Error adding trip") from e


@router.get(
    "",
    response_model=List[TripResponse],
    summary="List Trips"
)
async def list_trips(
    trip_repo: TripRepository = Depends(get_trip_repository)
) -> List[TripResponse]:
    """All trips, earliest date first."""
    try:
        return await trip_repo.list_trips()
    except Exception as e:
        logger.error("trip_list_error", error=str(e))
        raise UnhandledError("Error fetching trips") from e


@router.delete(
    "/delete/{trip_id}",
    response_model=MessageResponse,
    summary="Delete Trip"
)
async def delete_trip(
    trip_id: str,
    trip_repo: TripRepository = Depends(get_trip_repository)
) -> MessageResponse:
    """
    Delete a trip by id.

    Succeeds whether or not a trip matched; a malformed id is a 500.
    """
    try:
        await trip_repo.delete_trip(trip_id)
        return MessageResponse(message="Trip deleted successfully!")
    except Exception as e:
        logger.error("trip_delete_error", error=str(e), trip_id=trip_id)
        raise UnhandledError("Error deleting trip") from e
