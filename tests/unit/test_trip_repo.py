"""
Unit tests for the trip repository.

Tests cover:
- Required field checks (missing, empty and zero values)
- Ordering by ascending date
- Delete without existence check
"""

import pytest
from datetime import datetime, timezone

from bson import ObjectId
from bson.errors import InvalidId

from backend.src.errors import ValidationError


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


class TestAddTrip:
    """Tests for creating trips."""

    @pytest.mark.asyncio
    async def test_add_trip_returns_created_trip(self, trip_repo, mongo_db):
        """Test the created trip echoes its fields and gets an id."""
        trip = await trip_repo.add_trip(name="Lisbon", date=utc(2025, 6, 1), budget=1500)

        assert ObjectId.is_valid(trip.id)
        assert trip.name == "Lisbon"
        assert trip.date == utc(2025, 6, 1)
        assert trip.budget == 1500
        assert mongo_db["trips"].documents[0]["_id"] == ObjectId(trip.id)

    @pytest.mark.asyncio
    async def test_naive_date_is_stored_as_utc(self, trip_repo, mongo_db):
        """Test a date without timezone is treated as UTC."""
        trip = await trip_repo.add_trip(name="Oslo", date=datetime(2025, 1, 2, 3, 4), budget=10)

        assert trip.date == utc(2025, 1, 2, 3, 4)
        assert mongo_db["trips"].documents[0]["date"].tzinfo is not None

    @pytest.mark.asyncio
    async def test_date_truncated_to_milliseconds(self, trip_repo):
        """Test the returned date matches what BSON can store."""
        trip = await trip_repo.add_trip(
            name="Rome", date=utc(2025, 3, 3, 12, 0, 0, 123456), budget=99.5
        )

        assert trip.date.microsecond == 123000

    @pytest.mark.asyncio
    @pytest.mark.parametrize("overrides", [
        {"name": None},
        {"name": ""},
        {"date": None},
        {"budget": None},
        {"budget": 0},
    ])
    async def test_absent_field_rejected(self, trip_repo, mongo_db, overrides):
        """Test missing, empty and zero values fail and persist nothing."""
        fields = {"name": "Lisbon", "date": utc(2025, 6, 1), "budget": 1500}
        fields.update(overrides)

        with pytest.raises(ValidationError) as exc_info:
            await trip_repo.add_trip(**fields)

        assert exc_info.value.message == "All fields are required"
        assert mongo_db["trips"].documents == []


class TestListTrips:
    """Tests for listing trips."""

    @pytest.mark.asyncio
    async def test_list_orders_by_date_ascending(self, trip_repo):
        """Test trips come back D1, D2, D3 whatever the insertion order."""
        await trip_repo.add_trip(name="second", date=utc(2025, 5, 1), budget=2)
        await trip_repo.add_trip(name="third", date=utc(2025, 9, 1), budget=3)
        await trip_repo.add_trip(name="first", date=utc(2025, 1, 1), budget=1)

        trips = await trip_repo.list_trips()

        assert [trip.name for trip in trips] == ["first", "second", "third"]

    @pytest.mark.asyncio
    async def test_list_empty(self, trip_repo):
        """Test an empty collection lists as an empty list."""
        assert await trip_repo.list_trips() == []


class TestDeleteTrip:
    """Tests for deleting trips."""

    @pytest.mark.asyncio
    async def test_delete_existing_trip(self, trip_repo):
        """Test deleting removes the trip from listings."""
        trip = await trip_repo.add_trip(name="Lisbon", date=utc(2025, 6, 1), budget=1500)

        deleted = await trip_repo.delete_trip(trip.id)

        assert deleted == 1
        assert await trip_repo.list_trips() == []

    @pytest.mark.asyncio
    async def test_delete_unknown_id_is_not_an_error(self, trip_repo):
        """Test deleting a well-formed unknown id reports zero deletions."""
        assert await trip_repo.delete_trip(str(ObjectId())) == 0

    @pytest.mark.asyncio
    async def test_delete_malformed_id_raises(self, trip_repo):
        """Test a malformed id is not silently ignored."""
        with pytest.raises(InvalidId):
            await trip_repo.delete_trip("not-an-object-id")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
