import asyncio
from datetime import datetime, timezone

import pytest
from mongomock_motor import AsyncMongoMockClient
from pymongo.errors import DuplicateKeyError

from core.errors import InvalidArgument
from database.repositories import (
    MongoBookingRepository,
    MongoDestinationRepository,
    MongoTourPackageRepository,
    MongoUserRepository,
    utcnow,
)
from models.booking import BookingDraft, BookingStatus
from models.destination import DestinationDraft
from models.tour_package import TourPackageDraft
from models.user import UserProfileDraft

LEGACY_CREATED = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _db():
    return AsyncMongoMockClient()["travel-agency-test"]


def _draft(user_id, package_id, amount=100):
    return BookingDraft(user_id=user_id, package_id=package_id, total_amount=amount, booking_date=utcnow())


def test_legacy_booking_listed_for_its_owner():
    async def scenario():
        db = _db()
        await db["bookings"].insert_one({
            "userId": "u1", "packageId": "p-old", "totalAmount": "1500", "createdAt": LEGACY_CREATED,
        })
        repo = MongoBookingRepository(db)
        await repo.create(_draft("u1", "p-new"))
        await repo.create(_draft("u2", "p-new"))
        return await repo.list(user_id="u1"), await repo.list(user_id="u1", limit=1)

    mine, latest = asyncio.run(scenario())

    assert [row.package_id for row in mine] == ["p-new", "p-old"]
    assert mine[1].total_amount == 1500.0
    assert mine[1].status is BookingStatus.PENDING
    assert [row.package_id for row in latest] == ["p-new"]


def test_pending_filter_includes_legacy_bookings_without_status():
    async def scenario():
        db = _db()
        await db["bookings"].insert_one({"userId": "u1", "packageId": "p1", "createdAt": LEGACY_CREATED})
        await db["bookings"].insert_one({"user_id": "u1", "package_id": "p2", "status": "confirmed",
                                         "created_at": LEGACY_CREATED})
        repo = MongoBookingRepository(db)
        return (await repo.list(status=BookingStatus.PENDING, user_id="u1"),
                await repo.list(status=BookingStatus.CONFIRMED))

    pending, confirmed = asyncio.run(scenario())

    assert [row.package_id for row in pending] == ["p1"]
    assert [row.package_id for row in confirmed] == ["p2"]


def test_category_filter_matches_both_key_spellings():
    async def scenario():
        db = _db()
        await db["tour_packages"].insert_one({"placeName": "Manali", "city": "Manali", "priceRange": "₹15,000",
                                              "tripCategoryId": "c1", "createdAt": LEGACY_CREATED})
        await db["destinations"].insert_one({"placeName": "Solang", "city": "Manali",
                                             "tripCategoryId": "c1", "createdAt": LEGACY_CREATED})
        packages = MongoTourPackageRepository(db)
        destinations = MongoDestinationRepository(db)
        await packages.create(TourPackageDraft(place_name="Goa", city="Goa", price_range="₹20,000",
                                               trip_category_id="c1"))
        await packages.create(TourPackageDraft(place_name="Ooty", city="Ooty", price_range="₹9,000",
                                               trip_category_id="c2"))
        await destinations.create(DestinationDraft(place_name="Baga", city="Goa", trip_category_id="c1"))
        return (await packages.list(category_id="c1"), await packages.list(city="Manali"),
                await destinations.list(category_id="c1"))

    by_category, by_city, destinations = asyncio.run(scenario())

    assert [row.place_name for row in by_category] == ["Goa", "Manali"]
    assert [row.place_name for row in by_city] == ["Manali"]
    assert {row.place_name for row in destinations} == {"Baga", "Solang"}


def test_invalid_object_id_is_not_found():
    async def scenario():
        repo = MongoBookingRepository(_db())
        return await repo.get("not-an-id"), await repo.delete("not-an-id")

    assert asyncio.run(scenario()) == (None, False)


class _EmailTakenCollection:
    """A users collection whose unique email index rejects every insert."""

    async def find_one(self, query):
        return None

    async def insert_one(self, doc):
        raise DuplicateKeyError("E11000 duplicate key error collection: users index: email_1")


def test_duplicate_email_on_insert_is_invalid_argument():
    repo = MongoUserRepository({"users": _EmailTakenCollection()})
    draft = UserProfileDraft(full_name="Asha Rao", email="asha@example.com", password_hash="x")

    with pytest.raises(InvalidArgument, match="Email already registered"):
        asyncio.run(repo.create(draft))
