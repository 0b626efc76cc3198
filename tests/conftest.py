"""
Shared fixtures: in-memory repositories and an in-memory S3 client wired into
the app through dependency overrides. The lifespan is never entered, so no
database or bucket is needed.
"""
from datetime import datetime, timezone
from types import SimpleNamespace
from typing import Any, Dict, Optional

import pytest
from botocore.exceptions import ClientError
from bson import ObjectId
from fastapi.testclient import TestClient

from auth.jwt_handler import create_access_token
from database import dependencies
from database.repositories import (
    BookingRepository,
    DestinationRepository,
    TourPackageRepository,
    TripCategoryRepository,
    UserRepository,
    utcnow,
)
from main import app
from models.booking import Booking, BookingStatus
from models.destination import Destination
from models.tour_package import TourPackage
from models.trip_category import TripCategory
from models.user import UserProfile
from storage.object_storage import ImageStorage

PUBLIC_BASE = "http://images.test/travel-agency-images"


def new_id() -> str:
    return str(ObjectId())


# --- In-memory repositories ---

class _InMemory:
    model: Any = None

    def __init__(self):
        self.rows: Dict[str, Any] = {}
        self.fail_next = None

    def add(self, record):
        self.rows[record.id] = record
        return record

    def _raise_if_broken(self):
        if self.fail_next is not None:
            error, self.fail_next = self.fail_next, None
            raise error

    async def _insert(self, draft):
        self._raise_if_broken()
        now = utcnow()
        record = self.model(**draft.model_dump(), id=new_id(), created_at=now, updated_at=now)
        return self.add(record)

    async def _get(self, record_id: str):
        self._raise_if_broken()
        return self.rows.get(record_id)

    async def _list(self, predicate=lambda row: True, limit: Optional[int] = None):
        self._raise_if_broken()
        rows = [row for row in self.rows.values() if predicate(row)]
        rows.sort(key=lambda row: row.created_at or datetime.min.replace(tzinfo=timezone.utc), reverse=True)
        return rows[:limit] if limit else rows

    async def _update(self, record_id: str, changes: Dict[str, Any]):
        self._raise_if_broken()
        record = self.rows.get(record_id)
        if record is None:
            return None
        update = dict(changes)
        update.setdefault("updated_at", utcnow())
        self.rows[record_id] = record.model_copy(update=update)
        return self.rows[record_id]

    async def _delete(self, record_id: str) -> bool:
        self._raise_if_broken()
        return self.rows.pop(record_id, None) is not None


class InMemoryBookings(_InMemory, BookingRepository):
    model = Booking

    async def create(self, draft):
        return await self._insert(draft)

    async def get(self, booking_id):
        return await self._get(booking_id)

    async def list(self, status=None, user_id=None, limit=None):
        return await self._list(
            lambda row: (not status or row.status == status) and (not user_id or row.user_id == user_id),
            limit=limit,
        )

    async def update_status(self, booking_id, status, updated_at):
        return await self._update(booking_id, {"status": status, "updated_at": updated_at})

    async def delete(self, booking_id):
        return await self._delete(booking_id)


class InMemoryTourPackages(_InMemory, TourPackageRepository):
    model = TourPackage

    async def create(self, draft):
        return await self._insert(draft)

    async def get(self, package_id):
        return await self._get(package_id)

    async def get_many(self, package_ids):
        self._raise_if_broken()
        return {pid: self.rows[pid] for pid in set(package_ids) if pid in self.rows}

    async def list(self, category_id=None, city=None):
        if category_id:
            return await self._list(lambda row: row.trip_category_id == category_id)
        return await self._list(lambda row: not city or row.city == city)

    async def update(self, package_id, changes):
        return await self._update(package_id, changes)

    async def delete(self, package_id):
        return await self._delete(package_id)


class InMemoryUsers(_InMemory, UserRepository):
    model = UserProfile

    def __init__(self):
        super().__init__()
        self.password_hashes: Dict[str, Optional[str]] = {}

    async def create(self, draft):
        profile = await self._insert(draft)
        self.password_hashes[profile.id] = draft.password_hash
        return profile

    async def get(self, user_id):
        return await self._get(user_id)

    async def get_many(self, user_ids):
        self._raise_if_broken()
        return {uid: self.rows[uid] for uid in set(user_ids) if uid in self.rows}

    async def get_by_email(self, email):
        self._raise_if_broken()
        return next((row for row in self.rows.values() if row.email == email.lower()), None)

    async def get_credentials(self, email):
        profile = await self.get_by_email(email)
        if profile is None:
            return None
        return profile, self.password_hashes.get(profile.id)

    async def list(self):
        return await self._list()

    async def update(self, user_id, changes):
        return await self._update(user_id, changes)

    async def delete(self, user_id):
        return await self._delete(user_id)


class InMemoryTripCategories(_InMemory, TripCategoryRepository):
    model = TripCategory

    async def create(self, draft):
        return await self._insert(draft)

    async def get(self, category_id):
        return await self._get(category_id)

    async def list(self):
        return await self._list()

    async def update(self, category_id, changes):
        return await self._update(category_id, changes)

    async def delete(self, category_id):
        return await self._delete(category_id)


class InMemoryDestinations(_InMemory, DestinationRepository):
    model = Destination

    async def create(self, draft):
        return await self._insert(draft)

    async def get(self, destination_id):
        return await self._get(destination_id)

    async def list(self, category_id=None, city=None):
        if category_id:
            return await self._list(lambda row: row.trip_category_id == category_id)
        return await self._list(lambda row: not city or row.city == city)

    async def update(self, destination_id, changes):
        return await self._update(destination_id, changes)

    async def delete(self, destination_id):
        return await self._delete(destination_id)


# --- Object storage ---

def client_error(code: str, operation: str) -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": code}}, operation)


class FakeS3Client:
    """Records objects in a dict; flip the flags to make calls fail."""

    def __init__(self):
        self.objects: Dict[str, bytes] = {}
        self.fail_uploads = False
        self.fail_deletes = False

    def put_object(self, Bucket, Key, Body, ContentType=None):
        if self.fail_uploads:
            raise client_error("InternalError", "PutObject")
        self.objects[Key] = Body

    def delete_object(self, Bucket, Key):
        if self.fail_deletes:
            raise client_error("AccessDenied", "DeleteObject")
        if Key not in self.objects:
            raise client_error("NoSuchKey", "DeleteObject")
        del self.objects[Key]


# --- Fixtures ---

@pytest.fixture
def s3():
    return FakeS3Client()


@pytest.fixture
def storage(s3):
    return ImageStorage(s3, "travel-agency-images", PUBLIC_BASE)


@pytest.fixture
def repos():
    return SimpleNamespace(
        bookings=InMemoryBookings(),
        packages=InMemoryTourPackages(),
        users=InMemoryUsers(),
        categories=InMemoryTripCategories(),
        destinations=InMemoryDestinations(),
    )


@pytest.fixture
def client(repos, storage):
    overrides = {
        dependencies.get_booking_repository: lambda: repos.bookings,
        dependencies.get_tour_package_repository: lambda: repos.packages,
        dependencies.get_user_repository: lambda: repos.users,
        dependencies.get_trip_category_repository: lambda: repos.categories,
        dependencies.get_destination_repository: lambda: repos.destinations,
        dependencies.get_image_storage: lambda: storage,
    }
    app.dependency_overrides.update(overrides)
    yield TestClient(app)
    app.dependency_overrides.clear()


# --- Helpers ---

def auth_headers(user_id: str, user_type: str = "user") -> Dict[str, str]:
    token = create_access_token(data={"sub": user_id}, user_type=user_type)
    return {"Authorization": f"Bearer {token}"}


def make_profile(**overrides) -> UserProfile:
    fields = dict(
        id=new_id(),
        full_name="Asha Rao",
        email="asha@example.com",
        mobile_number="9876543210",
        created_at=utcnow(),
        updated_at=utcnow(),
    )
    fields.update(overrides)
    return UserProfile(**fields)


def make_package(**overrides) -> TourPackage:
    fields = dict(
        id=new_id(),
        place_name="Goa Beaches",
        city="Goa",
        price_range="₹20,000 - ₹30,000",
        trip_category_id=new_id(),
        trip_category_name="Beach",
        image_urls=[f"{PUBLIC_BASE}/tour-packages/goa/1.jpg"],
        overview="Sun, sand and seafood along the Konkan coast.",
        tour_highlights=["Baga beach", "Old Goa churches"],
        created_at=utcnow(),
        updated_at=utcnow(),
    )
    fields.update(overrides)
    return TourPackage(**fields)


def make_booking(user_id: str, package_id: str, **overrides) -> Booking:
    now = utcnow()
    fields = dict(
        id=new_id(),
        user_id=user_id,
        package_id=package_id,
        total_amount=20000,
        status=BookingStatus.PENDING,
        booking_date=now,
        customer_name="Asha Rao",
        customer_email="asha@example.com",
        customer_mobile="9876543210",
        created_at=now,
        updated_at=now,
    )
    fields.update(overrides)
    return Booking(**fields)


def make_category(**overrides) -> TripCategory:
    fields = dict(id=new_id(), name="Beach", image_url=f"{PUBLIC_BASE}/trip-categories/beach.jpg",
                  created_at=utcnow(), updated_at=utcnow())
    fields.update(overrides)
    return TripCategory(**fields)
