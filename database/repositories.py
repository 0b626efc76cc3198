# database/repositories.py
#
# Storage interfaces used by the routes and services, plus their MongoDB
# implementations. Field names never leak past this module and mappers.py.

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from core.errors import InvalidArgument
from database import mappers
from models.booking import Booking, BookingDraft, BookingStatus
from models.destination import Destination, DestinationDraft
from models.tour_package import TourPackage, TourPackageDraft
from models.trip_category import TripCategory, TripCategoryDraft
from models.user import UserProfile, UserProfileDraft


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


SORT_KEY = "_sort_at"


def either_key(snake: str, camel: str, value: Any) -> Dict[str, Any]:
    """Match `value` under the current key or its legacy camelCase spelling."""
    return {"$or": [{snake: value}, {camel: value}]}


def all_of(clauses: List[Dict[str, Any]]) -> Dict[str, Any]:
    if not clauses:
        return {}
    return clauses[0] if len(clauses) == 1 else {"$and": clauses}


def catalogue_query(category_id: Optional[str] = None, city: Optional[str] = None) -> Dict[str, Any]:
    # category filter takes precedence over city
    if category_id:
        return either_key("trip_category_id", "tripCategoryId", category_id)
    if city:
        return {"city": city}
    return {}


# --- Interfaces ---

class BookingRepository(ABC):
    @abstractmethod
    async def create(self, draft: BookingDraft) -> Booking: ...

    @abstractmethod
    async def get(self, booking_id: str) -> Optional[Booking]: ...

    @abstractmethod
    async def list(self, status: Optional[BookingStatus] = None, user_id: Optional[str] = None,
                   limit: Optional[int] = None) -> List[Booking]:
        """Bookings newest first, optionally filtered."""

    @abstractmethod
    async def update_status(self, booking_id: str, status: BookingStatus,
                            updated_at: datetime) -> Optional[Booking]: ...

    @abstractmethod
    async def delete(self, booking_id: str) -> bool: ...


class TourPackageRepository(ABC):
    @abstractmethod
    async def create(self, draft: TourPackageDraft) -> TourPackage: ...

    @abstractmethod
    async def get(self, package_id: str) -> Optional[TourPackage]: ...

    @abstractmethod
    async def get_many(self, package_ids: Iterable[str]) -> Dict[str, TourPackage]: ...

    @abstractmethod
    async def list(self, category_id: Optional[str] = None, city: Optional[str] = None) -> List[TourPackage]: ...

    @abstractmethod
    async def update(self, package_id: str, changes: Dict[str, Any]) -> Optional[TourPackage]: ...

    @abstractmethod
    async def delete(self, package_id: str) -> bool: ...


class UserRepository(ABC):
    @abstractmethod
    async def create(self, draft: UserProfileDraft) -> UserProfile:
        """Insert a profile; InvalidArgument when the email is already taken."""

    @abstractmethod
    async def get(self, user_id: str) -> Optional[UserProfile]: ...

    @abstractmethod
    async def get_many(self, user_ids: Iterable[str]) -> Dict[str, UserProfile]: ...

    @abstractmethod
    async def get_by_email(self, email: str) -> Optional[UserProfile]: ...

    @abstractmethod
    async def get_credentials(self, email: str) -> Optional[Tuple[UserProfile, Optional[str]]]:
        """Profile and stored password hash for a login attempt."""

    @abstractmethod
    async def list(self) -> List[UserProfile]: ...

    @abstractmethod
    async def update(self, user_id: str, changes: Dict[str, Any]) -> Optional[UserProfile]: ...

    @abstractmethod
    async def delete(self, user_id: str) -> bool: ...


class TripCategoryRepository(ABC):
    @abstractmethod
    async def create(self, draft: TripCategoryDraft) -> TripCategory: ...

    @abstractmethod
    async def get(self, category_id: str) -> Optional[TripCategory]: ...

    @abstractmethod
    async def list(self) -> List[TripCategory]: ...

    @abstractmethod
    async def update(self, category_id: str, changes: Dict[str, Any]) -> Optional[TripCategory]: ...

    @abstractmethod
    async def delete(self, category_id: str) -> bool: ...


class DestinationRepository(ABC):
    @abstractmethod
    async def create(self, draft: DestinationDraft) -> Destination: ...

    @abstractmethod
    async def get(self, destination_id: str) -> Optional[Destination]: ...

    @abstractmethod
    async def list(self, category_id: Optional[str] = None, city: Optional[str] = None) -> List[Destination]: ...

    @abstractmethod
    async def update(self, destination_id: str, changes: Dict[str, Any]) -> Optional[Destination]: ...

    @abstractmethod
    async def delete(self, destination_id: str) -> bool: ...


# --- MongoDB ---

class MongoCollection:
    """Shared CRUD plumbing over one motor collection."""

    collection_name: str
    from_document: Callable[[Dict[str, Any]], Any]

    def __init__(self, db):
        self.collection = db[self.collection_name]

    def _to_model(self, doc: Optional[Dict[str, Any]]):
        return type(self).from_document(doc) if doc else None

    async def _insert(self, doc: Dict[str, Any]):
        now = utcnow()
        doc.setdefault("created_at", now)
        doc.setdefault("updated_at", now)
        result = await self.collection.insert_one(doc)
        doc["_id"] = result.inserted_id
        return self._to_model(doc)

    async def _find_one(self, record_id: str):
        oid = mappers.object_id(record_id)
        if oid is None:
            return None
        return self._to_model(await self.collection.find_one({"_id": oid}))

    async def _find(self, query: Dict[str, Any], limit: Optional[int] = None) -> list:
        """Matching documents newest first, ordered on whichever creation key the document carries."""
        pipeline = [
            {"$match": query},
            {"$addFields": {SORT_KEY: {"$ifNull": ["$created_at", "$createdAt"]}}},
            {"$sort": {SORT_KEY: -1}},
        ]
        if limit:
            pipeline.append({"$limit": limit})
        docs = await self.collection.aggregate(pipeline).to_list(length=None)
        return [self._to_model(doc) for doc in docs]

    async def _find_by_ids(self, record_ids: Iterable[str]) -> Dict[str, Any]:
        oids = mappers.object_ids(set(record_ids))
        if not oids:
            return {}
        docs = await self.collection.find({"_id": {"$in": oids}}).to_list(length=None)
        models = (self._to_model(doc) for doc in docs)
        return {model.id: model for model in models}

    async def _update(self, record_id: str, changes: Dict[str, Any]):
        oid = mappers.object_id(record_id)
        if oid is None:
            return None
        update = dict(changes)
        update.setdefault("updated_at", utcnow())
        doc = await self.collection.find_one_and_update(
            {"_id": oid},
            {"$set": update},
            return_document=ReturnDocument.AFTER,
        )
        return self._to_model(doc)

    async def _delete(self, record_id: str) -> bool:
        oid = mappers.object_id(record_id)
        if oid is None:
            return False
        result = await self.collection.delete_one({"_id": oid})
        return result.deleted_count > 0


class MongoBookingRepository(MongoCollection, BookingRepository):
    collection_name = "bookings"
    from_document = staticmethod(mappers.booking_from_document)

    async def create(self, draft: BookingDraft) -> Booking:
        return await self._insert(mappers.booking_to_document(draft))

    async def get(self, booking_id: str) -> Optional[Booking]:
        return await self._find_one(booking_id)

    async def list(self, status=None, user_id=None, limit=None) -> List[Booking]:
        clauses = []
        if status is BookingStatus.PENDING or status == BookingStatus.PENDING.value:
            # legacy documents without a status read as pending
            clauses.append({"status": {"$in": [BookingStatus.PENDING.value, None]}})
        elif status:
            clauses.append({"status": BookingStatus(status).value})
        if user_id:
            clauses.append(either_key("user_id", "userId", user_id))
        return await self._find(all_of(clauses), limit=limit)

    async def update_status(self, booking_id: str, status: BookingStatus, updated_at: datetime) -> Optional[Booking]:
        return await self._update(booking_id, {"status": status.value, "updated_at": updated_at})

    async def delete(self, booking_id: str) -> bool:
        return await self._delete(booking_id)


class MongoTourPackageRepository(MongoCollection, TourPackageRepository):
    collection_name = "tour_packages"
    from_document = staticmethod(mappers.tour_package_from_document)

    async def create(self, draft: TourPackageDraft) -> TourPackage:
        return await self._insert(mappers.tour_package_to_document(draft))

    async def get(self, package_id: str) -> Optional[TourPackage]:
        return await self._find_one(package_id)

    async def get_many(self, package_ids: Iterable[str]) -> Dict[str, TourPackage]:
        return await self._find_by_ids(package_ids)

    async def list(self, category_id=None, city=None) -> List[TourPackage]:
        return await self._find(catalogue_query(category_id, city))

    async def update(self, package_id: str, changes: Dict[str, Any]) -> Optional[TourPackage]:
        return await self._update(package_id, changes)

    async def delete(self, package_id: str) -> bool:
        return await self._delete(package_id)


class MongoUserRepository(MongoCollection, UserRepository):
    collection_name = "users"
    from_document = staticmethod(mappers.user_from_document)

    async def create(self, draft: UserProfileDraft) -> UserProfile:
        try:
            return await self._insert(mappers.user_to_document(draft))
        except DuplicateKeyError:
            # lost a signup race on the unique email index
            raise InvalidArgument("Email already registered")

    async def get(self, user_id: str) -> Optional[UserProfile]:
        return await self._find_one(user_id)

    async def get_many(self, user_ids: Iterable[str]) -> Dict[str, UserProfile]:
        return await self._find_by_ids(user_ids)

    async def get_by_email(self, email: str) -> Optional[UserProfile]:
        return self._to_model(await self.collection.find_one({"email": email.lower()}))

    async def get_credentials(self, email: str):
        doc = await self.collection.find_one({"email": email.lower()})
        if not doc:
            return None
        return mappers.user_from_document(doc), mappers.user_password_hash(doc)

    async def list(self) -> List[UserProfile]:
        return await self._find({})

    async def update(self, user_id: str, changes: Dict[str, Any]) -> Optional[UserProfile]:
        return await self._update(user_id, changes)

    async def delete(self, user_id: str) -> bool:
        return await self._delete(user_id)


class MongoTripCategoryRepository(MongoCollection, TripCategoryRepository):
    collection_name = "trip_categories"
    from_document = staticmethod(mappers.trip_category_from_document)

    async def create(self, draft: TripCategoryDraft) -> TripCategory:
        return await self._insert(mappers.trip_category_to_document(draft))

    async def get(self, category_id: str) -> Optional[TripCategory]:
        return await self._find_one(category_id)

    async def list(self) -> List[TripCategory]:
        return await self._find({})

    async def update(self, category_id: str, changes: Dict[str, Any]) -> Optional[TripCategory]:
        return await self._update(category_id, changes)

    async def delete(self, category_id: str) -> bool:
        return await self._delete(category_id)


class MongoDestinationRepository(MongoCollection, DestinationRepository):
    collection_name = "destinations"
    from_document = staticmethod(mappers.destination_from_document)

    async def create(self, draft: DestinationDraft) -> Destination:
        return await self._insert(mappers.destination_to_document(draft))

    async def get(self, destination_id: str) -> Optional[Destination]:
        return await self._find_one(destination_id)

    async def list(self, category_id=None, city=None) -> List[Destination]:
        return await self._find(catalogue_query(category_id, city))

    async def update(self, destination_id: str, changes: Dict[str, Any]) -> Optional[Destination]:
        return await self._update(destination_id, changes)

    async def delete(self, destination_id: str) -> bool:
        return await self._delete(destination_id)
