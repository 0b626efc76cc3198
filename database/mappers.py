"""
Translation between stored documents and the in-memory models.

This module is the only place that knows how records are laid out in the
database. Records written by the current service use snake_case keys; older
records imported from the document-store generation of the back office use
camelCase keys (`totalAmount`, `imageUrls`, `mobileNumber`, ...) and may carry
ISO-8601 strings where datetimes are expected. Readers accept both, writers
always emit snake_case.
"""
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from bson import ObjectId

from bookings.lifecycle import coerce_amount
from models.booking import Booking, BookingDraft, BookingStatus
from models.destination import Destination, DestinationDraft
from models.tour_package import TourPackage, TourPackageDraft
from models.trip_category import TripCategory, TripCategoryDraft
from models.user import UserProfile, UserProfileDraft


def object_id(value: Any) -> Optional[ObjectId]:
    """ObjectId for a string id, or None when the string is not a valid id."""
    if isinstance(value, ObjectId):
        return value
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    return None


def _pick(doc: Dict[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        value = doc.get(key)
        if value is not None:
            return value
    return default


def _document_id(doc: Dict[str, Any]) -> str:
    return str(_pick(doc, "_id", "id", default=""))


def to_datetime(value: Any) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    if isinstance(value, str) and value:
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    return None


def _string_list(value: Any) -> List[str]:
    if not value:
        return []
    if isinstance(value, str):
        return [value]
    return [str(item) for item in value if item]


def _status(value: Any) -> BookingStatus:
    if isinstance(value, BookingStatus):
        return value
    return BookingStatus(value) if value else BookingStatus.PENDING


# --- Bookings ---

def booking_from_document(doc: Dict[str, Any]) -> Booking:
    created_at = to_datetime(_pick(doc, "created_at", "createdAt"))
    booking_date = to_datetime(_pick(doc, "booking_date", "bookingDate")) or created_at
    return Booking(
        id=_document_id(doc),
        user_id=str(_pick(doc, "user_id", "userId", default="")),
        package_id=str(_pick(doc, "package_id", "packageId", default="")),
        total_amount=coerce_amount(_pick(doc, "total_amount", "totalAmount")),
        status=_status(_pick(doc, "status")),
        booking_date=booking_date,
        customer_name=_pick(doc, "customer_name", "customerName"),
        customer_email=_pick(doc, "customer_email", "customerEmail"),
        customer_mobile=_pick(doc, "customer_mobile", "customerMobile"),
        created_at=created_at,
        updated_at=to_datetime(_pick(doc, "updated_at", "updatedAt")) or created_at,
    )


def booking_to_document(draft: BookingDraft) -> Dict[str, Any]:
    doc = draft.model_dump(include=set(BookingDraft.model_fields))
    doc["status"] = draft.status.value
    return doc


# --- Tour packages ---

def tour_package_from_document(doc: Dict[str, Any]) -> TourPackage:
    return TourPackage(
        id=_document_id(doc),
        place_name=_pick(doc, "place_name", "placeName", default=""),
        city=_pick(doc, "city", default=""),
        price_range=_pick(doc, "price_range", "priceRange", default=""),
        trip_category_id=str(_pick(doc, "trip_category_id", "tripCategoryId", default="")),
        trip_category_name=_pick(doc, "trip_category_name", "tripCategoryName"),
        image_urls=_string_list(_pick(doc, "image_urls", "imageUrls")),
        overview=_pick(doc, "overview", default=""),
        tour_highlights=_string_list(_pick(doc, "tour_highlights", "tourHighlights")),
        created_at=to_datetime(_pick(doc, "created_at", "createdAt")),
        updated_at=to_datetime(_pick(doc, "updated_at", "updatedAt")),
    )


def tour_package_to_document(draft: TourPackageDraft) -> Dict[str, Any]:
    return draft.model_dump(include=set(TourPackageDraft.model_fields))


# --- User profiles ---

def user_from_document(doc: Dict[str, Any]) -> UserProfile:
    return UserProfile(
        id=_document_id(doc),
        full_name=_pick(doc, "full_name", "fullName", default=""),
        email=_pick(doc, "email", default=""),
        mobile_number=_pick(doc, "mobile_number", "mobileNumber", "phone"),
        role=_pick(doc, "role", default="user"),
        created_at=to_datetime(_pick(doc, "created_at", "createdAt")),
        updated_at=to_datetime(_pick(doc, "updated_at", "updatedAt")),
    )


def user_password_hash(doc: Dict[str, Any]) -> Optional[str]:
    return _pick(doc, "password_hash", "password")


def user_to_document(draft: UserProfileDraft) -> Dict[str, Any]:
    return draft.model_dump(include=set(UserProfileDraft.model_fields))


# --- Trip categories ---

def trip_category_from_document(doc: Dict[str, Any]) -> TripCategory:
    return TripCategory(
        id=_document_id(doc),
        name=_pick(doc, "name", default=""),
        image_url=_pick(doc, "image_url", "imageUrl", default=""),
        created_at=to_datetime(_pick(doc, "created_at", "createdAt")),
        updated_at=to_datetime(_pick(doc, "updated_at", "updatedAt")),
    )


def trip_category_to_document(draft: TripCategoryDraft) -> Dict[str, Any]:
    return draft.model_dump(include=set(TripCategoryDraft.model_fields))


# --- Destinations ---

def destination_from_document(doc: Dict[str, Any]) -> Destination:
    return Destination(
        id=_document_id(doc),
        place_name=_pick(doc, "place_name", "placeName", default=""),
        city=_pick(doc, "city", default=""),
        trip_category_id=str(_pick(doc, "trip_category_id", "tripCategoryId", default="")),
        trip_category_name=_pick(doc, "trip_category_name", "tripCategoryName"),
        image_url=_pick(doc, "image_url", "imageUrl", default=""),
        created_at=to_datetime(_pick(doc, "created_at", "createdAt")),
        updated_at=to_datetime(_pick(doc, "updated_at", "updatedAt")),
    )


def destination_to_document(draft: DestinationDraft) -> Dict[str, Any]:
    return draft.model_dump(include=set(DestinationDraft.model_fields))


def object_ids(values: Iterable[str]) -> List[ObjectId]:
    return [oid for oid in (object_id(v) for v in values) if oid is not None]
