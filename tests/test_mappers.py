from datetime import datetime, timezone

from bson import ObjectId

from database import mappers
from models.booking import BookingDraft, BookingStatus


def test_legacy_camel_case_booking():
    oid = ObjectId()
    doc = {
        "_id": oid,
        "userId": "u-1",
        "packageId": "p-1",
        "totalAmount": "20,000",
        "customerName": "Asha Rao",
        "createdAt": "2024-03-01T10:00:00Z",
    }

    booking = mappers.booking_from_document(doc)

    assert booking.id == str(oid)
    assert booking.user_id == "u-1"
    assert booking.package_id == "p-1"
    assert booking.total_amount == 20000.0
    assert booking.status is BookingStatus.PENDING
    assert booking.customer_name == "Asha Rao"
    assert booking.created_at == datetime(2024, 3, 1, 10, 0, tzinfo=timezone.utc)
    assert booking.booking_date == booking.created_at
    assert booking.updated_at == booking.created_at


def test_snake_case_wins_over_camel_case():
    doc = {"_id": ObjectId(), "user_id": "new", "userId": "old", "package_id": "p",
           "total_amount": 10, "status": "completed"}

    booking = mappers.booking_from_document(doc)

    assert booking.user_id == "new"
    assert booking.status is BookingStatus.COMPLETED


def test_unparseable_amount_reads_as_zero():
    booking = mappers.booking_from_document({"_id": ObjectId(), "user_id": "u", "package_id": "p",
                                             "total_amount": "on request"})
    assert booking.total_amount == 0


def test_booking_document_is_snake_case():
    draft = BookingDraft(user_id="u", package_id="p", total_amount=100,
                         booking_date=datetime(2024, 1, 1, tzinfo=timezone.utc),
                         status=BookingStatus.CONFIRMED)

    doc = mappers.booking_to_document(draft)

    assert doc["status"] == "confirmed"
    assert doc["user_id"] == "u"
    assert "userId" not in doc


def test_legacy_package_and_user():
    package = mappers.tour_package_from_document({
        "_id": ObjectId(), "placeName": "Manali", "city": "Manali", "priceRange": "₹15,000",
        "tripCategoryId": "c", "imageUrls": ["a.jpg", None, "b.jpg"], "tourHighlights": "Solang valley",
    })
    assert package.place_name == "Manali"
    assert package.image_urls == ["a.jpg", "b.jpg"]
    assert package.tour_highlights == ["Solang valley"]
    assert package.overview == ""

    doc = {"_id": ObjectId(), "fullName": "Ravi", "email": "ravi@example.com", "phone": "9000000000",
           "password": "$2b$12$hash"}
    user = mappers.user_from_document(doc)
    assert user.full_name == "Ravi"
    assert user.mobile_number == "9000000000"
    assert user.role == "user"
    assert mappers.user_password_hash(doc) == "$2b$12$hash"


def test_object_id_helpers():
    oid = ObjectId()
    assert mappers.object_id(str(oid)) == oid
    assert mappers.object_id("not-an-id") is None
    assert mappers.object_ids([str(oid), "nope"]) == [oid]
    assert mappers.to_datetime("garbage") is None
