"""
Booking record lifecycle and projection.

Pure functions shared by the customer booking routes and the admin dashboard:
deriving a price from a package's price range, validating status values,
flattening a booking and its references into a response record, and computing
dashboard statistics. Nothing here touches the database.
"""
import re
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Optional

from core.errors import InvalidArgument
from models.booking import AdminBookingView, Booking, BookingStats, BookingStatus, BookingView
from models.tour_package import TourPackage
from models.user import UserProfile

UNKNOWN = "Unknown"

VALID_STATUSES = tuple(status.value for status in BookingStatus)

# first run of digits, thousands separators allowed inside the run
_PRICE_RUN = re.compile(r"\d[\d,]*")


def parse_price_range(price_range: Optional[str]) -> float:
    """
    Amount charged for a package, taken from its human-readable price range.

    The first run of digits is used, so "₹20,000 - ₹30,000" yields 20000 (the
    low end of the range). A range without any digits ("Contact us") yields 0.
    """
    if not price_range:
        return 0.0
    match = _PRICE_RUN.search(price_range)
    if not match:
        return 0.0
    return float(match.group(0).replace(",", ""))


def validate_status(value: Any) -> BookingStatus:
    """Return the BookingStatus for `value` or raise InvalidArgument."""
    if isinstance(value, BookingStatus):
        return value
    if isinstance(value, str) and value in VALID_STATUSES:
        return BookingStatus(value)
    raise InvalidArgument(f"Invalid status. Must be one of: {', '.join(VALID_STATUSES)}")


def coerce_amount(value: Any) -> float:
    """Numeric value of a stored amount. Numeric strings are accepted; anything unparseable counts as 0."""
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return float(value)
    try:
        amount = Decimal(str(value).strip().replace(",", ""))
    except (InvalidOperation, ValueError):
        return 0.0
    if not amount.is_finite():
        return 0.0
    return float(amount)


def _or_unknown(value: Optional[str]) -> str:
    return value if value else UNKNOWN


def _package_fields(package: Optional[TourPackage]) -> dict:
    if package is None:
        return {
            "package_name": UNKNOWN,
            "package_city": UNKNOWN,
            "package_price_range": UNKNOWN,
            "package_images": [],
        }
    return {
        "package_name": _or_unknown(package.place_name),
        "package_city": _or_unknown(package.city),
        "package_price_range": _or_unknown(package.price_range),
        "package_images": list(package.image_urls or []),
    }


def _booking_fields(booking: Booking) -> dict:
    return {
        "id": booking.id,
        "user_id": booking.user_id,
        "package_id": booking.package_id,
        "total_amount": booking.total_amount,
        "status": booking.status,
        "booking_date": booking.booking_date,
        "customer_name": booking.customer_name,
        "customer_email": booking.customer_email,
        "customer_mobile": booking.customer_mobile,
        "created_at": booking.created_at,
        "updated_at": booking.updated_at,
    }


def project_booking(booking: Booking, package: Optional[TourPackage] = None,
                    include_overview: bool = False) -> BookingView:
    """
    Flatten a booking and its package into a response record.

    A package that no longer exists (deleted after the booking was made)
    degrades to "Unknown" names and an empty image list; projection never
    fails because of a dangling reference.
    """
    view = BookingView(**_booking_fields(booking), **_package_fields(package))
    if include_overview and package is not None:
        view.package_overview = package.overview
    return view


def project_admin_booking(booking: Booking, package: Optional[TourPackage] = None,
                          profile: Optional[UserProfile] = None) -> AdminBookingView:
    """
    Admin projection: package fields as in `project_booking`, plus the owner's
    contact details resolved from the live profile first, then the snapshot
    frozen on the booking, then "Unknown".
    """
    return AdminBookingView(
        **_booking_fields(booking),
        **_package_fields(package),
        user_name=(profile and profile.full_name) or booking.customer_name or UNKNOWN,
        user_email=(profile and profile.email) or booking.customer_email or UNKNOWN,
        user_mobile=(profile and profile.mobile_number) or booking.customer_mobile or UNKNOWN,
    )


def aggregate_bookings(bookings: Iterable[BookingView]) -> BookingStats:
    """
    Dashboard statistics over already-projected bookings.

    Revenue sums every booking that has not been cancelled, pending ones
    included.
    """
    stats = BookingStats()
    revenue = Decimal("0")
    for booking in bookings:
        stats.total += 1
        status = validate_status(booking.status)
        setattr(stats, status.value, getattr(stats, status.value) + 1)
        if status is not BookingStatus.CANCELLED:
            revenue += Decimal(str(coerce_amount(booking.total_amount)))
    stats.total_revenue = float(revenue)
    return stats
