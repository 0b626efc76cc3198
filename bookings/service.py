# bookings/service.py

import logging
from typing import Optional, Tuple

from auth.dependencies import Identity, is_admin
from bookings.lifecycle import parse_price_range, validate_status
from core.errors import NotFound, PermissionDenied, downstream
from database.repositories import BookingRepository, TourPackageRepository, UserRepository, utcnow
from models.booking import Booking, BookingDraft, BookingStatus
from models.tour_package import TourPackage

logger = logging.getLogger(__name__)


async def create_booking(
    identity: Identity,
    package_id: str,
    bookings: BookingRepository,
    packages: TourPackageRepository,
    users: UserRepository,
) -> Tuple[Booking, TourPackage]:
    """
    Book `package_id` for the caller. The caller's contact details are copied
    onto the booking and are not refreshed when the profile changes later.
    """
    with downstream("Failed to create booking"):
        package = await packages.get(package_id)
        if package is None:
            raise NotFound("Tour package not found")
        profile = await users.get(identity.user_id)
        if profile is None:
            raise NotFound("User profile not found")

        draft = BookingDraft(
            user_id=identity.user_id,
            package_id=package.id,
            total_amount=parse_price_range(package.price_range),
            status=BookingStatus.PENDING,
            booking_date=utcnow(),
            customer_name=profile.full_name,
            customer_email=profile.email,
            customer_mobile=profile.mobile_number,
        )
        booking = await bookings.create(draft)

    logger.info(f"Booking {booking.id} created for user {identity.user_id} (package {package.id})")
    return booking, package


def can_access(identity: Identity, booking: Booking) -> bool:
    return booking.user_id == identity.user_id or is_admin(identity)


async def get_booking(booking_id: str, identity: Identity, bookings: BookingRepository) -> Booking:
    """
    The booking if the caller owns it or holds the admin role. Anyone else is
    told it does not exist.
    """
    with downstream("Failed to fetch booking"):
        booking = await bookings.get(booking_id)
    if booking is None or not can_access(identity, booking):
        raise NotFound("Booking not found")
    return booking


def check_list_scope(identity: Identity, user_id: Optional[str]) -> str:
    """Owner whose bookings a listing covers; only admins may name someone else."""
    if user_id and user_id != identity.user_id and not is_admin(identity):
        raise PermissionDenied("You can only view your own bookings")
    return user_id or identity.user_id


async def transition_status(booking_id: str, requested: Optional[str], identity: Identity,
                            bookings: BookingRepository) -> Booking:
    """
    Move a booking to `requested`. Any status may follow any other, including
    itself; only the value is checked, and it is checked before anything is read
    or written.
    """
    status = validate_status(requested)
    await get_booking(booking_id, identity, bookings)

    with downstream("Failed to update booking"):
        updated = await bookings.update_status(booking_id, status, utcnow())
    if updated is None:
        # removed between the existence check and the write
        raise NotFound("Booking not found")

    logger.info(f"Booking {booking_id} status set to {status.value}")
    return updated


async def delete_booking(booking_id: str, identity: Identity, bookings: BookingRepository) -> None:
    await get_booking(booking_id, identity, bookings)
    with downstream("Failed to delete booking"):
        deleted = await bookings.delete(booking_id)
    if not deleted:
        raise NotFound("Booking not found")
    logger.info(f"Booking {booking_id} deleted")
