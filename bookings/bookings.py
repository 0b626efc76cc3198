# bookings.py

from typing import Optional

from fastapi import APIRouter, Depends, Query

from auth.dependencies import Identity, get_current_identity
from bookings import service
from bookings.lifecycle import project_booking, validate_status
from core.errors import downstream, success
from database.dependencies import get_booking_repository, get_tour_package_repository, get_user_repository
from database.repositories import BookingRepository, TourPackageRepository, UserRepository
from models.booking import BookingCreate, BookingStatusChange, BookingStatusUpdate

router = APIRouter(prefix="/api/bookings", tags=["bookings"])


@router.post("", status_code=201)
async def create_booking(
    payload: BookingCreate,
    identity: Identity = Depends(get_current_identity),
    bookings: BookingRepository = Depends(get_booking_repository),
    packages: TourPackageRepository = Depends(get_tour_package_repository),
    users: UserRepository = Depends(get_user_repository),
):
    """Books a tour package for the caller at the low end of its price range."""
    booking, package = await service.create_booking(identity, payload.package_id, bookings, packages, users)
    return success(project_booking(booking, package), "Booking created successfully", status_code=201)


@router.get("")
async def list_bookings(
    status: Optional[str] = Query(None),
    user_id: Optional[str] = Query(None, alias="userId"),
    identity: Identity = Depends(get_current_identity),
    bookings: BookingRepository = Depends(get_booking_repository),
    packages: TourPackageRepository = Depends(get_tour_package_repository),
):
    """Bookings of `userId` (admins only), or of the caller when omitted, newest first."""
    status_filter = validate_status(status) if status else None
    owner_id = service.check_list_scope(identity, user_id)
    with downstream("Failed to fetch bookings"):
        rows = await bookings.list(status=status_filter, user_id=owner_id)
        package_map = await packages.get_many(row.package_id for row in rows)

    views = [project_booking(row, package_map.get(row.package_id)) for row in rows]
    return success(views, "Bookings retrieved successfully", count=len(views))


@router.get("/{booking_id}")
async def get_booking(
    booking_id: str,
    identity: Identity = Depends(get_current_identity),
    bookings: BookingRepository = Depends(get_booking_repository),
    packages: TourPackageRepository = Depends(get_tour_package_repository),
):
    booking = await service.get_booking(booking_id, identity, bookings)
    with downstream("Failed to fetch booking"):
        package = await packages.get(booking.package_id)
    return success(project_booking(booking, package, include_overview=True), "Booking retrieved successfully")


@router.patch("/{booking_id}")
async def update_booking_status(
    booking_id: str,
    payload: BookingStatusUpdate,
    identity: Identity = Depends(get_current_identity),
    bookings: BookingRepository = Depends(get_booking_repository),
):
    updated = await service.transition_status(booking_id, payload.status, identity, bookings)
    change = BookingStatusChange(id=updated.id, status=updated.status, updated_at=updated.updated_at)
    return success(change, "Booking status updated successfully")


@router.delete("/{booking_id}")
async def delete_booking(
    booking_id: str,
    identity: Identity = Depends(get_current_identity),
    bookings: BookingRepository = Depends(get_booking_repository),
):
    await service.delete_booking(booking_id, identity, bookings)
    return success({"bookingId": booking_id}, "Booking deleted successfully")
