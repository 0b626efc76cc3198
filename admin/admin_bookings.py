# admin/admin_bookings.py

import logging
import re
from typing import Dict, Optional

from fastapi import APIRouter, Depends, Query

from auth.dependencies import Identity, get_admin_identity
from bookings.lifecycle import aggregate_bookings, project_admin_booking, validate_status
from core.errors import downstream, success
from database.dependencies import get_booking_repository, get_tour_package_repository, get_user_repository
from database.repositories import BookingRepository, TourPackageRepository, UserRepository
from models.user import UserProfile

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin/bookings", tags=["admin"])


_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def _positive_limit(limit: Optional[str]) -> Optional[int]:
    """Leading integer of `limit` ("10abc" is 10); anything not positive means no limit."""
    match = _LEADING_INT.match(limit or "")
    value = int(match.group(1)) if match else 0
    return value if value > 0 else None


@router.get("")
async def list_all_bookings(
    status: Optional[str] = Query(None),
    user_id: Optional[str] = Query(None, alias="userId"),
    limit: Optional[str] = Query(None),
    admin: Identity = Depends(get_admin_identity),
    bookings: BookingRepository = Depends(get_booking_repository),
    packages: TourPackageRepository = Depends(get_tour_package_repository),
    users: UserRepository = Depends(get_user_repository),
):
    """
    Every booking for the dashboard, joined with its package and owner, plus
    status counts and revenue over the returned rows.
    """
    status_filter = validate_status(status) if status else None
    with downstream("Failed to fetch bookings"):
        rows = await bookings.list(status=status_filter, user_id=user_id, limit=_positive_limit(limit))
        package_map = await packages.get_many(row.package_id for row in rows)

    profiles: Dict[str, UserProfile] = {}
    owner_ids = {row.user_id for row in rows if row.user_id}
    if owner_ids:
        try:
            profiles = await users.get_many(owner_ids)
        except Exception as e:
            # projections fall back to the snapshot taken at booking time
            logger.warning(f"Admin bookings user profile fetch warning: {e}")

    views = [
        project_admin_booking(row, package_map.get(row.package_id), profiles.get(row.user_id))
        for row in rows
    ]
    stats = aggregate_bookings(views)
    return success({"bookings": views, "stats": stats}, "Admin bookings retrieved successfully")
