from enum import Enum
from pydantic import Field
from typing import List, Optional, Union
from datetime import datetime

from models.base import ApiModel


class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class BookingDraft(ApiModel):
    """A booking that has not been persisted yet."""
    user_id: str
    package_id: str
    total_amount: float = 0
    status: BookingStatus = BookingStatus.PENDING
    booking_date: datetime
    customer_name: Optional[str] = None
    customer_email: Optional[str] = None
    customer_mobile: Optional[str] = None


class Booking(BookingDraft):
    id: str
    booking_date: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# --- Requests ---

class BookingCreate(ApiModel):
    package_id: str = Field(min_length=1)


class BookingStatusUpdate(ApiModel):
    status: Optional[str] = None


# --- Projections ---

class BookingView(ApiModel):
    id: str
    user_id: str
    package_id: str
    package_name: str = "Unknown"
    package_city: str = "Unknown"
    package_price_range: str = "Unknown"
    package_images: List[str] = []
    package_overview: Optional[str] = None
    total_amount: Union[float, str, None] = 0
    status: BookingStatus
    booking_date: Optional[datetime] = None
    customer_name: Optional[str] = None
    customer_email: Optional[str] = None
    customer_mobile: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class AdminBookingView(BookingView):
    user_name: str = "Unknown"
    user_email: str = "Unknown"
    user_mobile: str = "Unknown"


class BookingStatusChange(ApiModel):
    id: str
    status: BookingStatus
    updated_at: datetime


class BookingStats(ApiModel):
    total: int = 0
    pending: int = 0
    confirmed: int = 0
    completed: int = 0
    cancelled: int = 0
    total_revenue: float = 0
