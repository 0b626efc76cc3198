from typing import List, Optional
from datetime import datetime

from models.base import ApiModel


class TourPackageDraft(ApiModel):
    place_name: str
    city: str
    price_range: str
    trip_category_id: str
    trip_category_name: Optional[str] = None
    image_urls: List[str] = []
    overview: str = ""
    tour_highlights: List[str] = []


class TourPackage(TourPackageDraft):
    id: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
