from typing import Optional
from datetime import datetime

from models.base import ApiModel


class DestinationDraft(ApiModel):
    place_name: str
    city: str
    trip_category_id: str
    trip_category_name: Optional[str] = None
    image_url: str = ""


class Destination(DestinationDraft):
    id: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
