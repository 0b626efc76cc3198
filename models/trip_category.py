from typing import Optional
from datetime import datetime

from models.base import ApiModel


class TripCategoryDraft(ApiModel):
    name: str
    image_url: str = ""


class TripCategory(TripCategoryDraft):
    id: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
