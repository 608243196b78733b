# bookswap/schemas/listing.py
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict

from bookswap.sa.models import SharingMode, ListingStatus

class ListingBase(BaseModel):
    title: str
    author: str
    condition: str
    sharing_mode: SharingMode
    max_lending_days: Optional[int] = None
    genre: Optional[str] = None
    isbn: Optional[str] = None
    description: Optional[str] = None
    pickup_location: Optional[str] = None

class ListingCreate(ListingBase):
    pass

class Listing(ListingBase):
    id: int
    owner_id: int
    status: ListingStatus
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

class ListingStats(BaseModel):
    available_listings: int
    listings_with_location: int
