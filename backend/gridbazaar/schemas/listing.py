"""
GridBazaar - Listing Schemas
"""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, ConfigDict

from gridbazaar.db.models.listing import ListingType, ListingStatus


class ListingBase(BaseModel):
    """Base listing schema."""
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    location: str = Field(..., min_length=1, max_length=255)
    listing_type: ListingType = ListingType.SITE_SALE
    asking_price: Optional[float] = None
    power_capacity_mw: Optional[float] = Field(None, ge=0)


class ListingCreate(ListingBase):
    """Schema for creating a listing."""
    pass


class ListingResponse(ListingBase):
    """Listing response."""
    id: int
    seller_id: int
    status: ListingStatus
    created_at: datetime
    updated_at: Optional[datetime] = None
    
    model_config = ConfigDict(from_attributes=True)


class ListingSummary(BaseModel):
    """Compact listing attached to watchlist entries."""
    id: int
    title: str
    location: str
    asking_price: Optional[float] = None
    power_capacity_mw: Optional[float] = None
    status: ListingStatus
    
    model_config = ConfigDict(from_attributes=True)
