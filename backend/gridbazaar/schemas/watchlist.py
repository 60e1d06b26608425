"""
GridBazaar - Watchlist Schemas
"""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict

from gridbazaar.schemas.listing import ListingSummary


class WatchlistEntryResponse(BaseModel):
    """A watched listing."""
    id: int
    user_id: int
    listing_id: int
    added_at: datetime
    listing: Optional[ListingSummary] = None
    
    model_config = ConfigDict(from_attributes=True)


class WatchlistResponse(BaseModel):
    """Caller's watchlist, newest first."""
    total: int
    entries: list[WatchlistEntryResponse]


class WatchlistToggleResponse(WatchlistResponse):
    """Watchlist after a toggle, with the resulting membership."""
    listing_id: int
    watching: bool


class WatchlistMembership(BaseModel):
    listing_id: int
    watching: bool
