"""
GridBazaar - Listing Endpoints
"""
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from gridbazaar.dependencies import get_db, get_current_profile, get_realtime_broker
from gridbazaar.db.models.listing import ListingStatus
from gridbazaar.db.models.profile import Profile
from gridbazaar.core.listings.service import ListingService
from gridbazaar.core.social.announcements import ListingAnnouncementService
from gridbazaar.realtime.broker import RealtimeBroker
from gridbazaar.schemas.listing import ListingCreate, ListingResponse
from gridbazaar.schemas.social import SocialPostResponse

router = APIRouter()


@router.get("/", response_model=list[ListingResponse])
async def list_listings(
    db: Annotated[AsyncSession, Depends(get_db)],
    status_filter: Optional[ListingStatus] = Query(ListingStatus.ACTIVE, alias="status"),
    limit: int = Query(50, ge=1, le=200),
):
    """Newest listings first."""
    return await ListingService(db).list_listings(status=status_filter, limit=limit)


@router.post("/", response_model=ListingResponse, status_code=status.HTTP_201_CREATED)
async def create_listing(
    data: ListingCreate,
    profile: Annotated[Profile, Depends(get_current_profile)],
    db: Annotated[AsyncSession, Depends(get_db)],
    broker: Annotated[RealtimeBroker, Depends(get_realtime_broker)],
):
    """Create a listing; subscribers are notified of the insert."""
    return await ListingService(db, broker).create_listing(profile.id, data)


@router.get("/{listing_id}", response_model=ListingResponse)
async def get_listing(
    listing_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    return await ListingService(db).get_listing(listing_id)


@router.post(
    "/{listing_id}/announce",
    response_model=SocialPostResponse,
    status_code=status.HTTP_201_CREATED,
)
async def announce_listing(
    listing_id: int,
    profile: Annotated[Profile, Depends(get_current_profile)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Post an announcement for an existing listing."""
    return await ListingAnnouncementService(db).announce_existing_listing(profile.id, listing_id)
