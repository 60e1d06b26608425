"""
GridBazaar - Watchlist Endpoints
"""
from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from gridbazaar.dependencies import get_db, get_current_profile
from gridbazaar.db.models.profile import Profile
from gridbazaar.core.watchlist.service import WatchlistService
from gridbazaar.schemas.watchlist import (
    WatchlistEntryResponse,
    WatchlistResponse,
    WatchlistToggleResponse,
    WatchlistMembership,
)

router = APIRouter()


def _watchlist(entries) -> WatchlistResponse:
    return WatchlistResponse(
        total=len(entries),
        entries=[WatchlistEntryResponse.model_validate(e) for e in entries],
    )


@router.get("/", response_model=WatchlistResponse)
async def get_watchlist(
    profile: Annotated[Profile, Depends(get_current_profile)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Watched listings, newest first."""
    return _watchlist(await WatchlistService(db).get_watchlist(profile.id))


@router.post("/{listing_id}", response_model=WatchlistResponse, status_code=status.HTTP_201_CREATED)
async def add_to_watchlist(
    listing_id: int,
    profile: Annotated[Profile, Depends(get_current_profile)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    return _watchlist(await WatchlistService(db).add_to_watchlist(profile.id, listing_id))


@router.delete("/{listing_id}", response_model=WatchlistResponse)
async def remove_from_watchlist(
    listing_id: int,
    profile: Annotated[Profile, Depends(get_current_profile)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    return _watchlist(await WatchlistService(db).remove_from_watchlist(profile.id, listing_id))


@router.post("/{listing_id}/toggle", response_model=WatchlistToggleResponse)
async def toggle_watchlist(
    listing_id: int,
    profile: Annotated[Profile, Depends(get_current_profile)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    watching, entries = await WatchlistService(db).toggle_watchlist(profile.id, listing_id)
    return WatchlistToggleResponse(
        **_watchlist(entries).model_dump(),
        listing_id=listing_id,
        watching=watching,
    )


@router.get("/{listing_id}", response_model=WatchlistMembership)
async def is_in_watchlist(
    listing_id: int,
    profile: Annotated[Profile, Depends(get_current_profile)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    watching = await WatchlistService(db).is_in_watchlist(profile.id, listing_id)
    return WatchlistMembership(listing_id=listing_id, watching=watching)
