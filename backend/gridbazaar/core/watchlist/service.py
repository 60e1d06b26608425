"""
GridBazaar - Watchlist Service
Listings a profile is keeping an eye on
"""
from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession
from loguru import logger

from gridbazaar.db.models.listing import Listing
from gridbazaar.db.models.watchlist import WatchlistEntry
from gridbazaar.utils.exceptions import AlreadyWatchingError, ListingNotFoundError


class WatchlistService:
    """Service for watchlist business logic."""
    
    def __init__(self, db: AsyncSession):
        self.db = db
    
    async def get_watchlist(self, profile_id: int) -> list[WatchlistEntry]:
        """Entries with their listing, newest first."""
        stmt = select(WatchlistEntry).where(
            WatchlistEntry.user_id == profile_id
        ).order_by(WatchlistEntry.added_at.desc(), WatchlistEntry.id.desc())
        result = await self.db.execute(stmt)
        return list(result.scalars().all())
    
    async def is_in_watchlist(self, profile_id: int, listing_id: int) -> bool:
        stmt = select(WatchlistEntry.id).where(
            WatchlistEntry.user_id == profile_id,
            WatchlistEntry.listing_id == listing_id
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none() is not None
    
    async def add_to_watchlist(self, profile_id: int, listing_id: int) -> list[WatchlistEntry]:
        """Add a listing and return the refreshed watchlist."""
        listing = await self.db.get(Listing, listing_id)
        if listing is None:
            raise ListingNotFoundError()
        if await self.is_in_watchlist(profile_id, listing_id):
            raise AlreadyWatchingError()
        
        self.db.add(WatchlistEntry(user_id=profile_id, listing_id=listing_id))
        await self.db.commit()
        logger.debug(f"Profile {profile_id} now watching listing {listing_id}")
        return await self.get_watchlist(profile_id)
    
    async def remove_from_watchlist(self, profile_id: int, listing_id: int) -> list[WatchlistEntry]:
        """Remove a listing (no-op if absent) and return the refreshed watchlist."""
        await self.db.execute(
            delete(WatchlistEntry).where(
                WatchlistEntry.user_id == profile_id,
                WatchlistEntry.listing_id == listing_id
            )
        )
        await self.db.commit()
        return await self.get_watchlist(profile_id)
    
    async def toggle_watchlist(
        self,
        profile_id: int,
        listing_id: int
    ) -> tuple[bool, list[WatchlistEntry]]:
        """
        Flip membership of a listing.
        
        Returns:
            (watching after the toggle, refreshed watchlist)
        """
        if await self.is_in_watchlist(profile_id, listing_id):
            return False, await self.remove_from_watchlist(profile_id, listing_id)
        return True, await self.add_to_watchlist(profile_id, listing_id)
