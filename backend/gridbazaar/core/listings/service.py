"""
GridBazaar - Listing Service
"""
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from loguru import logger

from gridbazaar.db.models.listing import Listing, ListingStatus
from gridbazaar.realtime.broker import ChangeEvent, RealtimeBroker
from gridbazaar.schemas.listing import ListingCreate
from gridbazaar.utils.exceptions import ListingNotFoundError


LISTINGS_TABLE = Listing.__tablename__


def listing_to_record(listing: Listing) -> dict:
    """Row image carried by realtime events."""
    return {
        "id": listing.id,
        "seller_id": listing.seller_id,
        "title": listing.title,
        "description": listing.description,
        "location": listing.location,
        "listing_type": listing.listing_type.value if listing.listing_type else None,
        "asking_price": float(listing.asking_price) if listing.asking_price is not None else None,
        "power_capacity_mw": listing.power_capacity_mw,
        "status": listing.status.value if listing.status else None,
        "created_at": listing.created_at.isoformat() if listing.created_at else None,
    }


class ListingService:
    """Marketplace listings; creation is announced on the realtime broker."""
    
    def __init__(self, db: AsyncSession, broker: Optional[RealtimeBroker] = None):
        self.db = db
        self.broker = broker
    
    async def create_listing(self, seller_id: int, data: ListingCreate) -> Listing:
        listing = Listing(
            seller_id=seller_id,
            title=data.title,
            description=data.description,
            location=data.location,
            listing_type=data.listing_type,
            asking_price=data.asking_price,
            power_capacity_mw=data.power_capacity_mw,
            status=ListingStatus.ACTIVE,
        )
        self.db.add(listing)
        await self.db.commit()
        await self.db.refresh(listing)
        logger.info(f"Listing {listing.id} created by profile {seller_id}")
        
        if self.broker is not None:
            await self.broker.publish(
                ChangeEvent(LISTINGS_TABLE, "INSERT", new=listing_to_record(listing))
            )
        return listing
    
    async def get_listing(self, listing_id: int) -> Listing:
        listing = await self.db.get(Listing, listing_id)
        if listing is None:
            raise ListingNotFoundError()
        return listing
    
    async def list_listings(
        self,
        status: Optional[ListingStatus] = ListingStatus.ACTIVE,
        limit: int = 50,
    ) -> list[Listing]:
        """Newest first, optionally filtered by status."""
        stmt = select(Listing).order_by(Listing.created_at.desc(), Listing.id.desc()).limit(limit)
        if status is not None:
            stmt = stmt.where(Listing.status == status)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())
