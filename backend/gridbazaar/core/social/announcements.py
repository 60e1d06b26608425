"""
Listing Announcements

Composes the social post announcing a listing and publishes it, either
on demand or from a background consumer of listing INSERT events.
"""
import asyncio
from typing import Any, Mapping, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from loguru import logger

from gridbazaar.core.listings.service import listing_to_record
from gridbazaar.db.database import Database
from gridbazaar.db.models.listing import Listing
from gridbazaar.db.models.social import SocialPost, PostType
from gridbazaar.realtime.broker import ChangeEvent, RealtimeBroker, RealtimeFeed
from gridbazaar.utils.exceptions import ListingNotFoundError


ANNOUNCEMENT_HASHTAGS = ["#EnergyInfrastructure", "#PowerSites", "#RealEstate"]
NEW_LISTING_HEADLINE = "🏭 New listing available! "
EXISTING_LISTING_HEADLINE = "🏭 Check out this listing! "
DESCRIPTION_PREVIEW_LENGTH = 200


def _format_number(value: float) -> str:
    value = float(value)
    if value.is_integer():
        return f"{int(value):,}"
    return f"{value:,.2f}"


def format_capacity(power_capacity_mw: Any) -> str:
    if not power_capacity_mw:
        return "Contact for details"
    return f"{float(power_capacity_mw):g} MW"


def format_price(asking_price: Any) -> str:
    if asking_price is None:
        return "Contact for pricing"
    return f"${_format_number(asking_price)}"


def _description_preview(description: Optional[str]) -> str:
    if not description:
        return ""
    if len(description) > DESCRIPTION_PREVIEW_LENGTH:
        return description[:DESCRIPTION_PREVIEW_LENGTH] + "..."
    return description


def compose_listing_announcement(listing: Mapping[str, Any], headline: str = NEW_LISTING_HEADLINE) -> str:
    """Announcement text for a listing row image."""
    return (
        f"{headline}\n\n"
        f"{listing.get('title')}\n\n"
        f"📍 Location: {listing.get('location')}\n"
        f"⚡ Power Capacity: {format_capacity(listing.get('power_capacity_mw'))}\n"
        f"💰 Price: {format_price(listing.get('asking_price'))}\n\n"
        f"{_description_preview(listing.get('description'))}\n\n"
        f"{' '.join(ANNOUNCEMENT_HASHTAGS)}"
    )


class ListingAnnouncementService:
    """Creates listing announcement posts."""
    
    def __init__(self, db: AsyncSession):
        self.db = db
    
    async def publish(self, author_id: int, listing: Mapping[str, Any], headline: str) -> SocialPost:
        post = SocialPost(
            user_id=author_id,
            content=compose_listing_announcement(listing, headline),
            post_type=PostType.LISTING_ANNOUNCEMENT,
            related_listing_id=listing.get("id"),
            hashtags=list(ANNOUNCEMENT_HASHTAGS),
            visibility="public",
        )
        self.db.add(post)
        await self.db.commit()
        await self.db.refresh(post)
        logger.info(f"Listing announcement {post.id} posted for listing {listing.get('id')}")
        return post
    
    async def announce_new_listing(self, listing: Mapping[str, Any]) -> SocialPost:
        """Announce a just-inserted listing on behalf of its seller."""
        return await self.publish(listing["seller_id"], listing, NEW_LISTING_HEADLINE)
    
    async def announce_existing_listing(self, author_id: int, listing_id: int) -> SocialPost:
        """Manual announcement of a stored listing."""
        listing = await self.db.get(Listing, listing_id)
        if listing is None:
            raise ListingNotFoundError()
        return await self.publish(author_id, listing_to_record(listing), EXISTING_LISTING_HEADLINE)


class ListingAnnouncer:
    """
    Background consumer posting an announcement for every new listing.
    
    Started in the application lifespan; each event gets its own session.
    """
    
    def __init__(self, broker: RealtimeBroker, database: Database):
        self.database = database
        self.feed = RealtimeFeed(
            broker,
            Listing.__tablename__,
            event="INSERT",
            handler=self.handle,
            history=0,
        )
        self._task: Optional[asyncio.Task] = None
    
    async def handle(self, change: ChangeEvent) -> None:
        async with self.database.session_maker() as session:
            await ListingAnnouncementService(session).announce_new_listing(change.new)
    
    def start(self) -> asyncio.Task:
        self._task = asyncio.create_task(self.feed.run(), name="listing-announcer")
        logger.info("Listing announcer started")
        return self._task
    
    async def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        self.feed.close()
        logger.info("Listing announcer stopped")
