"""
Unit Tests - Listing Service
"""
from datetime import datetime

import pytest
from unittest.mock import AsyncMock

from gridbazaar.core.listings.service import LISTINGS_TABLE, ListingService, listing_to_record
from gridbazaar.db.models.listing import Listing, ListingStatus, ListingType
from gridbazaar.realtime.broker import RealtimeBroker
from gridbazaar.schemas.listing import ListingCreate
from gridbazaar.utils.exceptions import ListingNotFoundError


CREATED_AT = datetime(2026, 3, 1, 12, 0, 0)


@pytest.fixture
def session(mock_db_session):
    async def assign_identity(listing):
        listing.id = 42
        listing.created_at = CREATED_AT

    mock_db_session.refresh = AsyncMock(side_effect=assign_identity)
    return mock_db_session


@pytest.fixture
def payload():
    return ListingCreate(
        title="50 MW substation site",
        location="Abilene, TX",
        listing_type=ListingType.SITE_LEASE,
        asking_price=1500000,
        power_capacity_mw=50.0,
    )


class TestCreateListing:

    @pytest.mark.asyncio
    async def test_publishes_insert(self, session, payload):
        broker = RealtimeBroker(queue_maxsize=5)
        subscription = broker.subscribe(LISTINGS_TABLE, event="INSERT")

        listing = await ListingService(session, broker).create_listing(10, payload)

        assert listing.status == ListingStatus.ACTIVE
        assert subscription.queue.qsize() == 1
        change = subscription.queue.get_nowait()
        assert change.table == "voltmarket_listings"
        assert change.event_type == "INSERT"
        assert change.new["id"] == 42
        assert change.new["seller_id"] == 10
        assert change.new["listing_type"] == "site_lease"
        assert change.new["asking_price"] == 1500000.0
        assert change.new["created_at"] == "2026-03-01T12:00:00"

    @pytest.mark.asyncio
    async def test_publishes_after_commit(self, session, payload):
        broker = AsyncMock()
        broker.publish.side_effect = lambda change: session.commit.assert_awaited_once()

        await ListingService(session, broker).create_listing(10, payload)

        broker.publish.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_without_broker(self, session, payload):
        listing = await ListingService(session).create_listing(10, payload)

        assert listing.id == 42
        session.add.assert_called_once_with(listing)


class TestGetListing:

    @pytest.mark.asyncio
    async def test_found(self, mock_db_session):
        listing = Listing(id=3, seller_id=10, title="Site", location="Reno, NV")
        mock_db_session.get.return_value = listing

        assert await ListingService(mock_db_session).get_listing(3) is listing

    @pytest.mark.asyncio
    async def test_missing(self, mock_db_session):
        mock_db_session.get.return_value = None

        with pytest.raises(ListingNotFoundError):
            await ListingService(mock_db_session).get_listing(404)


class TestListingRecord:

    def test_unsaved_listing(self):
        record = listing_to_record(Listing(seller_id=1, title="t", location="l"))

        assert record["asking_price"] is None
        assert record["created_at"] is None
        assert record["status"] is None
