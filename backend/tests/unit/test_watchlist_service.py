"""
Unit Tests - Watchlist Service
"""
import pytest
from unittest.mock import AsyncMock, MagicMock

from gridbazaar.core.watchlist.service import WatchlistService
from gridbazaar.db.models.watchlist import WatchlistEntry
from gridbazaar.utils.exceptions import AlreadyWatchingError, ListingNotFoundError


def membership(found: bool):
    result = MagicMock()
    result.scalar_one_or_none.return_value = 1 if found else None
    return result


class TestWatchlistService:
    
    @pytest.mark.asyncio
    async def test_add_unknown_listing(self, mock_db_session):
        mock_db_session.get.return_value = None
        
        with pytest.raises(ListingNotFoundError):
            await WatchlistService(mock_db_session).add_to_watchlist(10, 99)
        
        mock_db_session.add.assert_not_called()
    
    @pytest.mark.asyncio
    async def test_add_duplicate(self, mock_db_session):
        mock_db_session.get.return_value = MagicMock(id=5)
        mock_db_session.execute.return_value = membership(True)
        
        with pytest.raises(AlreadyWatchingError):
            await WatchlistService(mock_db_session).add_to_watchlist(10, 5)
    
    @pytest.mark.asyncio
    async def test_add_returns_refreshed_watchlist(self, mock_db_session, scalars):
        entry = MagicMock(listing_id=5)
        mock_db_session.get.return_value = MagicMock(id=5)
        mock_db_session.execute.side_effect = [membership(False), scalars([entry])]
        
        entries = await WatchlistService(mock_db_session).add_to_watchlist(10, 5)
        
        assert entries == [entry]
        added = mock_db_session.add.call_args[0][0]
        assert isinstance(added, WatchlistEntry)
        assert (added.user_id, added.listing_id) == (10, 5)
        mock_db_session.commit.assert_awaited_once()
    
    @pytest.mark.asyncio
    async def test_toggle_removes_watched_listing(self, mock_db_session, scalars):
        mock_db_session.execute.side_effect = [membership(True), MagicMock(), scalars([])]
        
        watching, entries = await WatchlistService(mock_db_session).toggle_watchlist(10, 5)
        
        assert watching is False
        assert entries == []
        mock_db_session.commit.assert_awaited_once()
    
    @pytest.mark.asyncio
    async def test_toggle_adds_unwatched_listing(self, mock_db_session, scalars):
        entry = MagicMock(listing_id=5)
        mock_db_session.get.return_value = MagicMock(id=5)
        mock_db_session.execute.side_effect = [
            membership(False), membership(False), scalars([entry])
        ]
        
        watching, entries = await WatchlistService(mock_db_session).toggle_watchlist(10, 5)
        
        assert watching is True
        assert entries == [entry]
