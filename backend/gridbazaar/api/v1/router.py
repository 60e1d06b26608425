"""
GridBazaar - API v1 Router
"""
from fastapi import APIRouter

from gridbazaar.api.v1.endpoints import (
    auth, portfolios, opportunities, listings, watchlist, social, features
)
from gridbazaar.api.v1.websockets import realtime_stream_router

api_router = APIRouter()


# API v1 root endpoint
@api_router.get("/", tags=["API Info"])
async def api_root():
    """API v1 root - returns version info."""
    return {
        "api": "GridBazaar",
        "version": "v1",
        "status": "operational"
    }


# Include all endpoint routers
api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(portfolios.router, prefix="/portfolios", tags=["Portfolios"])
api_router.include_router(opportunities.router, prefix="/opportunities", tags=["Opportunities"])
api_router.include_router(listings.router, prefix="/listings", tags=["Listings"])
api_router.include_router(watchlist.router, prefix="/watchlist", tags=["Watchlist"])
api_router.include_router(social.router, prefix="/social", tags=["Social"])
api_router.include_router(features.router, prefix="/features", tags=["Features"])

# Include WebSocket routers
api_router.include_router(realtime_stream_router, tags=["WebSocket - Realtime"])
