"""
GridBazaar - Database Models
"""
from gridbazaar.db.models.user import User
from gridbazaar.db.models.profile import Profile, ProfileRole
from gridbazaar.db.models.listing import Listing, ListingType, ListingStatus
from gridbazaar.db.models.watchlist import WatchlistEntry
from gridbazaar.db.models.social import (
    SocialPost,
    SocialInteraction,
    NotificationRead,
    PostType,
    InteractionType,
)
from gridbazaar.db.models.portfolio import (
    Portfolio,
    PortfolioItem,
    PortfolioPerformance,
    PortfolioType,
    RiskTolerance,
    ItemType,
    ItemStatus,
)
from gridbazaar.db.models.verification import EmailVerificationCode
from gridbazaar.db.models.intelligence import HeavyPowerSite, Company

__all__ = [
    "User",
    "Profile",
    "ProfileRole",
    "Listing",
    "ListingType",
    "ListingStatus",
    "WatchlistEntry",
    "SocialPost",
    "SocialInteraction",
    "NotificationRead",
    "PostType",
    "InteractionType",
    "Portfolio",
    "PortfolioItem",
    "PortfolioPerformance",
    "PortfolioType",
    "RiskTolerance",
    "ItemType",
    "ItemStatus",
    "EmailVerificationCode",
    "HeavyPowerSite",
    "Company",
]
