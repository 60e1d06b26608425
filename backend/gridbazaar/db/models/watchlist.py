"""
GridBazaar - Watchlist Model
"""
from datetime import datetime
from sqlalchemy import Column, Integer, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from gridbazaar.db.database import Base


class WatchlistEntry(Base):
    """A listing a profile is watching."""
    
    __tablename__ = "voltmarket_watchlist"
    __table_args__ = (
        UniqueConstraint("user_id", "listing_id", name="uq_voltmarket_watchlist_user_listing"),
    )
    
    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("gridbazaar_profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    listing_id = Column(Integer, ForeignKey("voltmarket_listings.id", ondelete="CASCADE"), nullable=False)
    added_at = Column(DateTime, default=datetime.utcnow)
    
    # Relationships
    listing = relationship("Listing", lazy="selectin")
    
    def __repr__(self):
        return f"<WatchlistEntry profile={self.user_id} listing={self.listing_id}>"
