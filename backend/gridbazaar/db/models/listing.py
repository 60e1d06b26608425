"""
GridBazaar - Listing Model
Sellable energy-infrastructure assets
"""
from datetime import datetime
from sqlalchemy import Column, Integer, String, Text, Numeric, Float, DateTime, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import relationship
import enum

from gridbazaar.db.database import Base


class ListingType(str, enum.Enum):
    """Kind of asset on offer."""
    SITE_SALE = "site_sale"
    SITE_LEASE = "site_lease"
    HOSTING = "hosting"
    EQUIPMENT = "equipment"


class ListingStatus(str, enum.Enum):
    """Listing lifecycle status."""
    ACTIVE = "active"
    PENDING = "pending"
    SOLD = "sold"
    INACTIVE = "inactive"


class Listing(Base):
    """Marketplace listing."""
    
    __tablename__ = "voltmarket_listings"
    
    id = Column(Integer, primary_key=True, index=True)
    seller_id = Column(Integer, ForeignKey("gridbazaar_profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    location = Column(String(255), nullable=False)
    listing_type = Column(SQLEnum(ListingType), default=ListingType.SITE_SALE, nullable=False)
    asking_price = Column(Numeric(15, 2), nullable=True)
    power_capacity_mw = Column(Float, nullable=True)
    status = Column(SQLEnum(ListingStatus), default=ListingStatus.ACTIVE, nullable=False)
    
    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    
    # Relationships
    seller = relationship("Profile", back_populates="listings")
    
    def __repr__(self):
        return f"<Listing {self.title}>"
