"""
GridBazaar - Marketplace Profile Model
"""
from datetime import datetime
from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import relationship
import enum

from gridbazaar.db.database import Base


class ProfileRole(str, enum.Enum):
    """Marketplace participant role."""
    BUYER = "buyer"
    SELLER = "seller"
    BROKER = "broker"
    INVESTOR = "investor"


class Profile(Base):
    """Public marketplace identity of a user."""
    
    __tablename__ = "gridbazaar_profiles"
    
    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    
    company_name = Column(String(255), nullable=False, default="GridBazaar User")
    role = Column(SQLEnum(ProfileRole), default=ProfileRole.BUYER, nullable=False)
    bio = Column(String(1000), nullable=True)
    phone_number = Column(String(50), nullable=True)
    
    # Verification flags
    is_email_verified = Column(Boolean, default=False, nullable=False)
    is_id_verified = Column(Boolean, default=False, nullable=False)
    
    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    
    # Relationships
    user = relationship("User", back_populates="profile")
    listings = relationship("Listing", back_populates="seller", cascade="all, delete-orphan")
    portfolios = relationship("Portfolio", back_populates="owner", cascade="all, delete-orphan")
    
    def __repr__(self):
        return f"<Profile {self.company_name} ({self.role.value})>"
