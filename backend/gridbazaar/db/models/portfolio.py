"""
GridBazaar - Portfolio Models
"""
from datetime import datetime, date
from sqlalchemy import (
    Column, Integer, String, Text, Numeric, Float, Date, DateTime, ForeignKey, JSON, Enum as SQLEnum,
)
from sqlalchemy.orm import relationship
import enum

from gridbazaar.db.database import Base


class PortfolioType(str, enum.Enum):
    """Portfolio purpose."""
    INVESTMENT = "investment"
    DEVELOPMENT = "development"
    TRADING = "trading"
    RESEARCH = "research"


class RiskTolerance(str, enum.Enum):
    """Portfolio risk tolerance."""
    CONSERVATIVE = "conservative"
    MODERATE = "moderate"
    AGGRESSIVE = "aggressive"
    SPECULATIVE = "speculative"


class ItemType(str, enum.Enum):
    """Kind of portfolio holding."""
    LISTING = "listing"
    INVESTMENT = "investment"
    OPPORTUNITY = "opportunity"
    RESEARCH = "research"


class ItemStatus(str, enum.Enum):
    """Holding status. Items are never deleted, only moved out of ACTIVE."""
    ACTIVE = "active"
    SOLD = "sold"
    UNDER_CONTRACT = "under_contract"
    MONITORING = "monitoring"


class Portfolio(Base):
    """Portfolio of marketplace holdings."""
    
    __tablename__ = "voltmarket_portfolios"
    
    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("gridbazaar_profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    
    name = Column(String(255), nullable=False)
    description = Column(String(1000), nullable=True)
    portfolio_type = Column(SQLEnum(PortfolioType), default=PortfolioType.INVESTMENT, nullable=False)
    risk_tolerance = Column(SQLEnum(RiskTolerance), default=RiskTolerance.MODERATE, nullable=False)
    # Sector -> target percent of current value
    target_allocation = Column(JSON, default=dict)
    
    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    
    # Relationships
    owner = relationship("Profile", back_populates="portfolios")
    items = relationship(
        "PortfolioItem",
        back_populates="portfolio",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="PortfolioItem.added_at",
    )
    performance = relationship(
        "PortfolioPerformance",
        back_populates="portfolio",
        cascade="all, delete-orphan",
        order_by="PortfolioPerformance.date",
    )
    
    def __repr__(self):
        return f"<Portfolio {self.name} ({self.risk_tolerance.value})>"


class PortfolioItem(Base):
    """A holding within a portfolio."""
    
    __tablename__ = "voltmarket_portfolio_items"
    
    id = Column(Integer, primary_key=True, index=True)
    portfolio_id = Column(Integer, ForeignKey("voltmarket_portfolios.id", ondelete="CASCADE"), nullable=False, index=True)
    listing_id = Column(Integer, ForeignKey("voltmarket_listings.id", ondelete="SET NULL"), nullable=True)
    
    item_type = Column(SQLEnum(ItemType), default=ItemType.INVESTMENT, nullable=False)
    name = Column(String(255), nullable=False)
    acquisition_price = Column(Numeric(15, 2), nullable=True)
    current_value = Column(Numeric(15, 2), nullable=True)
    acquisition_date = Column(Date, nullable=True)
    status = Column(SQLEnum(ItemStatus), default=ItemStatus.ACTIVE, nullable=False)
    notes = Column(Text, nullable=True)
    # sector, riskLevel, location, powerCapacity, expectedReturn, timeHorizon ...
    item_metadata = Column("metadata", JSON, default=dict)
    
    # Timestamps
    added_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    
    portfolio = relationship("Portfolio", back_populates="items")
    
    def __repr__(self):
        return f"<PortfolioItem {self.name} ({self.status.value})>"


class PortfolioPerformance(Base):
    """Dated valuation snapshot of a portfolio."""
    
    __tablename__ = "voltmarket_portfolio_performance"
    
    id = Column(Integer, primary_key=True, index=True)
    portfolio_id = Column(Integer, ForeignKey("voltmarket_portfolios.id", ondelete="CASCADE"), nullable=False, index=True)
    date = Column(Date, default=date.today, nullable=False)
    value = Column(Numeric(15, 2), nullable=False)
    benchmark = Column(Numeric(15, 2), nullable=True)
    # Period return in percent vs the previous snapshot
    period_return = Column("return", Float, default=0.0, nullable=False)
    
    created_at = Column(DateTime, default=datetime.utcnow)
    
    portfolio = relationship("Portfolio", back_populates="performance")
