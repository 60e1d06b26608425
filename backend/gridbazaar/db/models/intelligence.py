"""
GridBazaar - Industry Intelligence Source Models
Rows the opportunity scanner reads from
"""
from datetime import datetime
from sqlalchemy import Column, Integer, String, Float, Numeric, DateTime, JSON

from gridbazaar.db.database import Base


class HeavyPowerSite(Base):
    """Verified heavy-power industrial site, possibly idle."""
    
    __tablename__ = "verified_heavy_power_sites"
    
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=True)
    address = Column(String(500), nullable=True)
    city = Column(String(255), nullable=True)
    state = Column(String(100), nullable=True)
    zip_code = Column(String(20), nullable=True)
    # {"lat": .., "lng": ..} or "POINT(lng lat)"
    coordinates = Column(JSON, nullable=True)
    
    facility_type = Column(String(255), nullable=True)
    industry_type = Column(String(255), nullable=True)
    business_status = Column(String(100), nullable=True)
    confidence_level = Column(Float, nullable=True)
    power_potential = Column(String(100), nullable=True)
    validation_status = Column(String(100), nullable=True)
    estimated_free_mw = Column(Float, nullable=True)
    idle_score = Column(Float, nullable=True)
    site_metadata = Column("metadata", JSON, nullable=True)
    
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=True)
    deleted_at = Column(DateTime, nullable=True)


class Company(Base):
    """Tracked company with financial health data."""
    
    __tablename__ = "companies"
    
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    ticker = Column(String(20), nullable=True)
    industry = Column(String(255), nullable=True)
    sector = Column(String(255), nullable=True)
    market_cap = Column(Numeric(20, 2), nullable=True)
    financial_data = Column(JSON, nullable=True)
    
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
