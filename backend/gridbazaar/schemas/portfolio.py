"""
GridBazaar - Portfolio Schemas
"""
from datetime import datetime, date
from datetime import date as date_type
from typing import Any, Optional
from pydantic import BaseModel, Field, ConfigDict

from gridbazaar.db.models.portfolio import PortfolioType, RiskTolerance, ItemType, ItemStatus


# =========================
# Portfolio
# =========================

class PortfolioBase(BaseModel):
    """Base portfolio schema."""
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=1000)
    portfolio_type: PortfolioType = PortfolioType.INVESTMENT
    risk_tolerance: RiskTolerance = RiskTolerance.MODERATE
    target_allocation: dict[str, float] = Field(
        default_factory=dict,
        description="Sector -> target percent of current value",
    )


class PortfolioCreate(PortfolioBase):
    """Schema for creating a portfolio."""
    pass


class PortfolioUpdate(BaseModel):
    """Schema for updating a portfolio."""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=1000)
    portfolio_type: Optional[PortfolioType] = None
    risk_tolerance: Optional[RiskTolerance] = None
    target_allocation: Optional[dict[str, float]] = None


class PortfolioResponse(PortfolioBase):
    """Portfolio with derived totals."""
    id: int
    user_id: int
    created_at: datetime
    updated_at: Optional[datetime] = None
    total_value: float = 0.0
    total_return: float = 0.0
    return_percentage: float = 0.0
    active_items: int = 0
    item_count: int = 0


# =========================
# Items
# =========================

class PortfolioItemBase(BaseModel):
    """Base portfolio item schema."""
    name: str = Field(..., min_length=1, max_length=255)
    item_type: ItemType = ItemType.INVESTMENT
    listing_id: Optional[int] = None
    acquisition_price: Optional[float] = None
    current_value: Optional[float] = None
    acquisition_date: Optional[date] = None
    status: ItemStatus = ItemStatus.ACTIVE
    notes: Optional[str] = None
    metadata: dict[str, Any] = Field(
        default_factory=dict,
        description="sector, riskLevel, location, powerCapacity, expectedReturn, timeHorizon",
    )


class PortfolioItemCreate(PortfolioItemBase):
    """Schema for adding an item."""
    pass


class PortfolioItemUpdate(BaseModel):
    """Valuation refresh or status change; items are never deleted."""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    current_value: Optional[float] = None
    status: Optional[ItemStatus] = None
    notes: Optional[str] = None
    metadata: Optional[dict[str, Any]] = None


class PortfolioItemResponse(PortfolioItemBase):
    """Portfolio item response."""
    id: int
    portfolio_id: int
    added_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class PortfolioDetail(PortfolioResponse):
    """Portfolio with its items."""
    items: list[PortfolioItemResponse] = []


# =========================
# Performance
# =========================

class PerformanceSnapshotCreate(BaseModel):
    """Record a dated valuation; value defaults to the current total."""
    date: Optional[date_type] = None
    value: Optional[float] = None
    benchmark: Optional[float] = None


class PerformanceSnapshotResponse(BaseModel):
    """Stored valuation snapshot."""
    id: int
    portfolio_id: int
    date: date_type
    value: float
    benchmark: Optional[float] = None
    period_return: float = Field(..., serialization_alias="return")
    created_at: Optional[datetime] = None
    
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


# =========================
# Metrics
# =========================

class MetricsItemInput(BaseModel):
    """Item shape accepted by the stateless metrics calculation."""
    status: str = "active"
    acquisition_price: Optional[float] = None
    current_value: Optional[float] = None
    acquisition_date: Optional[date] = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class HistoryPoint(BaseModel):
    """One period return in percent."""
    date: Optional[date_type] = None
    value: Optional[float] = None
    period_return: float = Field(0.0, alias="return")
    
    model_config = ConfigDict(populate_by_name=True)


class MetricsCalculationRequest(BaseModel):
    """Items and history for an ad-hoc metrics calculation."""
    items: list[MetricsItemInput] = []
    performance_history: list[HistoryPoint] = []
    target_allocation: dict[str, float] = Field(default_factory=dict)


class PortfolioMetricsResponse(BaseModel):
    """Aggregate portfolio metrics."""
    total_value: float
    total_acquisition_value: float
    total_return: float
    return_percentage: float
    sharpe_ratio: float
    volatility: float
    average_return: float
    max_drawdown: float
    diversification_score: float
    risk_score: float
    active_items: int
    win_rate: float
    average_holding_period: float
    calculated_at: datetime


class RebalancingRecommendationResponse(BaseModel):
    """Single rebalancing suggestion."""
    type: str  # rebalance, risk, opportunity
    priority: str  # high, medium, low
    message: str
    sector: Optional[str] = None
    current_percentage: Optional[float] = None


class PortfolioAnalysisResponse(BaseModel):
    """Metrics plus recommendations."""
    portfolio_id: Optional[int] = None
    metrics: PortfolioMetricsResponse
    sector_allocation: dict[str, float]
    recommendations: list[RebalancingRecommendationResponse]
