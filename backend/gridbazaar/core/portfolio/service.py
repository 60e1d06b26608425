"""
Portfolio Service

CRUD for portfolios and their items, performance snapshots, and the
metrics/rebalancing analysis of a stored portfolio.
"""
from datetime import datetime, date
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from loguru import logger

from gridbazaar.config import settings
from gridbazaar.db.models.portfolio import (
    Portfolio,
    PortfolioItem,
    PortfolioPerformance,
    ItemStatus,
)
from gridbazaar.core.portfolio.metrics import (
    PortfolioMetrics,
    RebalancingRecommendation,
    calculate_portfolio_metrics,
    recommend_rebalancing,
    sector_allocation,
)
from gridbazaar.schemas.portfolio import (
    PortfolioCreate,
    PortfolioUpdate,
    PortfolioItemCreate,
    PortfolioItemUpdate,
)
from gridbazaar.utils.exceptions import PortfolioNotFoundError, PortfolioItemNotFoundError


def _float(value) -> Optional[float]:
    return float(value) if value is not None else None


def item_to_dict(item: PortfolioItem) -> dict[str, Any]:
    """Plain mapping of an item, as consumed by the metrics calculator."""
    return {
        "id": item.id,
        "portfolio_id": item.portfolio_id,
        "listing_id": item.listing_id,
        "item_type": item.item_type,
        "name": item.name,
        "acquisition_price": _float(item.acquisition_price),
        "current_value": _float(item.current_value),
        "acquisition_date": item.acquisition_date,
        "status": item.status,
        "notes": item.notes,
        "metadata": item.item_metadata or {},
        "added_at": item.added_at,
        "updated_at": item.updated_at,
    }


def snapshot_to_dict(snapshot: PortfolioPerformance) -> dict[str, Any]:
    return {
        "date": snapshot.date,
        "value": _float(snapshot.value),
        "return": snapshot.period_return or 0.0,
    }


class PortfolioService:
    """
    Service for portfolio management operations.
    
    Usage:
        service = PortfolioService(db_session)
        portfolio = await service.create_portfolio(profile_id, PortfolioCreate(name="Core"))
        await service.add_item(portfolio.id, profile_id, PortfolioItemCreate(...))
        metrics, recommendations = await service.analyze(portfolio.id, profile_id)
    """
    
    def __init__(self, db: AsyncSession):
        self.db = db
    
    # ==================== Portfolios ====================
    
    async def create_portfolio(self, owner_id: int, data: PortfolioCreate) -> Portfolio:
        portfolio = Portfolio(
            user_id=owner_id,
            name=data.name,
            description=data.description,
            portfolio_type=data.portfolio_type,
            risk_tolerance=data.risk_tolerance,
            target_allocation=data.target_allocation,
        )
        self.db.add(portfolio)
        await self.db.commit()
        await self.db.refresh(portfolio)
        
        logger.info(f"Created portfolio {portfolio.id} for profile {owner_id}")
        return portfolio
    
    async def get_portfolio(self, portfolio_id: int, owner_id: int) -> Portfolio:
        """Get a portfolio owned by the profile; raises PortfolioNotFoundError."""
        result = await self.db.execute(
            select(Portfolio).where(
                Portfolio.id == portfolio_id,
                Portfolio.user_id == owner_id,
            )
        )
        portfolio = result.scalar_one_or_none()
        if portfolio is None:
            raise PortfolioNotFoundError()
        return portfolio
    
    async def list_portfolios(self, owner_id: int) -> list[Portfolio]:
        result = await self.db.execute(
            select(Portfolio)
            .where(Portfolio.user_id == owner_id)
            .order_by(Portfolio.created_at.desc())
        )
        return list(result.scalars().all())
    
    async def update_portfolio(
        self,
        portfolio_id: int,
        owner_id: int,
        data: PortfolioUpdate,
    ) -> Portfolio:
        portfolio = await self.get_portfolio(portfolio_id, owner_id)
        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(portfolio, field, value)
        portfolio.updated_at = datetime.utcnow()
        await self.db.commit()
        await self.db.refresh(portfolio)
        return portfolio
    
    # ==================== Items ====================
    
    async def add_item(
        self,
        portfolio_id: int,
        owner_id: int,
        data: PortfolioItemCreate,
    ) -> PortfolioItem:
        await self.get_portfolio(portfolio_id, owner_id)
        item = PortfolioItem(
            portfolio_id=portfolio_id,
            listing_id=data.listing_id,
            item_type=data.item_type,
            name=data.name,
            acquisition_price=data.acquisition_price,
            current_value=data.current_value,
            acquisition_date=data.acquisition_date,
            status=data.status,
            notes=data.notes,
            item_metadata=data.metadata,
        )
        self.db.add(item)
        await self.db.commit()
        await self.db.refresh(item)
        
        logger.info(f"Added item {item.id} ({item.name}) to portfolio {portfolio_id}")
        return item
    
    async def update_item(
        self,
        portfolio_id: int,
        item_id: int,
        owner_id: int,
        data: PortfolioItemUpdate,
    ) -> PortfolioItem:
        """Refresh valuation or move the item to another status."""
        await self.get_portfolio(portfolio_id, owner_id)
        result = await self.db.execute(
            select(PortfolioItem).where(
                PortfolioItem.id == item_id,
                PortfolioItem.portfolio_id == portfolio_id,
            )
        )
        item = result.scalar_one_or_none()
        if item is None:
            raise PortfolioItemNotFoundError()
        
        changes = data.model_dump(exclude_unset=True)
        if "metadata" in changes:
            item.item_metadata = {**(item.item_metadata or {}), **(changes.pop("metadata") or {})}
        for field, value in changes.items():
            setattr(item, field, value)
        item.updated_at = datetime.utcnow()
        
        await self.db.commit()
        await self.db.refresh(item)
        return item
    
    async def retire_item(
        self,
        portfolio_id: int,
        item_id: int,
        owner_id: int,
        status: ItemStatus = ItemStatus.SOLD,
    ) -> PortfolioItem:
        """Items are never deleted; they leave the active set."""
        return await self.update_item(
            portfolio_id, item_id, owner_id, PortfolioItemUpdate(status=status)
        )
    
    # ==================== Performance ====================
    
    async def get_performance_history(
        self,
        portfolio_id: int,
        limit: Optional[int] = None,
    ) -> list[PortfolioPerformance]:
        """Most recent snapshots, oldest first."""
        limit = limit or settings.PERFORMANCE_HISTORY_WINDOW
        result = await self.db.execute(
            select(PortfolioPerformance)
            .where(PortfolioPerformance.portfolio_id == portfolio_id)
            .order_by(PortfolioPerformance.date.desc(), PortfolioPerformance.id.desc())
            .limit(limit)
        )
        return list(reversed(result.scalars().all()))
    
    async def record_snapshot(
        self,
        portfolio_id: int,
        owner_id: int,
        value: Optional[float] = None,
        benchmark: Optional[float] = None,
        snapshot_date: Optional[date] = None,
    ) -> PortfolioPerformance:
        """
        Store a dated valuation.
        
        The period return is the percent change against the latest earlier
        snapshot (0 for the first one). Value defaults to the current total
        of active items.
        """
        portfolio = await self.get_portfolio(portfolio_id, owner_id)
        if value is None:
            metrics = calculate_portfolio_metrics(
                [item_to_dict(item) for item in portfolio.items], []
            )
            value = metrics.total_value
        
        history = await self.get_performance_history(portfolio_id, limit=1)
        previous = _float(history[-1].value) if history else None
        period_return = (
            ((value - previous) / previous) * 100 if previous and previous > 0 else 0.0
        )
        
        snapshot = PortfolioPerformance(
            portfolio_id=portfolio_id,
            date=snapshot_date or date.today(),
            value=value,
            benchmark=benchmark,
            period_return=period_return,
        )
        self.db.add(snapshot)
        await self.db.commit()
        await self.db.refresh(snapshot)
        
        logger.debug(f"Portfolio {portfolio_id} snapshot: value={value} return={period_return:.2f}%")
        return snapshot
    
    # ==================== Analysis ====================
    
    async def analyze(
        self,
        portfolio_id: int,
        owner_id: int,
    ) -> tuple[PortfolioMetrics, list[RebalancingRecommendation], dict[str, float]]:
        """Metrics, rebalancing recommendations and sector allocation."""
        portfolio = await self.get_portfolio(portfolio_id, owner_id)
        items = [item_to_dict(item) for item in portfolio.items]
        history = [
            snapshot_to_dict(s) for s in await self.get_performance_history(portfolio_id)
        ]
        
        metrics = calculate_portfolio_metrics(items, history)
        recommendations = recommend_rebalancing(items, portfolio.target_allocation or {})
        return metrics, recommendations, sector_allocation(items)
    
    def summarize(self, portfolio: Portfolio) -> dict[str, Any]:
        """Portfolio fields plus totals derived from its items."""
        items = [item_to_dict(item) for item in portfolio.items]
        metrics = calculate_portfolio_metrics(items, [])
        return {
            "id": portfolio.id,
            "user_id": portfolio.user_id,
            "name": portfolio.name,
            "description": portfolio.description,
            "portfolio_type": portfolio.portfolio_type,
            "risk_tolerance": portfolio.risk_tolerance,
            "target_allocation": portfolio.target_allocation or {},
            "created_at": portfolio.created_at,
            "updated_at": portfolio.updated_at,
            "total_value": metrics.total_value,
            "total_return": metrics.total_return,
            "return_percentage": metrics.return_percentage,
            "active_items": metrics.active_items,
            "item_count": len(items),
        }
