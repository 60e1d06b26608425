"""
GridBazaar - Portfolio Endpoints
Portfolios, items, performance snapshots and analytics
"""
from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from gridbazaar.dependencies import get_db, get_current_profile
from gridbazaar.db.models.profile import Profile
from gridbazaar.core.portfolio.metrics import (
    calculate_portfolio_metrics,
    recommend_rebalancing,
    sector_allocation,
)
from gridbazaar.core.portfolio.service import PortfolioService, item_to_dict
from gridbazaar.schemas.portfolio import (
    PortfolioCreate,
    PortfolioUpdate,
    PortfolioResponse,
    PortfolioDetail,
    PortfolioItemCreate,
    PortfolioItemUpdate,
    PortfolioItemResponse,
    PerformanceSnapshotCreate,
    PerformanceSnapshotResponse,
    MetricsCalculationRequest,
    PortfolioAnalysisResponse,
)

router = APIRouter()


def _analysis_response(portfolio_id, metrics, recommendations, allocation) -> PortfolioAnalysisResponse:
    return PortfolioAnalysisResponse(
        portfolio_id=portfolio_id,
        metrics=metrics.to_dict(),
        sector_allocation=allocation,
        recommendations=[r.to_dict() for r in recommendations],
    )


@router.post("/metrics/calculate", response_model=PortfolioAnalysisResponse)
async def calculate_metrics(
    data: MetricsCalculationRequest,
    profile: Annotated[Profile, Depends(get_current_profile)],
):
    """Metrics and recommendations for items and history sent in the body."""
    items = [item.model_dump() for item in data.items]
    history = [{"return": point.period_return} for point in data.performance_history]
    metrics = calculate_portfolio_metrics(items, history)
    recommendations = recommend_rebalancing(items, data.target_allocation)
    return _analysis_response(None, metrics, recommendations, sector_allocation(items))


@router.get("/", response_model=list[PortfolioResponse])
async def list_portfolios(
    profile: Annotated[Profile, Depends(get_current_profile)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Portfolios of the current profile with derived totals."""
    service = PortfolioService(db)
    portfolios = await service.list_portfolios(profile.id)
    return [service.summarize(p) for p in portfolios]


@router.post("/", response_model=PortfolioResponse, status_code=status.HTTP_201_CREATED)
async def create_portfolio(
    data: PortfolioCreate,
    profile: Annotated[Profile, Depends(get_current_profile)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    service = PortfolioService(db)
    portfolio = await service.create_portfolio(profile.id, data)
    return service.summarize(portfolio)


@router.get("/{portfolio_id}", response_model=PortfolioDetail)
async def get_portfolio(
    portfolio_id: int,
    profile: Annotated[Profile, Depends(get_current_profile)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Portfolio with its items."""
    service = PortfolioService(db)
    portfolio = await service.get_portfolio(portfolio_id, profile.id)
    return {
        **service.summarize(portfolio),
        "items": [item_to_dict(item) for item in portfolio.items],
    }


@router.patch("/{portfolio_id}", response_model=PortfolioResponse)
async def update_portfolio(
    portfolio_id: int,
    data: PortfolioUpdate,
    profile: Annotated[Profile, Depends(get_current_profile)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    service = PortfolioService(db)
    portfolio = await service.update_portfolio(portfolio_id, profile.id, data)
    return service.summarize(portfolio)


@router.post(
    "/{portfolio_id}/items",
    response_model=PortfolioItemResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_item(
    portfolio_id: int,
    data: PortfolioItemCreate,
    profile: Annotated[Profile, Depends(get_current_profile)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    service = PortfolioService(db)
    item = await service.add_item(portfolio_id, profile.id, data)
    return item_to_dict(item)


@router.patch("/{portfolio_id}/items/{item_id}", response_model=PortfolioItemResponse)
async def update_item(
    portfolio_id: int,
    item_id: int,
    data: PortfolioItemUpdate,
    profile: Annotated[Profile, Depends(get_current_profile)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Refresh valuation or change status; items are never deleted."""
    service = PortfolioService(db)
    item = await service.update_item(portfolio_id, item_id, profile.id, data)
    return item_to_dict(item)


@router.get("/{portfolio_id}/performance", response_model=list[PerformanceSnapshotResponse])
async def get_performance(
    portfolio_id: int,
    profile: Annotated[Profile, Depends(get_current_profile)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    service = PortfolioService(db)
    await service.get_portfolio(portfolio_id, profile.id)
    return await service.get_performance_history(portfolio_id)


@router.post(
    "/{portfolio_id}/performance",
    response_model=PerformanceSnapshotResponse,
    status_code=status.HTTP_201_CREATED,
)
async def record_performance(
    portfolio_id: int,
    data: PerformanceSnapshotCreate,
    profile: Annotated[Profile, Depends(get_current_profile)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    service = PortfolioService(db)
    return await service.record_snapshot(
        portfolio_id,
        profile.id,
        value=data.value,
        benchmark=data.benchmark,
        snapshot_date=data.date,
    )


@router.get("/{portfolio_id}/metrics", response_model=PortfolioAnalysisResponse)
async def get_portfolio_metrics(
    portfolio_id: int,
    profile: Annotated[Profile, Depends(get_current_profile)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Metrics over the recent performance window plus rebalancing advice."""
    service = PortfolioService(db)
    metrics, recommendations, allocation = await service.analyze(portfolio_id, profile.id)
    return _analysis_response(portfolio_id, metrics, recommendations, allocation)
