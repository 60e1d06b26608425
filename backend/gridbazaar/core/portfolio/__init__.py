"""
Portfolio Module

Holdings, performance snapshots, metrics and rebalancing.
"""
from gridbazaar.core.portfolio.metrics import (
    PortfolioMetrics,
    RebalancingRecommendation,
    calculate_portfolio_metrics,
    recommend_rebalancing,
    sector_allocation,
)

__all__ = [
    "PortfolioMetrics",
    "RebalancingRecommendation",
    "calculate_portfolio_metrics",
    "recommend_rebalancing",
    "sector_allocation",
]
