"""
Portfolio Metrics

Aggregate statistics for a portfolio of marketplace holdings:
- Value, return and return percentage of active holdings
- Volatility, Sharpe-like ratio and max drawdown from performance history
- Sector diversification and categorical risk score
- Win rate and average holding period

Plus rule-based rebalancing recommendations.

Items are plain mappings shaped like the API payload:
    {"status": "active", "acquisition_price": 100, "current_value": 150,
     "acquisition_date": date(...), "metadata": {"sector": "solar", "riskLevel": "low"}}

History points are mappings with a ``return`` figure for the period.
"""
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Iterable, Mapping, Optional, Sequence

import numpy as np
from loguru import logger


RISK_LEVEL_SCORES = {
    "low": 25.0,
    "moderate": 50.0,
    "high": 75.0,
}
DEFAULT_RISK_SCORE = 50.0

SECTOR_SCORE_STEP = 20
MAX_DIVERSIFICATION_SCORE = 100

SECTOR_CONCENTRATION_LIMIT = 40.0  # percent of total current value
HIGH_RISK_SHARE_LIMIT = 0.3  # fraction of item count
TARGET_DRIFT_TOLERANCE = 10.0  # percentage points

DEFAULT_HOLDING_PERIOD_DAYS = 180
UNKNOWN_SECTOR = "Unknown"


@dataclass
class PortfolioMetrics:
    """Snapshot of aggregate portfolio metrics."""
    total_value: float = 0.0
    total_acquisition_value: float = 0.0
    total_return: float = 0.0
    return_percentage: float = 0.0
    sharpe_ratio: float = 0.0
    volatility: float = 0.0
    average_return: float = 0.0
    max_drawdown: float = 0.0
    diversification_score: float = 0.0
    risk_score: float = DEFAULT_RISK_SCORE
    active_items: int = 0
    win_rate: float = 0.0
    average_holding_period: float = DEFAULT_HOLDING_PERIOD_DAYS
    calculated_at: datetime = field(default_factory=datetime.utcnow)

    def to_dict(self) -> dict:
        return {
            "total_value": self.total_value,
            "total_acquisition_value": self.total_acquisition_value,
            "total_return": self.total_return,
            "return_percentage": self.return_percentage,
            "sharpe_ratio": self.sharpe_ratio,
            "volatility": self.volatility,
            "average_return": self.average_return,
            "max_drawdown": self.max_drawdown,
            "diversification_score": self.diversification_score,
            "risk_score": self.risk_score,
            "active_items": self.active_items,
            "win_rate": self.win_rate,
            "average_holding_period": self.average_holding_period,
            "calculated_at": self.calculated_at.isoformat(),
        }


@dataclass
class RebalancingRecommendation:
    """Single rebalancing suggestion."""
    type: str  # 'rebalance', 'risk', 'opportunity'
    priority: str  # 'high', 'medium', 'low'
    message: str
    sector: Optional[str] = None
    current_percentage: Optional[float] = None

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "priority": self.priority,
            "message": self.message,
            "sector": self.sector,
            "current_percentage": self.current_percentage,
        }


def _amount(value: Any) -> float:
    """Missing or null amounts count as zero."""
    if value is None:
        return 0.0
    return float(value)


def _metadata(item: Mapping[str, Any]) -> Mapping[str, Any]:
    return item.get("metadata") or {}


def _is_active(item: Mapping[str, Any]) -> bool:
    status = item.get("status")
    return getattr(status, "value", status) == "active"


def _is_winner(item: Mapping[str, Any]) -> bool:
    acquisition = item.get("acquisition_price")
    current = item.get("current_value")
    if not acquisition or not current:
        return False
    return float(current) > float(acquisition)


def _holding_days(acquired: Any, today: date) -> Optional[int]:
    if acquired is None:
        return None
    if isinstance(acquired, datetime):
        acquired = acquired.date()
    elif isinstance(acquired, str):
        try:
            acquired = date.fromisoformat(acquired[:10])
        except ValueError:
            logger.debug(f"Ignoring unparseable acquisition date: {acquired!r}")
            return None
    return max(0, (today - acquired).days)


def _history_returns(performance_history: Iterable[Mapping[str, Any]]) -> np.ndarray:
    return np.array([_amount(point.get("return")) for point in performance_history], dtype=float)


def calculate_portfolio_metrics(
    items: Sequence[Mapping[str, Any]],
    performance_history: Sequence[Mapping[str, Any]],
    as_of: Optional[date] = None,
) -> PortfolioMetrics:
    """
    Calculate the metrics snapshot for a set of holdings.

    Only items with status ``active`` contribute to value, return,
    diversification, risk and win rate. An empty history yields zero
    volatility, Sharpe ratio and drawdown rather than NaN.

    Args:
        items: Portfolio items
        performance_history: Period returns, oldest first
        as_of: Reference day for holding periods (defaults to today)

    Returns:
        PortfolioMetrics
    """
    active_items = [item for item in items if _is_active(item)]

    total_acquisition_value = sum(_amount(item.get("acquisition_price")) for item in active_items)
    total_current_value = sum(_amount(item.get("current_value")) for item in active_items)
    total_return = total_current_value - total_acquisition_value
    return_percentage = (
        (total_return / total_acquisition_value) * 100 if total_acquisition_value > 0 else 0.0
    )

    returns = _history_returns(performance_history)
    if returns.size > 0:
        average_return = float(np.mean(returns))
        volatility = float(np.std(returns))  # population (ddof=0)
        max_drawdown = float(np.min(returns))
    else:
        average_return = 0.0
        volatility = 0.0
        max_drawdown = 0.0
    sharpe_ratio = average_return / volatility if volatility > 0 else 0.0

    sectors = {
        _metadata(item).get("sector")
        for item in active_items
        if _metadata(item).get("sector")
    }
    diversification_score = float(min(MAX_DIVERSIFICATION_SCORE, len(sectors) * SECTOR_SCORE_STEP))

    risk_levels = [
        RISK_LEVEL_SCORES.get(_metadata(item).get("riskLevel"), DEFAULT_RISK_SCORE)
        for item in active_items
    ]
    risk_score = float(np.mean(risk_levels)) if risk_levels else DEFAULT_RISK_SCORE

    winners = [item for item in active_items if _is_winner(item)]
    win_rate = (len(winners) / len(active_items)) * 100 if active_items else 0.0

    today = as_of or date.today()
    holding_days = [
        days for days in (_holding_days(item.get("acquisition_date"), today) for item in active_items)
        if days is not None
    ]
    average_holding_period = (
        float(np.mean(holding_days)) if holding_days else float(DEFAULT_HOLDING_PERIOD_DAYS)
    )

    return PortfolioMetrics(
        total_value=total_current_value,
        total_acquisition_value=total_acquisition_value,
        total_return=total_return,
        return_percentage=return_percentage,
        sharpe_ratio=sharpe_ratio,
        volatility=volatility,
        average_return=average_return,
        max_drawdown=max_drawdown,
        diversification_score=diversification_score,
        risk_score=risk_score,
        active_items=len(active_items),
        win_rate=win_rate,
        average_holding_period=average_holding_period,
    )


def sector_allocation(items: Sequence[Mapping[str, Any]]) -> dict[str, float]:
    """Current value per sector over all items; missing sector is 'Unknown'."""
    allocation: dict[str, float] = {}
    for item in items:
        sector = _metadata(item).get("sector") or UNKNOWN_SECTOR
        allocation[sector] = allocation.get(sector, 0.0) + _amount(item.get("current_value"))
    return allocation


def recommend_rebalancing(
    items: Sequence[Mapping[str, Any]],
    target_allocation: Optional[Mapping[str, float]] = None,
) -> list[RebalancingRecommendation]:
    """
    Derive rebalancing recommendations.

    - Any sector holding more than 40% of total current value (high priority)
    - More than 30% of items flagged high-risk (medium priority)
    - Sectors drifting more than 10 points from the target allocation (low priority)

    All items are considered regardless of status.
    """
    recommendations: list[RebalancingRecommendation] = []

    allocation = sector_allocation(items)
    total_value = sum(allocation.values())

    shares: dict[str, float] = {}
    if total_value > 0:
        shares = {sector: (value / total_value) * 100 for sector, value in allocation.items()}
        for sector, percentage in shares.items():
            if percentage > SECTOR_CONCENTRATION_LIMIT:
                recommendations.append(RebalancingRecommendation(
                    type="rebalance",
                    priority="high",
                    message=f"Consider reducing {sector} allocation (currently {percentage:.1f}%)",
                    sector=sector,
                    current_percentage=percentage,
                ))

    high_risk_items = [item for item in items if _metadata(item).get("riskLevel") == "high"]
    if len(high_risk_items) > len(items) * HIGH_RISK_SHARE_LIMIT:
        recommendations.append(RebalancingRecommendation(
            type="risk",
            priority="medium",
            message="High concentration in high-risk assets. Consider adding defensive positions.",
        ))

    if target_allocation and shares:
        actual_by_key = {sector.lower(): (sector, pct) for sector, pct in shares.items()}
        for target_sector, target_pct in target_allocation.items():
            sector, actual_pct = actual_by_key.get(target_sector.lower(), (target_sector, 0.0))
            drift = actual_pct - float(target_pct)
            if abs(drift) > TARGET_DRIFT_TOLERANCE:
                direction = "above" if drift > 0 else "below"
                recommendations.append(RebalancingRecommendation(
                    type="opportunity",
                    priority="low",
                    message=(
                        f"{sector} allocation is {actual_pct:.1f}%, {direction} "
                        f"its {float(target_pct):.1f}% target"
                    ),
                    sector=sector,
                    current_percentage=actual_pct,
                ))

    return recommendations
