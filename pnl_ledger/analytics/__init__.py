"""Analytics layer package for valuation and history aggregations."""

from .history import HistoricalDataPoint, PriceLookup, analytics_build_portfolio_history
from .metrics import (
    PositionValuation,
    analytics_pnl_percentage,
    analytics_position_valuation,
    analytics_serialize_valuation,
    analytics_total_pnl,
    analytics_unrealized_pnl,
)

__all__ = [
    "HistoricalDataPoint",
    "PriceLookup",
    "analytics_build_portfolio_history",
    "PositionValuation",
    "analytics_pnl_percentage",
    "analytics_position_valuation",
    "analytics_serialize_valuation",
    "analytics_total_pnl",
    "analytics_unrealized_pnl",
]
