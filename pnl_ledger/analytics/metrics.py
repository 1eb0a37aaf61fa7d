"""Mark-to-market metrics derived from projected positions."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from pnl_ledger.domain import PortfolioPosition


_ZERO = Decimal("0")
_HUNDRED = Decimal("100")


@dataclass(frozen=True)
class PositionValuation:
    """Valuation of one position at a current market price.

    Attributes:
        position: Valued position.
        current_price: Market price used for valuation.
        market_value: Open quantity times current price.
        cost_basis: Open quantity times average entry price.
        unrealized_pnl: Market value minus cost basis.
        total_pnl: Realized plus unrealized PnL.
        unrealized_pnl_percentage: Unrealized PnL relative to cost basis, in percent.
    """

    position: PortfolioPosition
    current_price: Decimal
    market_value: Decimal
    cost_basis: Decimal
    unrealized_pnl: Decimal
    total_pnl: Decimal
    unrealized_pnl_percentage: Decimal


def analytics_unrealized_pnl(avg_entry_price: Decimal, current_price: Decimal, quantity: Decimal) -> Decimal:
    """Return `(current_price - avg_entry_price) * quantity`."""

    return (current_price - avg_entry_price) * quantity


def analytics_total_pnl(
    realized_pnl: Decimal,
    avg_entry_price: Decimal,
    current_price: Decimal,
    quantity: Decimal,
) -> Decimal:
    """Return realized PnL plus unrealized PnL on the open quantity."""

    return realized_pnl + analytics_unrealized_pnl(avg_entry_price, current_price, quantity)


def analytics_pnl_percentage(pnl: Decimal, cost_basis: Decimal) -> Decimal:
    """Return PnL as a percentage of cost basis, zero for an empty cost basis.

    Args:
        pnl: Profit or loss value.
        cost_basis: Reference cost basis.

    Returns:
        Decimal: `pnl / cost_basis * 100`, or zero when cost basis is zero.
    """

    if cost_basis == _ZERO:
        return _ZERO
    return (pnl / cost_basis) * _HUNDRED


def analytics_position_valuation(position: PortfolioPosition, current_price: Decimal) -> PositionValuation:
    """Value one projected position at a current market price.

    Args:
        position: Projected position.
        current_price: Market price in the position quote currency.

    Returns:
        PositionValuation: Market value, cost basis and PnL breakdown.

    Raises:
        ValueError: Raised when current_price is negative.
    """

    if current_price < _ZERO:
        raise ValueError("current_price must not be negative")

    cost_basis = position.quantity_total * position.avg_entry_price
    unrealized_pnl = analytics_unrealized_pnl(position.avg_entry_price, current_price, position.quantity_total)
    return PositionValuation(
        position=position,
        current_price=current_price,
        market_value=position.quantity_total * current_price,
        cost_basis=cost_basis,
        unrealized_pnl=unrealized_pnl,
        total_pnl=position.realized_pnl + unrealized_pnl,
        unrealized_pnl_percentage=analytics_pnl_percentage(unrealized_pnl, cost_basis),
    )


def analytics_serialize_valuation(valuation: PositionValuation) -> dict[str, str]:
    """Serialize one valuation to a JSON-safe payload.

    Args:
        valuation: Position valuation.

    Returns:
        dict[str, str]: Position fields and valuation breakdown with decimals rendered as strings.
    """

    return {
        "portfolio_id": valuation.position.portfolio_id,
        "asset_id": valuation.position.asset_id,
        "quantity_total": str(valuation.position.quantity_total),
        "avg_entry_price": str(valuation.position.avg_entry_price),
        "realized_pnl": str(valuation.position.realized_pnl),
        "current_price": str(valuation.current_price),
        "market_value": str(valuation.market_value),
        "cost_basis": str(valuation.cost_basis),
        "unrealized_pnl": str(valuation.unrealized_pnl),
        "total_pnl": str(valuation.total_pnl),
        "unrealized_pnl_percentage": str(valuation.unrealized_pnl_percentage),
    }


__all__ = [
    "PositionValuation",
    "analytics_pnl_percentage",
    "analytics_position_valuation",
    "analytics_serialize_valuation",
    "analytics_total_pnl",
    "analytics_unrealized_pnl",
]
