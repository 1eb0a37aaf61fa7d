"""Projection of final replay state into the persisted position shape."""

from __future__ import annotations

from decimal import Decimal

from pnl_ledger.domain import PnLResult, PortfolioPosition


def ledger_project_position(portfolio_id: str, asset_id: str, final_result: PnLResult) -> PortfolioPosition:
    """Map a final PnL snapshot into a portfolio position record.

    Args:
        portfolio_id: Portfolio identifier.
        asset_id: Asset identifier.
        final_result: Last snapshot produced by a replay.

    Returns:
        PortfolioPosition: Position with a zero average entry price when flat.
    """

    avg_entry_price = final_result.avg_entry_price
    if final_result.quantity == Decimal("0") or avg_entry_price.is_nan():
        avg_entry_price = Decimal("0")

    return PortfolioPosition(
        portfolio_id=portfolio_id,
        asset_id=asset_id,
        quantity_total=final_result.quantity,
        avg_entry_price=avg_entry_price,
        realized_pnl=final_result.realized_pnl,
    )


def ledger_serialize_position(position: PortfolioPosition) -> dict[str, str]:
    """Serialize one position to a JSON-safe payload.

    Args:
        position: Projected position.

    Returns:
        dict[str, str]: Payload with decimals rendered as strings.
    """

    return {
        "portfolio_id": position.portfolio_id,
        "asset_id": position.asset_id,
        "quantity_total": str(position.quantity_total),
        "avg_entry_price": str(position.avg_entry_price),
        "realized_pnl": str(position.realized_pnl),
    }


__all__ = ["ledger_project_position", "ledger_serialize_position"]
