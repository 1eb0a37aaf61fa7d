"""Daily portfolio value history built by replaying transactions per day."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal
from typing import Callable, Mapping

from pnl_ledger.domain import PnLMethod, Transaction
from pnl_ledger.ledger import ledger_compute_batch

from .metrics import analytics_pnl_percentage


_ZERO = Decimal("0")

PriceLookup = Callable[[date, list[str]], Mapping[str, Decimal]]


@dataclass(frozen=True)
class HistoricalDataPoint:
    """Portfolio valuation at the end of one UTC day.

    Attributes:
        day: UTC calendar day.
        total_value: Open quantity valued at the day's prices.
        total_cost: Open quantity valued at average entry price.
        total_pnl: Total value minus total cost.
        roi: Total PnL relative to total cost, in percent.
    """

    day: date
    total_value: Decimal
    total_cost: Decimal
    total_pnl: Decimal
    roi: Decimal


def analytics_build_portfolio_history(
    transactions: list[Transaction],
    days: int,
    method: PnLMethod | str,
    include_fees: bool,
    price_lookup: PriceLookup,
    as_of: date,
) -> list[HistoricalDataPoint]:
    """Build one valuation point per day for the `days` days ending at `as_of`.

    Each day replays every transaction stamped before the end of that UTC day
    through the PnL engine, then values the open positions with prices returned
    by `price_lookup`. Assets without a price are valued at zero.

    Args:
        transactions: Mixed-pair transactions.
        days: Number of days in the history window.
        method: PnL method applied to every pair.
        include_fees: Whether fees adjust cost basis.
        price_lookup: Callable returning prices keyed by asset id for one day.
        as_of: Last day of the window.

    Returns:
        list[HistoricalDataPoint]: Points ordered from oldest to newest day.

    Raises:
        ValueError: Raised when days is not positive.
    """

    if days < 1:
        raise ValueError("days must be at least 1")

    start_day = as_of - timedelta(days=days - 1)
    history: list[HistoricalDataPoint] = []
    for day_offset in range(days):
        day = start_day + timedelta(days=day_offset)
        history.append(
            _analytics_build_day_point(
                transactions=transactions,
                day=day,
                method=method,
                include_fees=include_fees,
                price_lookup=price_lookup,
            )
        )
    return history


def _analytics_build_day_point(
    transactions: list[Transaction],
    day: date,
    method: PnLMethod | str,
    include_fees: bool,
    price_lookup: PriceLookup,
) -> HistoricalDataPoint:
    day_end_utc = datetime.combine(day + timedelta(days=1), time.min, tzinfo=timezone.utc)
    transactions_through_day = [
        transaction
        for transaction in transactions
        if isinstance(transaction.timestamp, datetime) and transaction.timestamp_utc < day_end_utc
    ]

    open_positions = [
        result.position
        for result in ledger_compute_batch(transactions_through_day, method, include_fees).values()
        if result.position.quantity_total > _ZERO
    ]
    if not open_positions:
        return HistoricalDataPoint(day=day, total_value=_ZERO, total_cost=_ZERO, total_pnl=_ZERO, roi=_ZERO)

    asset_ids = sorted({position.asset_id for position in open_positions})
    prices = price_lookup(day, asset_ids)

    total_value = sum(
        (position.quantity_total * prices.get(position.asset_id, _ZERO) for position in open_positions),
        _ZERO,
    )
    total_cost = sum(
        (position.quantity_total * position.avg_entry_price for position in open_positions),
        _ZERO,
    )
    total_pnl = total_value - total_cost
    return HistoricalDataPoint(
        day=day,
        total_value=total_value,
        total_cost=total_cost,
        total_pnl=total_pnl,
        roi=analytics_pnl_percentage(total_pnl, total_cost),
    )


__all__ = ["HistoricalDataPoint", "PriceLookup", "analytics_build_portfolio_history"]
