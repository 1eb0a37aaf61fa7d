"""Regression tests for position projection and serialization."""

from __future__ import annotations

from decimal import Decimal

from pnl_ledger.domain import PnLResult
from pnl_ledger.ledger.position_projector import ledger_project_position, ledger_serialize_position


def test_ledger_project_position_copies_final_snapshot_values() -> None:
    """Map final snapshot values onto the persisted position shape.

    Returns:
        None: Assertions validate projected fields.

    Raises:
        AssertionError: Raised when projection drops or alters values.
    """

    final_result = PnLResult(
        realized_pnl=Decimal("-12.5"),
        quantity=Decimal("3"),
        avg_entry_price=Decimal("41.25"),
    )

    position = ledger_project_position("portfolio-1", "eth", final_result)

    assert position.portfolio_id == "portfolio-1"
    assert position.asset_id == "eth"
    assert position.quantity_total == Decimal("3")
    assert position.avg_entry_price == Decimal("41.25")
    assert position.realized_pnl == Decimal("-12.5")


def test_ledger_project_position_reports_zero_price_when_flat() -> None:
    """Report zero average entry price for a zero-quantity snapshot.

    Returns:
        None: Assertions validate zero-quantity guard.

    Raises:
        AssertionError: Raised when flat positions carry a stale or NaN price.
    """

    stale_price = ledger_project_position(
        "portfolio-1",
        "eth",
        PnLResult(realized_pnl=Decimal("5"), quantity=Decimal("0"), avg_entry_price=Decimal("99")),
    )
    nan_price = ledger_project_position(
        "portfolio-1",
        "eth",
        PnLResult(realized_pnl=Decimal("5"), quantity=Decimal("0"), avg_entry_price=Decimal("NaN")),
    )

    assert stale_price.avg_entry_price == Decimal("0")
    assert nan_price.avg_entry_price == Decimal("0")


def test_ledger_serialize_position_renders_decimals_as_strings() -> None:
    """Serialize decimals as strings to keep JSON payloads exact.

    Returns:
        None: Assertions validate serialized payload.

    Raises:
        AssertionError: Raised when serialization loses precision.
    """

    position = ledger_project_position(
        "portfolio-1",
        "eth",
        PnLResult(realized_pnl=Decimal("0.1"), quantity=Decimal("0.30"), avg_entry_price=Decimal("2000.05")),
    )

    assert ledger_serialize_position(position) == {
        "portfolio_id": "portfolio-1",
        "asset_id": "eth",
        "quantity_total": "0.30",
        "avg_entry_price": "2000.05",
        "realized_pnl": "0.1",
    }
