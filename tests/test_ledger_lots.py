"""Regression tests for discrete and averaged lot ledgers."""

from __future__ import annotations

from decimal import Decimal

import pytest

from pnl_ledger.domain import InsufficientLotsError
from pnl_ledger.ledger.lots import (
    LEDGER_STATE_FLAT,
    LEDGER_STATE_OPEN,
    AveragedLedger,
    ConsumptionOrder,
    DiscreteLotLedger,
    ledger_safe_unit_cost,
)


def _build_discrete_ledger() -> DiscreteLotLedger:
    ledger = DiscreteLotLedger()
    ledger.ledger_add_lot(quantity=Decimal("2"), unit_cost=Decimal("100"), opened_by="tx-1")
    ledger.ledger_add_lot(quantity=Decimal("3"), unit_cost=Decimal("200"), opened_by="tx-2")
    return ledger


def test_ledger_discrete_oldest_first_partially_drains_head_lot() -> None:
    """Consume oldest lots first and keep a partially drained lot at the head.

    Returns:
        None: Assertions validate consumed slices and remaining lots.

    Raises:
        AssertionError: Raised when consumption order or remaining quantities deviate.
    """

    ledger = _build_discrete_ledger()

    result = ledger.ledger_consume(Decimal("3"), ConsumptionOrder.OLDEST_FIRST)

    assert [(item.opened_by, item.quantity) for item in result.consumptions] == [
        ("tx-1", Decimal("2")),
        ("tx-2", Decimal("1")),
    ]
    assert result.cost_basis_total == Decimal("400")
    assert result.unit_cost == Decimal("400") / Decimal("3")
    assert ledger.ledger_total_quantity() == Decimal("2")
    open_lots = ledger.ledger_open_lots()
    assert len(open_lots) == 1
    assert open_lots[0].opened_by == "tx-2"
    assert open_lots[0].remaining_quantity == Decimal("2")


def test_ledger_discrete_newest_first_reads_same_sequence_from_tail() -> None:
    """Consume newest lots first from the tail of the same lot sequence.

    Returns:
        None: Assertions validate tail consumption.

    Raises:
        AssertionError: Raised when newest-first consumption touches older lots early.
    """

    ledger = _build_discrete_ledger()

    result = ledger.ledger_consume(Decimal("4"), ConsumptionOrder.NEWEST_FIRST)

    assert [(item.opened_by, item.quantity) for item in result.consumptions] == [
        ("tx-2", Decimal("3")),
        ("tx-1", Decimal("1")),
    ]
    assert result.cost_basis_total == Decimal("700")
    assert [lot.opened_by for lot in ledger.ledger_open_lots()] == ["tx-1"]
    assert ledger.ledger_average_unit_cost() == Decimal("100")


def test_ledger_discrete_insufficient_lots_leaves_state_untouched() -> None:
    """Reject over-disposal before any lot is mutated.

    Returns:
        None: Assertions validate error details and unchanged lots.

    Raises:
        AssertionError: Raised when a failed consume mutates the ledger.
    """

    ledger = _build_discrete_ledger()
    lots_before = ledger.ledger_open_lots()

    with pytest.raises(InsufficientLotsError) as error_info:
        ledger.ledger_consume(Decimal("6"), ConsumptionOrder.OLDEST_FIRST)

    assert error_info.value.error_code == "INSUFFICIENT_LOTS"
    assert error_info.value.requested_quantity == Decimal("6")
    assert error_info.value.available_quantity == Decimal("5")
    assert ledger.ledger_open_lots() == lots_before
    assert ledger.ledger_total_quantity() == Decimal("5")


def test_ledger_discrete_full_drain_removes_lots_and_reports_flat() -> None:
    """Remove lots reaching exactly zero and report a flat ledger.

    Returns:
        None: Assertions validate flat-state reporting.

    Raises:
        AssertionError: Raised when drained lots linger or average cost is not zero.
    """

    ledger = _build_discrete_ledger()
    assert ledger.ledger_state() == LEDGER_STATE_OPEN

    ledger.ledger_consume(Decimal("5"), ConsumptionOrder.OLDEST_FIRST)

    assert ledger.ledger_state() == LEDGER_STATE_FLAT
    assert ledger.ledger_open_lots() == ()
    assert ledger.ledger_total_quantity() == Decimal("0")
    assert ledger.ledger_average_unit_cost() == Decimal("0")


def test_ledger_discrete_rejects_averaged_order() -> None:
    """Reject the averaged order on a discrete-lot ledger.

    Returns:
        None: Assertions validate order contract enforcement.

    Raises:
        AssertionError: Raised when unsupported order is accepted.
    """

    ledger = _build_discrete_ledger()

    with pytest.raises(ValueError):
        ledger.ledger_consume(Decimal("1"), ConsumptionOrder.AVERAGED)


def test_ledger_averaged_recomputes_running_average_on_acquisition() -> None:
    """Apply the weighted running-average update on each acquisition.

    Returns:
        None: Assertions validate synthetic lot cost.

    Raises:
        AssertionError: Raised when the running average deviates.
    """

    ledger = AveragedLedger()
    ledger.ledger_add_lot(quantity=Decimal("1"), unit_cost=Decimal("100"), opened_by="tx-1")
    ledger.ledger_add_lot(quantity=Decimal("3"), unit_cost=Decimal("200"), opened_by="tx-2")

    assert ledger.ledger_total_quantity() == Decimal("4")
    assert ledger.ledger_average_unit_cost() == Decimal("175")
    assert len(ledger.ledger_open_lots()) == 1


def test_ledger_averaged_disposal_keeps_unit_cost() -> None:
    """Decrement the synthetic lot without changing its cost basis.

    Returns:
        None: Assertions validate averaged consumption output.

    Raises:
        AssertionError: Raised when disposal changes average cost.
    """

    ledger = AveragedLedger()
    ledger.ledger_add_lot(quantity=Decimal("1"), unit_cost=Decimal("100"), opened_by="tx-1")
    ledger.ledger_add_lot(quantity=Decimal("1"), unit_cost=Decimal("200"), opened_by="tx-2")

    result = ledger.ledger_consume(Decimal("1.5"), ConsumptionOrder.AVERAGED)

    assert result.unit_cost == Decimal("150")
    assert result.cost_basis_total == Decimal("225")
    assert len(result.consumptions) == 1
    assert ledger.ledger_total_quantity() == Decimal("0.5")
    assert ledger.ledger_average_unit_cost() == Decimal("150")

    with pytest.raises(InsufficientLotsError):
        ledger.ledger_consume(Decimal("1"), ConsumptionOrder.AVERAGED)
    assert ledger.ledger_total_quantity() == Decimal("0.5")


def test_ledger_averaged_drained_ledger_restarts_average_from_next_acquisition() -> None:
    """Report zero cost when drained and restart averaging on the next acquisition.

    Returns:
        None: Assertions validate flat reporting and re-entry cost.

    Raises:
        AssertionError: Raised when stale cost leaks across a flat period.
    """

    ledger = AveragedLedger()
    ledger.ledger_add_lot(quantity=Decimal("2"), unit_cost=Decimal("50"), opened_by="tx-1")
    ledger.ledger_consume(Decimal("2"), ConsumptionOrder.AVERAGED)

    assert ledger.ledger_state() == LEDGER_STATE_FLAT
    assert ledger.ledger_average_unit_cost() == Decimal("0")
    assert ledger.ledger_open_lots() == ()

    ledger.ledger_add_lot(quantity=Decimal("1"), unit_cost=Decimal("80"), opened_by="tx-3")
    assert ledger.ledger_average_unit_cost() == Decimal("80")


def test_ledger_safe_unit_cost_returns_zero_for_zero_quantity() -> None:
    """Guard average division against a zero quantity.

    Returns:
        None: Assertions validate zero-guard behavior.

    Raises:
        AssertionError: Raised when zero quantity divides.
    """

    assert ledger_safe_unit_cost(Decimal("10"), Decimal("0")) == Decimal("0")
    assert ledger_safe_unit_cost(Decimal("10"), Decimal("4")) == Decimal("2.5")
