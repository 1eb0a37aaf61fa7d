"""Typed interfaces for ledger-layer computations."""

from decimal import Decimal
from typing import Protocol

from pnl_ledger.domain import OpenLotResult

from .lots import ConsumptionOrder, LotConsumptionResult


class LotLedgerPort(Protocol):
    """Port definition shared by discrete and averaged lot ledgers."""

    def ledger_add_lot(self, quantity: Decimal, unit_cost: Decimal, opened_by: str) -> None:
        """Record one acquisition.

        Args:
            quantity: Validated positive lot quantity.
            unit_cost: Validated non-negative unit cost.
            opened_by: Reference of the acquiring transaction.
        """

    def ledger_total_quantity(self) -> Decimal:
        """Return the open quantity across all lots."""

    def ledger_total_cost(self) -> Decimal:
        """Return the open cost basis across all lots."""

    def ledger_average_unit_cost(self) -> Decimal:
        """Return the weighted average unit cost, zero when flat."""

    def ledger_state(self) -> str:
        """Return `flat` when the ledger is empty, `open` otherwise."""

    def ledger_consume(self, quantity: Decimal, order: ConsumptionOrder) -> LotConsumptionResult:
        """Remove quantity from lots in policy order.

        Args:
            quantity: Positive disposal quantity.
            order: Lot iteration order.

        Returns:
            LotConsumptionResult: Consumed slices with their weighted cost basis.

        Raises:
            InsufficientLotsError: Raised when open quantity is below the requested quantity.
        """

    def ledger_open_lots(self) -> tuple[OpenLotResult, ...]:
        """Return read-only views of the remaining lots."""
