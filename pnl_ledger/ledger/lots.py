"""Open-lot ledgers for one (portfolio, asset) pair.

Two ledger variants share one consumption contract:

* `DiscreteLotLedger` keeps every acquisition as its own lot in a single
  double-ended sequence. Oldest-first consumption drains the head and
  newest-first consumption drains the tail of the same structure.
* `AveragedLedger` collapses all acquisitions into one synthetic lot whose unit
  cost is the running quantity-weighted average.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
import logging

from pnl_ledger.domain import DEGENERATE_AVERAGE_CODE, InsufficientLotsError, LotConsumption, OpenLotResult


logger = logging.getLogger(__name__)

_ZERO = Decimal("0")

LEDGER_STATE_FLAT = "flat"
LEDGER_STATE_OPEN = "open"


class ConsumptionOrder(str, Enum):
    """Lot iteration order used by a disposal."""

    OLDEST_FIRST = "oldest_first"
    NEWEST_FIRST = "newest_first"
    AVERAGED = "averaged"


@dataclass
class Lot:
    """Mutable open lot owned exclusively by one ledger."""

    lot_sequence: int
    opened_by: str
    remaining_quantity: Decimal
    unit_cost: Decimal


@dataclass(frozen=True)
class LotConsumptionResult:
    """Outcome of one ledger consumption.

    Attributes:
        consumed_quantity: Total quantity removed from the ledger.
        cost_basis_total: Sum of unit cost times quantity over consumed slices.
        unit_cost: Weighted average unit cost of exactly the consumed quantity.
        consumptions: Per-lot consumed slices in consumption order.
    """

    consumed_quantity: Decimal
    cost_basis_total: Decimal
    unit_cost: Decimal
    consumptions: tuple[LotConsumption, ...]


def ledger_safe_unit_cost(total_cost: Decimal, quantity: Decimal) -> Decimal:
    """Divide total cost by quantity, returning zero for an empty quantity.

    Args:
        total_cost: Aggregate cost value.
        quantity: Aggregate quantity value.

    Returns:
        Decimal: Unit cost, or zero when quantity is zero.
    """

    if quantity == _ZERO:
        if total_cost != _ZERO:
            logger.debug(
                "average cost requested for zero quantity",
                extra={"event": "ledger_degenerate_average", "error_code": DEGENERATE_AVERAGE_CODE},
            )
        return _ZERO
    return total_cost / quantity


class DiscreteLotLedger:
    """Ordered collection of discrete open lots for one (portfolio, asset) pair."""

    def __init__(self) -> None:
        self._lots: deque[Lot] = deque()
        self._total_quantity = _ZERO
        self._next_sequence = 0

    def ledger_add_lot(self, quantity: Decimal, unit_cost: Decimal, opened_by: str) -> None:
        """Append a new lot at the end of acquisition order.

        Args:
            quantity: Validated positive lot quantity.
            unit_cost: Validated non-negative unit cost.
            opened_by: Reference of the acquiring transaction.
        """

        self._lots.append(
            Lot(
                lot_sequence=self._next_sequence,
                opened_by=opened_by,
                remaining_quantity=quantity,
                unit_cost=unit_cost,
            )
        )
        self._next_sequence += 1
        self._total_quantity += quantity

    def ledger_total_quantity(self) -> Decimal:
        """Return open quantity across all lots.

        Returns:
            Decimal: Incrementally maintained open quantity.
        """

        return self._total_quantity

    def ledger_total_cost(self) -> Decimal:
        """Return cost basis of open quantity.

        Returns:
            Decimal: Sum of remaining quantity times unit cost per lot.
        """

        return sum((lot.remaining_quantity * lot.unit_cost for lot in self._lots), _ZERO)

    def ledger_average_unit_cost(self) -> Decimal:
        """Return weighted average unit cost of open quantity.

        Returns:
            Decimal: Average unit cost, zero when flat.
        """

        return ledger_safe_unit_cost(self.ledger_total_cost(), self._total_quantity)

    def ledger_state(self) -> str:
        """Return `flat` when no lot is open, `open` otherwise."""

        return LEDGER_STATE_FLAT if not self._lots else LEDGER_STATE_OPEN

    def ledger_consume(self, quantity: Decimal, order: ConsumptionOrder) -> LotConsumptionResult:
        """Remove quantity from lots in the requested order.

        Lots are drained front-to-back in iteration order; a lot larger than the
        remaining disposal amount is partially drained and stays in place. Lots
        reaching exactly zero are removed.

        Args:
            quantity: Positive disposal quantity.
            order: `OLDEST_FIRST` or `NEWEST_FIRST`.

        Returns:
            LotConsumptionResult: Consumed slices with their weighted cost basis.

        Raises:
            InsufficientLotsError: Raised before any mutation when open quantity is short.
            ValueError: Raised when order is not a discrete-lot order.
        """

        if order not in (ConsumptionOrder.OLDEST_FIRST, ConsumptionOrder.NEWEST_FIRST):
            raise ValueError(f"unsupported consumption order for discrete lots={order}")
        if quantity > self._total_quantity:
            raise InsufficientLotsError(requested_quantity=quantity, available_quantity=self._total_quantity)

        newest_first = order == ConsumptionOrder.NEWEST_FIRST
        quantity_to_consume = quantity
        cost_basis_total = _ZERO
        consumptions: list[LotConsumption] = []

        while quantity_to_consume > _ZERO:
            current_lot = self._lots[-1] if newest_first else self._lots[0]
            take_quantity = min(quantity_to_consume, current_lot.remaining_quantity)

            consumptions.append(
                LotConsumption(
                    lot_sequence=current_lot.lot_sequence,
                    opened_by=current_lot.opened_by,
                    quantity=take_quantity,
                    unit_cost=current_lot.unit_cost,
                )
            )
            cost_basis_total += take_quantity * current_lot.unit_cost
            current_lot.remaining_quantity -= take_quantity
            quantity_to_consume -= take_quantity

            if current_lot.remaining_quantity == _ZERO:
                if newest_first:
                    self._lots.pop()
                else:
                    self._lots.popleft()

        self._total_quantity -= quantity
        return LotConsumptionResult(
            consumed_quantity=quantity,
            cost_basis_total=cost_basis_total,
            unit_cost=ledger_safe_unit_cost(cost_basis_total, quantity),
            consumptions=tuple(consumptions),
        )

    def ledger_open_lots(self) -> tuple[OpenLotResult, ...]:
        """Return immutable views of the open lots."""

        return tuple(
            OpenLotResult(
                lot_sequence=lot.lot_sequence,
                opened_by=lot.opened_by,
                remaining_quantity=lot.remaining_quantity,
                unit_cost=lot.unit_cost,
            )
            for lot in self._lots
        )


class AveragedLedger:
    """Single synthetic lot tracking the running weighted-average cost."""

    _SYNTHETIC_LOT_SEQUENCE = 0
    _SYNTHETIC_LOT_REF = "averaged"

    def __init__(self) -> None:
        self._quantity = _ZERO
        self._unit_cost = _ZERO

    def ledger_add_lot(self, quantity: Decimal, unit_cost: Decimal, opened_by: str) -> None:
        """Fold an acquisition into the synthetic lot.

        Args:
            quantity: Validated positive lot quantity.
            unit_cost: Validated non-negative unit cost.
            opened_by: Reference of the acquiring transaction, unused by the averaged variant.
        """

        _ = opened_by
        new_quantity = self._quantity + quantity
        self._unit_cost = ledger_safe_unit_cost(
            (self._quantity * self._unit_cost) + (quantity * unit_cost),
            new_quantity,
        )
        self._quantity = new_quantity

    def ledger_total_quantity(self) -> Decimal:
        """Return open quantity of the synthetic lot."""

        return self._quantity

    def ledger_total_cost(self) -> Decimal:
        """Return cost basis of the synthetic lot."""

        return self._quantity * self._unit_cost

    def ledger_average_unit_cost(self) -> Decimal:
        """Return running average unit cost.

        Returns:
            Decimal: Average unit cost, zero when flat.
        """

        if self._quantity == _ZERO:
            return _ZERO
        return self._unit_cost

    def ledger_state(self) -> str:
        """Return `flat` when quantity is zero, `open` otherwise."""

        return LEDGER_STATE_FLAT if self._quantity == _ZERO else LEDGER_STATE_OPEN

    def ledger_consume(self, quantity: Decimal, order: ConsumptionOrder) -> LotConsumptionResult:
        """Decrement the synthetic lot, leaving its unit cost unchanged.

        Args:
            quantity: Positive disposal quantity.
            order: Must be `AVERAGED`.

        Returns:
            LotConsumptionResult: Single-slice consumption at the running average cost.

        Raises:
            InsufficientLotsError: Raised before any mutation when open quantity is short.
            ValueError: Raised when order is not `AVERAGED`.
        """

        if order != ConsumptionOrder.AVERAGED:
            raise ValueError(f"unsupported consumption order for averaged ledger={order}")
        if quantity > self._quantity:
            raise InsufficientLotsError(requested_quantity=quantity, available_quantity=self._quantity)

        self._quantity -= quantity
        return LotConsumptionResult(
            consumed_quantity=quantity,
            cost_basis_total=quantity * self._unit_cost,
            unit_cost=self._unit_cost,
            consumptions=(
                LotConsumption(
                    lot_sequence=self._SYNTHETIC_LOT_SEQUENCE,
                    opened_by=self._SYNTHETIC_LOT_REF,
                    quantity=quantity,
                    unit_cost=self._unit_cost,
                ),
            ),
        )

    def ledger_open_lots(self) -> tuple[OpenLotResult, ...]:
        """Return immutable views of the open lots."""

        if self._quantity == _ZERO:
            return ()
        return (
            OpenLotResult(
                lot_sequence=self._SYNTHETIC_LOT_SEQUENCE,
                opened_by=self._SYNTHETIC_LOT_REF,
                remaining_quantity=self._quantity,
                unit_cost=self._unit_cost,
            ),
        )


__all__ = [
    "AveragedLedger",
    "ConsumptionOrder",
    "DiscreteLotLedger",
    "LEDGER_STATE_FLAT",
    "LEDGER_STATE_OPEN",
    "Lot",
    "LotConsumptionResult",
    "ledger_safe_unit_cost",
]
