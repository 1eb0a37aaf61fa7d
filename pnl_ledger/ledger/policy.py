"""Accounting policies mapping a PnL method to lot consumption and PnL formulas."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Callable

from pnl_ledger.domain import PnLMethod

from .interfaces import LotLedgerPort
from .lots import AveragedLedger, ConsumptionOrder, DiscreteLotLedger, LotConsumptionResult


_ZERO = Decimal("0")


@dataclass(frozen=True)
class AccountingPolicy:
    """Stateless cost-basis policy for one PnL method.

    Attributes:
        method: PnL method implemented by this policy.
        consumption_order: Lot iteration order used on disposal.
        ledger_factory: Builder of an empty ledger variant suited to the method.
    """

    method: PnLMethod
    consumption_order: ConsumptionOrder
    ledger_factory: Callable[[], LotLedgerPort]

    def policy_create_ledger(self) -> LotLedgerPort:
        return self.ledger_factory()


_POLICIES: dict[PnLMethod, AccountingPolicy] = {
    PnLMethod.FIFO: AccountingPolicy(
        method=PnLMethod.FIFO,
        consumption_order=ConsumptionOrder.OLDEST_FIRST,
        ledger_factory=DiscreteLotLedger,
    ),
    PnLMethod.LIFO: AccountingPolicy(
        method=PnLMethod.LIFO,
        consumption_order=ConsumptionOrder.NEWEST_FIRST,
        ledger_factory=DiscreteLotLedger,
    ),
    PnLMethod.AVG: AccountingPolicy(
        method=PnLMethod.AVG,
        consumption_order=ConsumptionOrder.AVERAGED,
        ledger_factory=AveragedLedger,
    ),
}


def ledger_policy_for_method(method: PnLMethod | str) -> AccountingPolicy:
    """Resolve the accounting policy for one PnL method.

    Args:
        method: PnL method enum member or its string value.

    Returns:
        AccountingPolicy: Policy bound to the method.

    Raises:
        ValueError: Raised when method is unsupported.
    """

    try:
        resolved_method = PnLMethod(method.strip().lower() if isinstance(method, str) else method)
    except ValueError as error:
        raise ValueError(f"unsupported pnl method={method}") from error
    return _POLICIES[resolved_method]


def ledger_acquisition_unit_cost(
    price: Decimal,
    quantity: Decimal,
    fee: Decimal | None,
    include_fees: bool,
) -> Decimal:
    """Compute the effective unit cost of an acquisition.

    Fees increase the unit cost when included: `(price * quantity + fee) / quantity`.

    Args:
        price: Acquisition unit price.
        quantity: Validated positive acquisition quantity.
        fee: Optional acquisition fee.
        include_fees: Whether fees are part of cost basis.

    Returns:
        Decimal: Effective unit cost for the new lot.
    """

    applied_fee = (fee or _ZERO) if include_fees else _ZERO
    if applied_fee == _ZERO:
        return price
    return ((price * quantity) + applied_fee) / quantity


def ledger_disposal_realized_pnl(
    price: Decimal,
    consumption: LotConsumptionResult,
    fee: Decimal | None,
    include_fees: bool,
) -> Decimal:
    """Compute realized PnL of one disposal from its consumed lot slices.

    Args:
        price: Disposal unit price.
        consumption: Lot slices consumed by the disposal.
        fee: Optional disposal fee.
        include_fees: Whether fees reduce realized PnL.

    Returns:
        Decimal: `sum((price - unit_cost) * quantity) - fee` over consumed slices.
    """

    gross_realized = sum(
        ((price - consumed.unit_cost) * consumed.quantity for consumed in consumption.consumptions),
        _ZERO,
    )
    applied_fee = (fee or _ZERO) if include_fees else _ZERO
    return gross_realized - applied_fee


__all__ = [
    "AccountingPolicy",
    "ledger_acquisition_unit_cost",
    "ledger_disposal_realized_pnl",
    "ledger_policy_for_method",
]
