"""Deterministic replay of a transaction stream through one lot ledger."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
import logging

from pnl_ledger.domain import (
    INVALID_TRANSACTION_CODE,
    InsufficientLotsError,
    InvalidTransactionError,
    OpenLotResult,
    PnLMethod,
    PnLResult,
    PortfolioPosition,
    Transaction,
    TransactionError,
    TransactionType,
    domain_transaction_ref,
)

from .interfaces import LotLedgerPort
from .policy import (
    AccountingPolicy,
    ledger_acquisition_unit_cost,
    ledger_disposal_realized_pnl,
    ledger_policy_for_method,
)
from .position_projector import ledger_project_position


logger = logging.getLogger(__name__)

_ZERO = Decimal("0")
_MAX_ADJUSTED_EXPONENT = 100
_PRICED_TRADE_TYPES = frozenset({TransactionType.BUY, TransactionType.SELL})


@dataclass(frozen=True)
class PnLComputationRequest:
    """Input contract for one (portfolio, asset) PnL replay.

    Attributes:
        portfolio_id: Portfolio identifier shared by every transaction.
        asset_id: Asset identifier shared by every transaction.
        method: PnL method selecting the accounting policy.
        include_fees: Whether fees adjust cost basis and realized PnL.
        transactions: Ordered or unordered transaction inputs.
    """

    portfolio_id: str
    asset_id: str
    method: PnLMethod
    include_fees: bool
    transactions: list[Transaction]


@dataclass(frozen=True)
class PnLComputationResult:
    """Output payload for one (portfolio, asset) PnL replay.

    Attributes:
        position: Projected position for persistence.
        snapshots: One snapshot per replayed transaction, in replay order.
        errors: Transaction-level errors collected during validation and replay.
        open_lots: Lots remaining open after replay.
        method: PnL method used for the replay.
        include_fees: Fee inclusion flag used for the replay.
    """

    position: PortfolioPosition
    snapshots: tuple[PnLResult, ...]
    errors: tuple[TransactionError, ...]
    open_lots: tuple[OpenLotResult, ...]
    method: PnLMethod
    include_fees: bool

    @property
    def final_result(self) -> PnLResult:
        """Return the last snapshot, or an empty result when nothing was replayed."""

        if not self.snapshots:
            return PnLResult(realized_pnl=_ZERO, quantity=_ZERO, avg_entry_price=_ZERO)
        return self.snapshots[-1]


@dataclass
class _ReplayState:
    """Mutable fold state threaded through one replay."""

    ledger: LotLedgerPort
    realized_pnl: Decimal = _ZERO
    snapshots: list[PnLResult] = field(default_factory=list)
    errors: list[TransactionError] = field(default_factory=list)


def ledger_validate_transaction(transaction: Transaction) -> None:
    """Validate transaction values before it may enter a ledger.

    Args:
        transaction: Transaction input.

    Raises:
        InvalidTransactionError: Raised when identifiers, type, quantity, price, fee or timestamp is invalid.
    """

    for field_name, identifier in (("portfolio_id", transaction.portfolio_id), ("asset_id", transaction.asset_id)):
        if not isinstance(identifier, str) or not identifier.strip():
            raise InvalidTransactionError(f"{field_name} must not be blank")

    try:
        tx_type = TransactionType(transaction.tx_type)
    except ValueError as error:
        raise InvalidTransactionError(f"unsupported transaction type={transaction.tx_type}") from error

    if not isinstance(transaction.timestamp, datetime):
        raise InvalidTransactionError("timestamp must be a datetime")

    quantity = _validate_decimal_value("quantity", transaction.quantity)
    price = _validate_decimal_value("price", transaction.price)
    if quantity <= _ZERO:
        raise InvalidTransactionError(f"quantity must be positive, got {quantity}")
    if price < _ZERO:
        raise InvalidTransactionError(f"price must not be negative, got {price}")
    if tx_type in _PRICED_TRADE_TYPES and price == _ZERO:
        raise InvalidTransactionError(f"price must be positive for {tx_type.value} transactions")
    if transaction.fee is not None and _validate_decimal_value("fee", transaction.fee) < _ZERO:
        raise InvalidTransactionError(f"fee must not be negative, got {transaction.fee}")


def ledger_replay_transactions(request: PnLComputationRequest) -> PnLComputationResult:
    """Replay one pair's transactions and compute realized PnL and open position.

    Transactions are ordered by UTC timestamp with input order as tie-break.
    Invalid transactions never enter the ledger; disposals exceeding the open
    quantity are skipped. Both are reported as transaction errors and the
    replay continues.

    Args:
        request: PnL computation request.

    Returns:
        PnLComputationResult: Position, per-transaction snapshots, errors and open lots.

    Raises:
        ValueError: Raised when request identifiers are blank, the method is
            unsupported, or a transaction belongs to a different pair.
    """

    if request is None:
        raise ValueError("request must not be None")
    if not request.portfolio_id.strip():
        raise ValueError("request.portfolio_id must not be blank")
    if not request.asset_id.strip():
        raise ValueError("request.asset_id must not be blank")

    policy = ledger_policy_for_method(request.method)
    state = _ReplayState(ledger=policy.policy_create_ledger())

    accepted_transactions: list[tuple[int, Transaction]] = []
    for sequence_index, transaction in enumerate(request.transactions):
        if transaction.portfolio_id != request.portfolio_id or transaction.asset_id != request.asset_id:
            raise ValueError(
                f"transaction at index={sequence_index} belongs to "
                f"portfolio_id={transaction.portfolio_id} asset_id={transaction.asset_id}, "
                f"expected portfolio_id={request.portfolio_id} asset_id={request.asset_id}"
            )
        try:
            ledger_validate_transaction(transaction)
        except InvalidTransactionError as error:
            state.errors.append(
                TransactionError(
                    error_code=INVALID_TRANSACTION_CODE,
                    transaction_ref=domain_transaction_ref(transaction, sequence_index),
                    sequence_index=sequence_index,
                    message=str(error),
                )
            )
            continue
        accepted_transactions.append((sequence_index, transaction))

    ordered_transactions = sorted(
        accepted_transactions,
        key=lambda item: (item[1].timestamp_utc, item[0]),
    )
    for sequence_index, transaction in ordered_transactions:
        _replay_apply_transaction(
            state=state,
            policy=policy,
            transaction=transaction,
            sequence_index=sequence_index,
            include_fees=request.include_fees,
        )

    snapshots = tuple(state.snapshots)
    final_result = snapshots[-1] if snapshots else PnLResult(realized_pnl=_ZERO, quantity=_ZERO, avg_entry_price=_ZERO)

    logger.info(
        "pnl replay completed",
        extra={
            "event": "ledger_replay_completed",
            "portfolio_id": request.portfolio_id,
            "asset_id": request.asset_id,
            "pnl_method": policy.method.value,
            "transaction_count": len(request.transactions),
            "error_count": len(state.errors),
        },
    )

    return PnLComputationResult(
        position=ledger_project_position(
            portfolio_id=request.portfolio_id,
            asset_id=request.asset_id,
            final_result=final_result,
        ),
        snapshots=snapshots,
        errors=tuple(state.errors),
        open_lots=state.ledger.ledger_open_lots(),
        method=policy.method,
        include_fees=request.include_fees,
    )


def ledger_compute_pnl(
    transactions: list[Transaction],
    method: PnLMethod | str,
    include_fees: bool = True,
    portfolio_id: str | None = None,
    asset_id: str | None = None,
) -> tuple[PortfolioPosition, list[PnLResult], list[TransactionError]]:
    """Compute position, snapshots and errors for one (portfolio, asset) pair.

    Args:
        transactions: Transactions of one pair.
        method: PnL method or its string value.
        include_fees: Whether fees adjust cost basis and realized PnL.
        portfolio_id: Optional pair portfolio id; defaults to the first transaction's.
        asset_id: Optional pair asset id; defaults to the first transaction's.

    Returns:
        tuple[PortfolioPosition, list[PnLResult], list[TransactionError]]: Replay outputs.

    Raises:
        ValueError: Raised when the pair cannot be resolved or transactions mix pairs.
    """

    if portfolio_id is None or asset_id is None:
        if not transactions:
            raise ValueError("portfolio_id and asset_id are required when transactions are empty")
        portfolio_id = transactions[0].portfolio_id if portfolio_id is None else portfolio_id
        asset_id = transactions[0].asset_id if asset_id is None else asset_id

    result = ledger_replay_transactions(
        PnLComputationRequest(
            portfolio_id=portfolio_id,
            asset_id=asset_id,
            method=ledger_policy_for_method(method).method,
            include_fees=include_fees,
            transactions=list(transactions),
        )
    )
    return result.position, list(result.snapshots), list(result.errors)


def _replay_apply_transaction(
    state: _ReplayState,
    policy: AccountingPolicy,
    transaction: Transaction,
    sequence_index: int,
    include_fees: bool,
) -> None:
    """Apply one validated transaction to the fold state.

    Args:
        state: Mutable replay state.
        policy: Active accounting policy.
        transaction: Validated transaction.
        sequence_index: Input position of the transaction.
        include_fees: Whether fees adjust cost basis and realized PnL.
    """

    transaction_ref = domain_transaction_ref(transaction, sequence_index)
    previous_ledger_state = state.ledger.ledger_state()

    if transaction.is_acquisition:
        state.ledger.ledger_add_lot(
            quantity=transaction.quantity,
            unit_cost=ledger_acquisition_unit_cost(
                price=transaction.price,
                quantity=transaction.quantity,
                fee=transaction.fee,
                include_fees=include_fees,
            ),
            opened_by=transaction_ref,
        )
        realized_delta = _ZERO
        lot_consumptions = ()
    else:
        try:
            consumption = state.ledger.ledger_consume(transaction.quantity, policy.consumption_order)
        except InsufficientLotsError as error:
            logger.warning(
                "disposal skipped: %s",
                error,
                extra={
                    "event": "ledger_insufficient_lots",
                    "transaction_ref": transaction_ref,
                    "portfolio_id": transaction.portfolio_id,
                    "asset_id": transaction.asset_id,
                },
            )
            state.errors.append(
                TransactionError(
                    error_code=error.error_code,
                    transaction_ref=transaction_ref,
                    sequence_index=sequence_index,
                    message=str(error),
                )
            )
            state.snapshots.append(
                PnLResult(
                    realized_pnl=state.realized_pnl,
                    quantity=state.ledger.ledger_total_quantity(),
                    avg_entry_price=state.ledger.ledger_average_unit_cost(),
                    transaction_ref=transaction_ref,
                )
            )
            return

        # transfer_out moves cost basis out with the asset and realizes nothing
        if TransactionType(transaction.tx_type) == TransactionType.TRANSFER_OUT:
            realized_delta = _ZERO
        else:
            realized_delta = ledger_disposal_realized_pnl(
                price=transaction.price,
                consumption=consumption,
                fee=transaction.fee,
                include_fees=include_fees,
            )
        lot_consumptions = consumption.consumptions

    state.realized_pnl += realized_delta
    state.snapshots.append(
        PnLResult(
            realized_pnl=state.realized_pnl,
            quantity=state.ledger.ledger_total_quantity(),
            avg_entry_price=state.ledger.ledger_average_unit_cost(),
            transaction_ref=transaction_ref,
            realized_pnl_delta=realized_delta,
            lot_consumptions=lot_consumptions,
        )
    )

    current_ledger_state = state.ledger.ledger_state()
    if current_ledger_state != previous_ledger_state:
        logger.debug(
            "ledger state %s -> %s",
            previous_ledger_state,
            current_ledger_state,
            extra={"event": "ledger_state_transition", "transaction_ref": transaction_ref},
        )


def _validate_decimal_value(field_name: str, value: object) -> Decimal:
    """Return value as a finite Decimal or raise an invalid-transaction error."""

    if isinstance(value, bool) or not isinstance(value, (Decimal, int)):
        raise InvalidTransactionError(f"{field_name} must be a Decimal, got {type(value).__name__}")
    decimal_value = Decimal(value)
    if not decimal_value.is_finite():
        raise InvalidTransactionError(f"{field_name} must be finite, got {value}")
    if decimal_value != _ZERO and decimal_value.adjusted() > _MAX_ADJUSTED_EXPONENT:
        raise InvalidTransactionError(f"{field_name} magnitude exceeds 1E+{_MAX_ADJUSTED_EXPONENT}, got {value}")
    return decimal_value


__all__ = [
    "PnLComputationRequest",
    "PnLComputationResult",
    "ledger_compute_pnl",
    "ledger_replay_transactions",
    "ledger_validate_transaction",
]
