"""Independent per-pair PnL computation over a mixed transaction set."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from decimal import Context, Decimal, getcontext, localcontext
import logging

from pnl_ledger.domain import (
    INVALID_TRANSACTION_CODE,
    InvalidTransactionError,
    PnLMethod,
    PnLResult,
    Transaction,
    TransactionError,
    domain_transaction_ref,
)

from .policy import ledger_policy_for_method
from .position_projector import ledger_project_position
from .replay_engine import (
    PnLComputationRequest,
    PnLComputationResult,
    ledger_replay_transactions,
    ledger_validate_transaction,
)


logger = logging.getLogger(__name__)

PairKey = tuple[str, str]

_ZERO = Decimal("0")


def ledger_group_transactions_by_pair(transactions: list[Transaction]) -> dict[PairKey, list[Transaction]]:
    """Group transactions by (portfolio_id, asset_id), preserving input order.

    Args:
        transactions: Mixed-pair transactions.

    Returns:
        dict[PairKey, list[Transaction]]: Grouped transactions keyed by pair in first-seen order.
    """

    grouped_transactions: dict[PairKey, list[Transaction]] = {}
    for transaction in transactions:
        pair_key = (transaction.portfolio_id, transaction.asset_id)
        grouped_transactions.setdefault(pair_key, []).append(transaction)
    return grouped_transactions


def ledger_compute_batch(
    transactions: list[Transaction],
    method: PnLMethod | str,
    include_fees: bool = True,
    max_workers: int = 1,
) -> dict[PairKey, PnLComputationResult]:
    """Compute one PnL result per (portfolio, asset) pair present in the input.

    Each pair replays through its own ledger, so pairs share no mutable state
    and may run concurrently. Worker threads replay under a copy of the
    caller's decimal context. A pair with a blank identifier yields a result
    whose transactions are all reported as invalid.

    Args:
        transactions: Mixed-pair transactions.
        method: PnL method applied to every pair.
        include_fees: Whether fees adjust cost basis and realized PnL.
        max_workers: Worker thread count; `1` computes sequentially.

    Returns:
        dict[PairKey, PnLComputationResult]: Results keyed by pair in first-seen order.

    Raises:
        ValueError: Raised when method or max_workers is invalid.
    """

    if max_workers < 1:
        raise ValueError("max_workers must be at least 1")

    resolved_method = ledger_policy_for_method(method).method
    requests = [
        PnLComputationRequest(
            portfolio_id=portfolio_id,
            asset_id=asset_id,
            method=resolved_method,
            include_fees=include_fees,
            transactions=pair_transactions,
        )
        for (portfolio_id, asset_id), pair_transactions in ledger_group_transactions_by_pair(transactions).items()
    ]

    logger.info(
        "pnl batch started",
        extra={
            "event": "ledger_batch_started",
            "pair_count": len(requests),
            "pnl_method": resolved_method.value,
            "max_workers": max_workers,
        },
    )

    if max_workers == 1 or len(requests) <= 1:
        results = [_batch_replay_pair(request) for request in requests]
    else:
        caller_context = getcontext().copy()
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            results = list(
                executor.map(lambda request: _batch_replay_pair(request, caller_context), requests)
            )

    return {(request.portfolio_id, request.asset_id): result for request, result in zip(requests, results)}


def _batch_replay_pair(request: PnLComputationRequest, decimal_context: Context | None = None) -> PnLComputationResult:
    """Replay one pair, rejecting it transaction by transaction when an identifier is blank."""

    with localcontext(decimal_context):
        if _batch_is_blank(request.portfolio_id) or _batch_is_blank(request.asset_id):
            return _batch_reject_pair(request)
        return ledger_replay_transactions(request)


def _batch_is_blank(identifier: object) -> bool:
    return not isinstance(identifier, str) or not identifier.strip()


def _batch_reject_pair(request: PnLComputationRequest) -> PnLComputationResult:
    """Build a result reporting every transaction of an unidentifiable pair as invalid.

    Args:
        request: Pair request with a blank portfolio or asset identifier.

    Returns:
        PnLComputationResult: Flat position, no snapshots and one error per transaction.
    """

    errors: list[TransactionError] = []
    for sequence_index, transaction in enumerate(request.transactions):
        try:
            ledger_validate_transaction(transaction)
        except InvalidTransactionError as error:
            message = str(error)
        else:
            message = "portfolio_id and asset_id must not be blank"
        errors.append(
            TransactionError(
                error_code=INVALID_TRANSACTION_CODE,
                transaction_ref=domain_transaction_ref(transaction, sequence_index),
                sequence_index=sequence_index,
                message=message,
            )
        )

    logger.warning(
        "pair rejected: blank identifier",
        extra={
            "event": "ledger_pair_rejected",
            "portfolio_id": request.portfolio_id,
            "asset_id": request.asset_id,
            "transaction_count": len(request.transactions),
        },
    )

    return PnLComputationResult(
        position=ledger_project_position(
            portfolio_id=request.portfolio_id,
            asset_id=request.asset_id,
            final_result=PnLResult(realized_pnl=_ZERO, quantity=_ZERO, avg_entry_price=_ZERO),
        ),
        snapshots=(),
        errors=tuple(errors),
        open_lots=(),
        method=request.method,
        include_fees=request.include_fees,
    )


__all__ = ["PairKey", "ledger_compute_batch", "ledger_group_transactions_by_pair"]
