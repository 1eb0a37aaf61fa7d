"""Typed domain models shared across ledger, analytics, and API layers.

Monetary and quantity values are carried as `Decimal` end to end so replay
results stay exact and reproducible.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum


class TransactionType(str, Enum):
    """Supported transaction event types."""

    BUY = "buy"
    SELL = "sell"
    TRANSFER_IN = "transfer_in"
    TRANSFER_OUT = "transfer_out"
    DEPOSIT = "deposit"
    WITHDRAW = "withdraw"
    AIRDROP = "airdrop"


ACQUISITION_TYPES = frozenset(
    {
        TransactionType.BUY,
        TransactionType.TRANSFER_IN,
        TransactionType.DEPOSIT,
        TransactionType.AIRDROP,
    }
)
DISPOSAL_TYPES = frozenset(
    {
        TransactionType.SELL,
        TransactionType.TRANSFER_OUT,
        TransactionType.WITHDRAW,
    }
)


class PnLMethod(str, Enum):
    """Cost-basis accounting method selecting lot consumption order."""

    FIFO = "fifo"
    LIFO = "lifo"
    AVG = "avg"


@dataclass(frozen=True)
class Transaction:
    """Immutable transaction input event for one (portfolio, asset) pair.

    Attributes:
        portfolio_id: Portfolio identifier.
        asset_id: Asset identifier.
        tx_type: Transaction event type.
        quantity: Positive transaction quantity.
        price: Unit price in the asset quote currency.
        timestamp: Event timestamp; offset-naive values are treated as UTC.
        fee: Optional fee in the quote currency.
        note: Optional free-text note.
        tx_hash: Optional external transaction hash.
        transaction_id: Optional caller-side transaction identifier.
    """

    portfolio_id: str
    asset_id: str
    tx_type: TransactionType
    quantity: Decimal
    price: Decimal
    timestamp: datetime
    fee: Decimal | None = None
    note: str | None = None
    tx_hash: str | None = None
    transaction_id: str | None = None

    @property
    def timestamp_utc(self) -> datetime:
        """Return the timestamp normalized to an offset-aware UTC value."""

        if self.timestamp.tzinfo is None or self.timestamp.utcoffset() is None:
            return self.timestamp.replace(tzinfo=timezone.utc)
        return self.timestamp.astimezone(timezone.utc)

    @property
    def is_acquisition(self) -> bool:
        """Return whether the transaction opens a lot."""

        return self.tx_type in ACQUISITION_TYPES

    @property
    def is_disposal(self) -> bool:
        """Return whether the transaction consumes lots."""

        return self.tx_type in DISPOSAL_TYPES


@dataclass(frozen=True)
class LotConsumption:
    """One slice of a lot consumed by a disposal.

    Attributes:
        lot_sequence: Sequence number of the consumed lot within its ledger.
        opened_by: Reference of the acquisition that opened the lot.
        quantity: Quantity taken from the lot.
        unit_cost: Lot unit cost applied to the consumed quantity.
    """

    lot_sequence: int
    opened_by: str
    quantity: Decimal
    unit_cost: Decimal


@dataclass(frozen=True)
class OpenLotResult:
    """Read-only view of a lot still open after replay.

    Attributes:
        lot_sequence: Lot sequence number within its ledger.
        opened_by: Reference of the acquisition that opened the lot.
        remaining_quantity: Quantity still open.
        unit_cost: Effective unit cost of the remaining quantity.
    """

    lot_sequence: int
    opened_by: str
    remaining_quantity: Decimal
    unit_cost: Decimal


@dataclass(frozen=True)
class PnLResult:
    """Point-in-time PnL snapshot after one processed transaction.

    Attributes:
        realized_pnl: Cumulative realized PnL, signed.
        quantity: Open quantity, never negative.
        avg_entry_price: Weighted average unit cost of open quantity, zero when flat.
        transaction_ref: Reference of the transaction that produced this snapshot.
        realized_pnl_delta: Realized PnL recognized by that transaction alone.
        lot_consumptions: Lot slices consumed by that transaction.
    """

    realized_pnl: Decimal
    quantity: Decimal
    avg_entry_price: Decimal
    transaction_ref: str | None = None
    realized_pnl_delta: Decimal = Decimal("0")
    lot_consumptions: tuple[LotConsumption, ...] = ()


@dataclass(frozen=True)
class PortfolioPosition:
    """Externally persisted projection of a final PnL result.

    Attributes:
        portfolio_id: Portfolio identifier.
        asset_id: Asset identifier.
        quantity_total: Open quantity.
        avg_entry_price: Average entry price, zero when quantity is zero.
        realized_pnl: Cumulative realized PnL.
    """

    portfolio_id: str
    asset_id: str
    quantity_total: Decimal
    avg_entry_price: Decimal
    realized_pnl: Decimal


@dataclass(frozen=True)
class TransactionError:
    """Transaction-level failure collected during replay.

    Attributes:
        error_code: Machine-readable error code.
        transaction_ref: Reference of the failing transaction.
        sequence_index: Input position of the failing transaction.
        message: Human-readable failure detail.
    """

    error_code: str
    transaction_ref: str
    sequence_index: int
    message: str


@dataclass(frozen=True)
class HealthStatus:
    """Health response contract used by health-check surfaces.

    Attributes:
        status: Overall status text for service health.
        detail: Additional message suitable for operational diagnostics.
    """

    status: str
    detail: str


def domain_transaction_ref(transaction: Transaction, sequence_index: int) -> str:
    """Build a stable reference for one transaction.

    Args:
        transaction: Transaction input.
        sequence_index: Input position used when no identifier is present.

    Returns:
        str: Caller identifier when present, otherwise an input-position reference.
    """

    if transaction.transaction_id is not None and transaction.transaction_id.strip():
        return transaction.transaction_id.strip()
    return f"#{sequence_index}"
