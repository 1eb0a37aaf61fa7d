"""PnL API router composition for replay and valuation endpoints."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field, field_validator

from pnl_ledger.analytics import analytics_position_valuation, analytics_serialize_valuation
from pnl_ledger.config import AppSettings
from pnl_ledger.domain import (
    OpenLotResult,
    PnLMethod,
    PnLResult,
    PortfolioPosition,
    Transaction,
    TransactionError,
    TransactionType,
)
from pnl_ledger.ledger import PnLComputationResult, ledger_compute_batch, ledger_serialize_position


class TransactionPayload(BaseModel):
    """Transaction request body item."""

    model_config = ConfigDict(populate_by_name=True)

    transaction_id: str | int | None = Field(default=None, alias="id")
    portfolio_id: str = Field(min_length=1)
    asset_id: str | int
    tx_type: TransactionType = Field(alias="type")
    quantity: Decimal
    price: Decimal = Decimal("0")
    fee: Decimal | None = None
    timestamp: datetime
    note: str | None = None
    tx_hash: str | None = None

    @field_validator("portfolio_id", mode="before")
    @classmethod
    def _strip_portfolio_id(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("asset_id")
    @classmethod
    def _validate_asset_id(cls, value: str | int) -> str:
        normalized_value = str(value).strip()
        if not normalized_value:
            raise ValueError("asset_id must not be blank")
        return normalized_value

    def to_transaction(self) -> Transaction:
        return Transaction(
            portfolio_id=self.portfolio_id,
            asset_id=str(self.asset_id),
            tx_type=self.tx_type,
            quantity=self.quantity,
            price=self.price,
            timestamp=self.timestamp,
            fee=self.fee,
            note=self.note,
            tx_hash=self.tx_hash,
            transaction_id=None if self.transaction_id is None else str(self.transaction_id),
        )


class PnLComputePayload(BaseModel):
    """Request body for multi-pair PnL replay."""

    method: PnLMethod | None = None
    include_fees: bool | None = None
    transactions: list[TransactionPayload]


class PositionValuationPayload(BaseModel):
    """Request body for valuing one projected position."""

    portfolio_id: str
    asset_id: str | int
    quantity_total: Decimal
    avg_entry_price: Decimal
    realized_pnl: Decimal = Decimal("0")
    current_price: Decimal


def api_create_pnl_router(settings: AppSettings) -> APIRouter:
    """Create PnL router exposing replay and valuation endpoints.

    Args:
        settings: Runtime settings used for method, fee and worker defaults.

    Returns:
        APIRouter: Router exposing `/pnl` endpoints.

    Raises:
        ValueError: Raised when settings is invalid.
    """

    if settings is None:
        raise ValueError("settings must not be None")

    router = APIRouter(prefix="/pnl", tags=["pnl"])

    @router.post("/compute")
    def api_pnl_compute(payload: PnLComputePayload) -> JSONResponse:
        """Replay transactions and return one result per (portfolio, asset) pair.

        Args:
            payload: Replay request body.

        Returns:
            JSONResponse: Per-pair positions, snapshots, errors and open lots.
        """

        method = payload.method or settings.default_pnl_method
        include_fees = settings.default_include_fees if payload.include_fees is None else payload.include_fees
        results = ledger_compute_batch(
            transactions=[transaction.to_transaction() for transaction in payload.transactions],
            method=method,
            include_fees=include_fees,
            max_workers=settings.batch_max_workers,
        )

        items = [api_serialize_computation_result(result) for result in results.values()]
        response_payload = {
            "method": method.value,
            "include_fees": include_fees,
            "items": items,
            "error_count": sum(len(result.errors) for result in results.values()),
        }
        return JSONResponse(content=response_payload, status_code=status.HTTP_200_OK)

    @router.post("/valuation")
    def api_pnl_valuation(payload: PositionValuationPayload) -> JSONResponse:
        """Value one projected position at a current market price.

        Args:
            payload: Position fields and current price.

        Returns:
            JSONResponse: Valuation payload, or a 400 error envelope for invalid prices.
        """

        position = PortfolioPosition(
            portfolio_id=payload.portfolio_id,
            asset_id=str(payload.asset_id),
            quantity_total=payload.quantity_total,
            avg_entry_price=payload.avg_entry_price,
            realized_pnl=payload.realized_pnl,
        )
        try:
            valuation = analytics_position_valuation(position, payload.current_price)
        except ValueError as error:
            error_payload = {
                "status": "error",
                "code": "INVALID_VALUATION_INPUT",
                "message": str(error),
            }
            return JSONResponse(content=error_payload, status_code=status.HTTP_400_BAD_REQUEST)
        return JSONResponse(content=analytics_serialize_valuation(valuation), status_code=status.HTTP_200_OK)

    return router


def api_serialize_computation_result(result: PnLComputationResult) -> dict[str, object]:
    """Serialize one pair computation result to JSON payload.

    Args:
        result: Pair computation result.

    Returns:
        dict[str, object]: JSON-serializable result payload.
    """

    return {
        "position": ledger_serialize_position(result.position),
        "snapshots": [api_serialize_pnl_result(snapshot) for snapshot in result.snapshots],
        "errors": [api_serialize_transaction_error(error) for error in result.errors],
        "open_lots": [api_serialize_open_lot(open_lot) for open_lot in result.open_lots],
    }


def api_serialize_pnl_result(snapshot: PnLResult) -> dict[str, object]:
    """Serialize one replay snapshot to JSON payload.

    Args:
        snapshot: Snapshot produced by one replayed transaction.

    Returns:
        dict[str, object]: Snapshot payload including consumed lot slices.
    """

    return {
        "transaction_ref": snapshot.transaction_ref,
        "realized_pnl": str(snapshot.realized_pnl),
        "realized_pnl_delta": str(snapshot.realized_pnl_delta),
        "quantity": str(snapshot.quantity),
        "avg_entry_price": str(snapshot.avg_entry_price),
        "lot_consumptions": [
            {
                "lot_sequence": consumption.lot_sequence,
                "opened_by": consumption.opened_by,
                "quantity": str(consumption.quantity),
                "unit_cost": str(consumption.unit_cost),
            }
            for consumption in snapshot.lot_consumptions
        ],
    }


def api_serialize_transaction_error(error: TransactionError) -> dict[str, object]:
    """Serialize one transaction-level error to JSON payload."""

    return {
        "error_code": error.error_code,
        "transaction_ref": error.transaction_ref,
        "sequence_index": error.sequence_index,
        "message": error.message,
    }


def api_serialize_open_lot(open_lot: OpenLotResult) -> dict[str, object]:
    """Serialize one open lot to JSON payload."""

    return {
        "lot_sequence": open_lot.lot_sequence,
        "opened_by": open_lot.opened_by,
        "remaining_quantity": str(open_lot.remaining_quantity),
        "unit_cost": str(open_lot.unit_cost),
    }


__all__ = [
    "api_create_pnl_router",
    "api_serialize_computation_result",
    "api_serialize_open_lot",
    "api_serialize_pnl_result",
    "api_serialize_transaction_error",
]
