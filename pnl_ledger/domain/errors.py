"""Project-native typed exceptions for PnL engine failures."""

from __future__ import annotations

from decimal import Decimal


INVALID_TRANSACTION_CODE = "INVALID_TRANSACTION"
INSUFFICIENT_LOTS_CODE = "INSUFFICIENT_LOTS"
DEGENERATE_AVERAGE_CODE = "DEGENERATE_AVERAGE"


class PnLEngineError(Exception):
    """Base exception for data-level PnL engine failures.

    Attributes:
        error_code: Machine-readable error code.
    """

    def __init__(self, message: str, error_code: str):
        super().__init__(message)
        self.error_code = error_code


class InvalidTransactionError(PnLEngineError, ValueError):
    """Transaction rejected before replay because its values are invalid."""

    def __init__(self, message: str):
        super().__init__(message=message, error_code=INVALID_TRANSACTION_CODE)


class InsufficientLotsError(PnLEngineError, ValueError):
    """Disposal quantity exceeds the quantity held in open lots."""

    def __init__(self, requested_quantity: Decimal, available_quantity: Decimal):
        super().__init__(
            message=(
                f"disposal quantity={requested_quantity} exceeds open quantity={available_quantity}"
            ),
            error_code=INSUFFICIENT_LOTS_CODE,
        )
        self.requested_quantity = requested_quantity
        self.available_quantity = available_quantity
