"""Domain models and errors used across application layer boundaries."""

from .errors import (
    DEGENERATE_AVERAGE_CODE,
    INSUFFICIENT_LOTS_CODE,
    INVALID_TRANSACTION_CODE,
    InsufficientLotsError,
    InvalidTransactionError,
    PnLEngineError,
)
from .models import (
    ACQUISITION_TYPES,
    DISPOSAL_TYPES,
    HealthStatus,
    LotConsumption,
    OpenLotResult,
    PnLMethod,
    PnLResult,
    PortfolioPosition,
    Transaction,
    TransactionError,
    TransactionType,
    domain_transaction_ref,
)

__all__ = [
    "ACQUISITION_TYPES",
    "DISPOSAL_TYPES",
    "DEGENERATE_AVERAGE_CODE",
    "INSUFFICIENT_LOTS_CODE",
    "INVALID_TRANSACTION_CODE",
    "HealthStatus",
    "InsufficientLotsError",
    "InvalidTransactionError",
    "LotConsumption",
    "OpenLotResult",
    "PnLEngineError",
    "PnLMethod",
    "PnLResult",
    "PortfolioPosition",
    "Transaction",
    "TransactionError",
    "TransactionType",
    "domain_transaction_ref",
]
