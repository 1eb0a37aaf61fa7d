"""Ledger layer package for lot tracking and PnL engine boundaries."""

from .interfaces import LotLedgerPort
from .lots import (
	AveragedLedger,
	ConsumptionOrder,
	DiscreteLotLedger,
	LEDGER_STATE_FLAT,
	LEDGER_STATE_OPEN,
	LotConsumptionResult,
	ledger_safe_unit_cost,
)
from .policy import (
	AccountingPolicy,
	ledger_acquisition_unit_cost,
	ledger_disposal_realized_pnl,
	ledger_policy_for_method,
)
from .position_projector import ledger_project_position, ledger_serialize_position
from .replay_engine import (
	PnLComputationRequest,
	PnLComputationResult,
	ledger_compute_pnl,
	ledger_replay_transactions,
	ledger_validate_transaction,
)
from .batch import PairKey, ledger_compute_batch, ledger_group_transactions_by_pair

__all__ = [
	"LotLedgerPort",
	"AveragedLedger",
	"ConsumptionOrder",
	"DiscreteLotLedger",
	"LEDGER_STATE_FLAT",
	"LEDGER_STATE_OPEN",
	"LotConsumptionResult",
	"ledger_safe_unit_cost",
	"AccountingPolicy",
	"ledger_acquisition_unit_cost",
	"ledger_disposal_realized_pnl",
	"ledger_policy_for_method",
	"ledger_project_position",
	"ledger_serialize_position",
	"PnLComputationRequest",
	"PnLComputationResult",
	"ledger_compute_pnl",
	"ledger_replay_transactions",
	"ledger_validate_transaction",
	"PairKey",
	"ledger_compute_batch",
	"ledger_group_transactions_by_pair",
]
