"""Main module entrypoint for local runtime execution.

This module validates startup configuration and either launches the FastAPI
service or replays a transaction file once and prints the results.
"""

import argparse
import json
import logging
from pathlib import Path

import uvicorn
from pydantic import ValidationError

from pnl_ledger.api.routers.pnl import PnLComputePayload, api_serialize_computation_result
from pnl_ledger.bootstrap import bootstrap_configure_logging, bootstrap_create_application
from pnl_ledger.config import AppSettings, config_load_settings
from pnl_ledger.ledger import ledger_compute_batch


logger = logging.getLogger(__name__)


def main() -> None:
    """Run selected runtime command with validated startup configuration.

    Raises:
        SettingsLoadError: Raised when configuration validation fails.
        SystemExit: Raised with code 1 when the compute input cannot be read.
    """

    argument_parser = argparse.ArgumentParser(description="PnL Ledger runtime entrypoint")
    argument_parser.add_argument(
        "command",
        nargs="?",
        default="api",
        choices=("api", "compute"),
        help="Runtime command: `api` starts server, `compute` replays a JSON transaction file and prints results",
        type=str,
    )
    argument_parser.add_argument(
        "--input",
        dest="input_path",
        type=Path,
        help="JSON file with a transaction list or an object with `transactions` for `compute`",
    )
    argument_parser.add_argument(
        "--method",
        dest="method",
        choices=("fifo", "lifo", "avg"),
        help="Optional PnL method override for `compute`",
    )
    argument_parser.add_argument(
        "--exclude-fees",
        dest="exclude_fees",
        action="store_true",
        help="Report PnL fee-exclusive for `compute`",
    )
    parsed_arguments = argument_parser.parse_args()

    settings = config_load_settings()

    if parsed_arguments.command == "compute":
        if parsed_arguments.input_path is None:
            argument_parser.error("--input is required for `compute`")
        bootstrap_configure_logging(settings)
        try:
            output_payload = main_compute_file(
                settings=settings,
                input_path=parsed_arguments.input_path,
                method=parsed_arguments.method,
                exclude_fees=parsed_arguments.exclude_fees,
            )
        except (OSError, json.JSONDecodeError, ValidationError) as error:
            logger.error("compute input rejected: %s", error, extra={"event": "cli_compute_input_rejected"})
            raise SystemExit(1) from error
        print(json.dumps(output_payload, indent=2))
        return

    application = bootstrap_create_application()
    uvicorn.run(
        application,
        host=settings.application_host,
        port=settings.application_port,
    )


def main_compute_file(
    settings: AppSettings,
    input_path: Path,
    method: str | None = None,
    exclude_fees: bool = False,
) -> dict[str, object]:
    """Replay one JSON transaction file and build the printable result payload.

    Args:
        settings: Validated runtime settings.
        input_path: Path to a JSON transaction list or compute request object.
        method: Optional PnL method overriding file and settings values.
        exclude_fees: Force fee-exclusive reporting when true.

    Returns:
        dict[str, object]: JSON-serializable per-pair results.

    Raises:
        OSError: Raised when the file cannot be read.
        json.JSONDecodeError: Raised when the file is not valid JSON.
        ValidationError: Raised when the file content does not match the request schema.
    """

    raw_payload = json.loads(input_path.read_text(encoding="utf-8"))
    if isinstance(raw_payload, list):
        raw_payload = {"transactions": raw_payload}
    request_payload = PnLComputePayload.model_validate(raw_payload)

    resolved_method = method or request_payload.method or settings.default_pnl_method
    if exclude_fees:
        include_fees = False
    elif request_payload.include_fees is not None:
        include_fees = request_payload.include_fees
    else:
        include_fees = settings.default_include_fees

    results = ledger_compute_batch(
        transactions=[transaction.to_transaction() for transaction in request_payload.transactions],
        method=resolved_method,
        include_fees=include_fees,
        max_workers=settings.batch_max_workers,
    )
    return {
        "method": str(getattr(resolved_method, "value", resolved_method)),
        "include_fees": include_fees,
        "items": [api_serialize_computation_result(result) for result in results.values()],
    }


if __name__ == "__main__":
    main()
