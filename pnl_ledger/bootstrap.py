"""Application bootstrap wiring for startup validation and dependency assembly."""

from fastapi import FastAPI

from pnl_ledger.api import create_api_application
from pnl_ledger.config import AppSettings, config_load_settings
from pnl_ledger.logging_config import configure_logging


def bootstrap_configure_logging(settings: AppSettings) -> None:
    """Apply logging settings to the root logger.

    Args:
        settings: Validated runtime settings.
    """

    configure_logging(level=settings.log_level, json_output=settings.log_json, env=settings.environment_name)


def bootstrap_create_application() -> FastAPI:
    """Assemble the runtime application after validating startup configuration.

    Returns:
        FastAPI: Fully initialized FastAPI application instance.

    Raises:
        SettingsLoadError: Raised when startup configuration validation fails.
    """

    settings = config_load_settings()
    bootstrap_configure_logging(settings)
    return create_api_application(settings=settings)
