"""FastAPI application factory for the PnL ledger service."""

from fastapi import FastAPI

from pnl_ledger.config import AppSettings

from .routers import api_create_health_router, api_create_pnl_router


def create_api_application(settings: AppSettings) -> FastAPI:
    """Create the FastAPI application instance for the service.

    Args:
        settings: Validated application settings used for runtime metadata and defaults.

    Returns:
        FastAPI: Framework application instance with health and PnL routes.

    Raises:
        ValueError: Raised when settings is invalid.
    """

    if settings is None:
        raise ValueError("settings must not be None")

    application = FastAPI(title="PnL Ledger")

    @application.get("/", tags=["foundation"])
    def foundation_index() -> dict[str, str]:
        """Return a minimal foundation response for bootstrap verification.

        Returns:
            dict[str, str]: Minimal response for API framework verification.
        """

        return {
            "service": "pnl-ledger",
            "status": "ready",
            "environment": settings.environment_name,
        }

    application.include_router(api_create_health_router(settings=settings))
    application.include_router(api_create_pnl_router(settings=settings))

    return application
