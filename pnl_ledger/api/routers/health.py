"""Health endpoint router composition."""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from pnl_ledger.config import AppSettings
from pnl_ledger.domain import HealthStatus


def api_create_health_router(settings: AppSettings) -> APIRouter:
    """Create health-check router reporting application status.

    Args:
        settings: Validated application settings.

    Returns:
        APIRouter: Router exposing `/health` endpoint.

    Raises:
        ValueError: Raised when settings is invalid.
    """

    if settings is None:
        raise ValueError("settings must not be None")

    router = APIRouter(tags=["health"])

    @router.get("/health")
    def api_health_status() -> JSONResponse:
        """Return application health state.

        Returns:
            JSONResponse: Deterministic health payload for operational checks.
        """

        health = HealthStatus(status="ok", detail="pnl engine ready")
        payload = {
            "status": health.status,
            "app": "up",
            "detail": health.detail,
            "environment": settings.environment_name,
            "default_pnl_method": settings.default_pnl_method.value,
        }
        return JSONResponse(content=payload, status_code=status.HTTP_200_OK)

    return router
