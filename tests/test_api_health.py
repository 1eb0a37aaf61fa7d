"""Tests for API foundation and health endpoint behavior."""

from fastapi.testclient import TestClient

from pnl_ledger.api.application import create_api_application
from pnl_ledger.config import AppSettings


def test_api_health_returns_ok_payload() -> None:
    """Return deterministic healthy payload with configured defaults.

    Returns:
        None: Assertions validate health response.

    Raises:
        AssertionError: Raised when response deviates from expected payload.
    """

    settings = AppSettings(environment_name="test", default_pnl_method="lifo")
    client = TestClient(create_api_application(settings=settings))

    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {
        "status": "ok",
        "app": "up",
        "detail": "pnl engine ready",
        "environment": "test",
        "default_pnl_method": "lifo",
    }


def test_api_foundation_index_reports_environment() -> None:
    """Return service metadata from the foundation route.

    Returns:
        None: Assertions validate foundation response.

    Raises:
        AssertionError: Raised when metadata is missing.
    """

    client = TestClient(create_api_application(settings=AppSettings(environment_name="test")))

    response = client.get("/")

    assert response.status_code == 200
    assert response.json() == {"service": "pnl-ledger", "status": "ready", "environment": "test"}
