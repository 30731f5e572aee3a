from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from composio_bridge.api import create_app
from composio_bridge.config import Settings
from composio_bridge.gateway import ComposioGateway


FRONTEND_URL = "http://frontend.test"
BACKEND_URL = "http://backend.test"


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        composio_api_key="test-key",
        frontend_url=FRONTEND_URL,
        backend_url=BACKEND_URL,
        cors_origins="http://localhost:3001",
    )


@pytest.fixture
def sdk():
    """Stand-in for composio_client.AsyncComposio with empty defaults."""
    client = MagicMock()
    client.connected_accounts.list = AsyncMock(return_value=SimpleNamespace(items=[]))
    client.connected_accounts.create = AsyncMock(
        return_value=SimpleNamespace(id="ca_new", redirect_url="https://composio.test/oauth", status="INITIATED")
    )
    client.connected_accounts.delete = AsyncMock(return_value=SimpleNamespace(success=True))
    client.auth_configs.list = AsyncMock(return_value=SimpleNamespace(items=[]))
    client.tools.execute = AsyncMock(
        return_value=SimpleNamespace(data={"items": []}, successful=True, error=None)
    )
    client.close = AsyncMock()
    return client


@pytest.fixture
def gateway(sdk) -> ComposioGateway:
    return ComposioGateway(api_key="test-key", client=sdk)


@pytest.fixture
def app(settings, gateway):
    return create_app(settings=settings, composio=gateway)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def calendar_account():
    """Factory for raw Google Calendar connected-account items."""
    def make(account_id: str = "ca_cal", status: str = "ACTIVE") -> dict:
        return {
            "id": account_id,
            "status": status,
            "toolkit": {"slug": "googlecalendar"},
            "auth_config": {"id": "ac_cal"},
        }
    return make
