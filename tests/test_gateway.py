from types import SimpleNamespace

import pytest
from pydantic import BaseModel

from composio_bridge.errors import UpstreamError
from composio_bridge.gateway import ComposioGateway, get_field, to_dict
from composio_bridge.models import Connection, ConnectionStatus


class _Toolkit(BaseModel):
    slug: str


class _Account(BaseModel):
    id: str
    status: str
    toolkit: _Toolkit


def test_to_dict_dumps_pydantic_models():
    account = _Account(id="ca_1", status="ACTIVE", toolkit=_Toolkit(slug="gmail"))
    assert to_dict(account) == {"id": "ca_1", "status": "ACTIVE", "toolkit": {"slug": "gmail"}}


def test_to_dict_handles_mappings_objects_and_none():
    assert to_dict({"a": 1}) == {"a": 1}
    assert to_dict(SimpleNamespace(a=1, _private=2)) == {"a": 1}
    assert to_dict(None) == {}


def test_get_field_returns_first_present_name():
    assert get_field({"redirectUrl": "x"}, "redirect_url", "redirectUrl") == "x"
    assert get_field(SimpleNamespace(redirect_url=None, redirect_uri="y"), "redirect_url", "redirect_uri") == "y"
    assert get_field({}, "missing", default="d") == "d"


def test_missing_api_key_fails_on_first_use():
    gateway = ComposioGateway(api_key="")

    with pytest.raises(UpstreamError) as excinfo:
        gateway.client

    assert "COMPOSIO_API_KEY" in excinfo.value.message


@pytest.mark.asyncio
async def test_list_connections_projects_items(gateway, sdk):
    sdk.connected_accounts.list.return_value = SimpleNamespace(
        items=[_Account(id="ca_1", status="ACTIVE", toolkit=_Toolkit(slug="googlecalendar"))]
    )

    connections = await gateway.list_connections("u1", toolkit_slug="googlecalendar")

    assert len(connections) == 1
    assert connections[0].id == "ca_1"
    assert connections[0].toolkit_slug == "googlecalendar"
    assert connections[0].is_active


@pytest.mark.asyncio
async def test_initiate_reads_redirect_from_connection_data(gateway, sdk):
    sdk.connected_accounts.create.return_value = {
        "id": "ca_9",
        "connectionData": {"val": {"status": "INITIATED", "redirectUrl": "https://auth.test/start"}},
    }

    request = await gateway.initiate_connection("u1", "ac_1", callback_url="http://cb.test")

    assert request.id == "ca_9"
    assert request.redirect_url == "https://auth.test/start"
    assert request.status == "INITIATED"


@pytest.mark.asyncio
async def test_initiate_without_allow_multiple_refuses_existing(gateway, sdk, calendar_account):
    sdk.connected_accounts.list.return_value = SimpleNamespace(items=[calendar_account()])

    with pytest.raises(UpstreamError):
        await gateway.initiate_connection("u1", "ac_cal", allow_multiple=False)

    sdk.connected_accounts.list.assert_awaited_once_with(user_ids=["u1"], auth_config_ids=["ac_cal"])
    sdk.connected_accounts.create.assert_not_awaited()


@pytest.mark.asyncio
async def test_initiate_without_allow_multiple_creates_first(gateway, sdk):
    request = await gateway.initiate_connection("u1", "ac_cal", allow_multiple=False)

    assert request.id == "ca_new"
    sdk.connected_accounts.create.assert_awaited_once_with(
        auth_config={"id": "ac_cal"},
        connection={"user_id": "u1"},
    )


@pytest.mark.asyncio
async def test_find_auth_config_id_none_when_empty(gateway, sdk):
    assert await gateway.find_auth_config_id("Gmail") is None
    sdk.auth_configs.list.assert_awaited_once_with(toolkit_slug="gmail")


@pytest.mark.asyncio
async def test_execute_tool_passes_version(gateway, sdk):
    await gateway.execute_tool("SOME_TOOL", "u1", {"x": 1}, version="20250901_00")

    sdk.tools.execute.assert_awaited_once_with(
        "SOME_TOOL", arguments={"x": 1}, user_id="u1", version="20250901_00"
    )


@pytest.mark.asyncio
async def test_close_releases_client(gateway, sdk):
    await gateway.close()

    sdk.close.assert_awaited_once()
    await gateway.close()
    sdk.close.assert_awaited_once()


@pytest.mark.parametrize("status", ["REVOKED", "EXPIRED", "INITIATED", None])
def test_only_active_connections_are_active(status):
    connection = Connection.from_item({"id": "ca_1", "status": status, "toolkit": {"slug": "gmail"}})
    assert not connection.is_active


def test_revoked_is_a_known_status():
    assert ConnectionStatus("REVOKED") is ConnectionStatus.REVOKED
