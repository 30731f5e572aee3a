"""
Composio platform gateway.

Wraps the async Composio API client (``composio_client.AsyncComposio``) behind
a small set of coroutines shaped for the bridge's routes, and normalises the
SDK's pydantic models into plain dicts.

One gateway is built per application by ``create_app`` and handed to routes
through the ``deps.get_composio`` dependency.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional

from composio_client import AsyncComposio

from .config import Settings
from .errors import UpstreamError
from .models import Connection, ConnectionRequest

logger = logging.getLogger(__name__)


# --------------------------------------------------------------------------- #
# Normalisation helpers
# --------------------------------------------------------------------------- #

def to_dict(obj: Any) -> Dict[str, Any]:
    """Convert an SDK model, mapping or plain object into a dict."""
    if obj is None:
        return {}
    if isinstance(obj, Mapping):
        return dict(obj)
    if hasattr(obj, "model_dump"):
        return obj.model_dump(mode="json")
    if hasattr(obj, "__dict__"):
        return {k: v for k, v in vars(obj).items() if not k.startswith("_")}
    raise TypeError(f"Cannot convert {type(obj).__name__} to dict")


def get_field(obj: Any, *names: str, default: Any = None) -> Any:
    """Return the first present, non-None attribute or key among ``names``."""
    for name in names:
        if isinstance(obj, Mapping):
            value = obj.get(name)
        else:
            value = getattr(obj, name, None)
        if value is not None:
            return value
    return default


def _items(response: Any) -> List[Any]:
    return list(get_field(response, "items", default=[]) or [])


# --------------------------------------------------------------------------- #
# Gateway
# --------------------------------------------------------------------------- #

class ComposioGateway:
    """
    Thin async adapter over the Composio v3 API.

    The SDK client is created on first use, so an application can start (and
    report a missing key on /health) without COMPOSIO_API_KEY.

    Usage:
        gateway = ComposioGateway.from_settings(settings)
        items = await gateway.list_connected_accounts("user-1")
    """

    def __init__(
        self,
        api_key: Optional[str],
        base_url: Optional[str] = None,
        timeout: float = 30.0,
        client: Optional[Any] = None,
    ):
        self._api_key = api_key
        self._base_url = base_url
        self._timeout = timeout
        self._client = client

    @classmethod
    def from_settings(cls, settings: Settings) -> "ComposioGateway":
        return cls(
            api_key=settings.composio_api_key,
            base_url=settings.composio_base_url,
            timeout=settings.composio_timeout,
        )

    @property
    def client(self) -> Any:
        if self._client is None:
            if not self._api_key:
                raise UpstreamError("Composio client is not configured", "COMPOSIO_API_KEY is not set")
            kwargs: Dict[str, Any] = {
                "api_key": self._api_key,
                "timeout": self._timeout,
                "max_retries": 0,
            }
            if self._base_url:
                kwargs["base_url"] = self._base_url
            self._client = AsyncComposio(**kwargs)
            logger.info("[Composio] Client initialised")
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
            self._client = None

    # ----------------------------------------------------------------------- #
    # Connected Accounts
    # ----------------------------------------------------------------------- #

    async def list_connected_accounts(
        self,
        user_id: str,
        toolkit_slugs: Optional[Iterable[str]] = None,
        auth_config_ids: Optional[Iterable[str]] = None,
    ) -> List[Dict[str, Any]]:
        """List the raw connected-account items linked to ``user_id``."""
        query: Dict[str, Any] = {"user_ids": [user_id]}
        if toolkit_slugs:
            query["toolkit_slugs"] = list(toolkit_slugs)
        if auth_config_ids:
            query["auth_config_ids"] = list(auth_config_ids)
        response = await self.client.connected_accounts.list(**query)
        return [to_dict(item) for item in _items(response)]

    async def list_connections(self, user_id: str, toolkit_slug: Optional[str] = None) -> List[Connection]:
        """Like ``list_connected_accounts`` but projected onto ``Connection``."""
        slugs = [toolkit_slug] if toolkit_slug else None
        items = await self.list_connected_accounts(user_id, toolkit_slugs=slugs)
        return [Connection.from_item(item) for item in items]

    async def initiate_connection(
        self,
        user_id: str,
        auth_config_id: str,
        callback_url: Optional[str] = None,
        allow_multiple: bool = True,
    ) -> ConnectionRequest:
        """
        Start an OAuth connection for ``user_id`` against an auth config.

        With ``allow_multiple=False`` the call is refused when the entity
        already has an account for this auth config.

        Raises:
            UpstreamError: If a connection exists and multiples are not allowed
        """
        if not allow_multiple:
            existing = await self.list_connected_accounts(user_id, auth_config_ids=[auth_config_id])
            if existing:
                raise UpstreamError(
                    "Multiple connected accounts not allowed",
                    f"Entity {user_id} already has a connected account for auth config {auth_config_id}",
                )

        connection: Dict[str, Any] = {"user_id": user_id}
        if callback_url:
            connection["callback_url"] = callback_url
        response = await self.client.connected_accounts.create(
            auth_config={"id": auth_config_id},
            connection=connection,
        )

        connection_data = get_field(response, "connection_data", "connectionData", default={})
        val = get_field(connection_data, "val", default={})
        return ConnectionRequest(
            id=str(get_field(response, "id", default="")),
            redirect_url=(
                get_field(response, "redirect_url", "redirectUrl", "redirect_uri")
                or get_field(val, "redirect_url", "redirectUrl")
            ),
            status=get_field(response, "status") or get_field(val, "status"),
        )

    async def delete_connected_account(self, connection_id: str) -> None:
        await self.client.connected_accounts.delete(connection_id)

    # ----------------------------------------------------------------------- #
    # Auth Configs
    # ----------------------------------------------------------------------- #

    async def find_auth_config_id(self, toolkit_slug: str) -> Optional[str]:
        """Return the first auth config id registered for a toolkit, if any."""
        response = await self.client.auth_configs.list(toolkit_slug=toolkit_slug.lower())
        items = _items(response)
        if not items:
            return None
        return get_field(items[0], "id")

    # ----------------------------------------------------------------------- #
    # Tools
    # ----------------------------------------------------------------------- #

    async def execute_tool(
        self,
        tool_slug: str,
        user_id: str,
        arguments: Dict[str, Any],
        connected_account_id: Optional[str] = None,
        version: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Execute a tool and return its result as a dict.

        Raises:
            UpstreamError: If the platform reports the execution unsuccessful
        """
        kwargs: Dict[str, Any] = {"arguments": arguments, "user_id": user_id}
        if connected_account_id:
            kwargs["connected_account_id"] = connected_account_id
        if version:
            kwargs["version"] = version

        result = to_dict(await self.client.tools.execute(tool_slug, **kwargs))
        if result.get("successful") is False:
            raise UpstreamError(
                f"Tool {tool_slug} failed",
                str(result.get("error") or "Tool execution was not successful"),
            )
        return result

