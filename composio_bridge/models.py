from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field


# --------------------------------------------------------------------------- #
# Platform Records - read-only projections of Composio objects
# --------------------------------------------------------------------------- #

class ConnectionStatus(str, Enum):
    """Connected account status as reported by the platform."""
    INITIALIZING = "INITIALIZING"
    INITIATED = "INITIATED"
    ACTIVE = "ACTIVE"
    FAILED = "FAILED"
    EXPIRED = "EXPIRED"
    INACTIVE = "INACTIVE"
    REVOKED = "REVOKED"


class Connection(BaseModel):
    """
    A link between an entity and a third-party account.

    The platform owns the lifecycle (pending -> active -> disconnected);
    this is only the subset of fields the bridge reads.
    """
    id: str
    status: Optional[str] = None
    toolkit_slug: Optional[str] = None
    auth_config_id: Optional[str] = None

    @property
    def is_active(self) -> bool:
        return (self.status or "").upper() == ConnectionStatus.ACTIVE.value

    @classmethod
    def from_item(cls, item: Mapping[str, Any]) -> "Connection":
        """Build from a raw connected-account item (v3 or legacy shape)."""
        toolkit = item.get("toolkit") or {}
        auth_config = item.get("auth_config") or {}
        slug = toolkit.get("slug") if isinstance(toolkit, Mapping) else None
        return cls(
            id=str(item.get("id") or item.get("nanoid") or ""),
            status=item.get("status"),
            toolkit_slug=slug or item.get("toolkit_slug") or item.get("appName") or item.get("appUniqueId"),
            auth_config_id=auth_config.get("id") if isinstance(auth_config, Mapping) else None,
        )


class ConnectionRequest(BaseModel):
    """Result of initiating an OAuth connection."""
    id: str
    redirect_url: Optional[str] = None
    status: Optional[str] = None


# --------------------------------------------------------------------------- #
# Request / Response Models
# --------------------------------------------------------------------------- #

class InitiateConnectionRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    app_name: Optional[str] = Field(default=None, alias="appName")
    entity_id: Optional[str] = Field(default=None, alias="entityId")
    redirect_url: Optional[str] = Field(default=None, alias="redirectUrl")
    auth_config_id: Optional[str] = Field(default=None, alias="authConfigId")


class InitiateConnectionResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    redirect_url: Optional[str] = Field(default=None, alias="redirectUrl")
    connection_id: str = Field(alias="connectionId")


class ConnectedAccountsResponse(BaseModel):
    connections: List[Dict[str, Any]] = Field(default_factory=list)


class CalendarEventsResponse(BaseModel):
    events: List[Dict[str, Any]] = Field(default_factory=list)


class DisconnectResponse(BaseModel):
    success: bool = True


class HealthResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    status: str = "ok"
    timestamp: datetime
    composio_api_key: str = Field(alias="composioApiKey")
