"""
Composio connection API routes.

Lists, initiates and removes connected accounts, and receives the OAuth
callback once the platform has finished the provider's consent screen.
"""
from __future__ import annotations

import logging
from typing import Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import RedirectResponse
from pydantic import ValidationError as PayloadError

from ...config import Settings
from ...deps import get_app_settings, get_composio
from ...errors import BridgeError, UpstreamError, ValidationError
from ...gateway import ComposioGateway
from ...models import (
    ConnectedAccountsResponse,
    DisconnectResponse,
    InitiateConnectionRequest,
    InitiateConnectionResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/composio", tags=["composio"])

NO_AUTH_CONFIG_ERROR = "No auth config found for this app. Please create one in the Composio dashboard."
FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


# --------------------------------------------------------------------------- #
# Helpers
# --------------------------------------------------------------------------- #

def frontend_redirect(settings: Settings, **params: str) -> str:
    """Build a URL on the frontend landing page with url-encoded query params."""
    query = "&".join(f"{key}={quote(str(value), safe='')}" for key, value in params.items())
    return f"{settings.public_frontend_url}/?{query}"


async def resolve_auth_config_id(composio: ComposioGateway, app_name: str) -> Optional[str]:
    """Look up an auth config by toolkit slug; lookup failures count as none."""
    try:
        config_id = await composio.find_auth_config_id(app_name.lower())
    except BridgeError:
        raise
    except Exception as e:
        logger.error("[Composio] Error getting auth configs: %s", e)
        return None
    if config_id:
        logger.info("[Composio] Using auth config ID: %s", config_id)
    return config_id


async def read_initiate_payload(request: Request) -> InitiateConnectionRequest:
    """Parse the initiate body from JSON or from a form post."""
    content_type = request.headers.get("content-type", "")
    try:
        if content_type.startswith(FORM_CONTENT_TYPES):
            data = dict(await request.form())
        elif (await request.body()).strip():
            data = await request.json()
        else:
            data = {}
        return InitiateConnectionRequest.model_validate(data)
    except (ValueError, PayloadError) as e:
        raise ValidationError("Invalid request", str(e)) from e


# --------------------------------------------------------------------------- #
# Endpoints
# --------------------------------------------------------------------------- #

@router.get("/connectedAccounts", response_model=ConnectedAccountsResponse)
async def get_connected_accounts(
    entity_id: Optional[str] = Query(default=None, alias="entityId"),
    composio: ComposioGateway = Depends(get_composio),
):
    """List the accounts an entity has connected through Composio."""
    if not entity_id:
        raise ValidationError("entityId is required")

    logger.info("[Composio] Fetching connected accounts for entity: %s", entity_id)
    try:
        connections = await composio.list_connected_accounts(entity_id)
    except BridgeError:
        raise
    except Exception as e:
        logger.error("[Composio] Error fetching connected accounts: %s", e)
        raise UpstreamError.wrap("Failed to fetch connected accounts", e) from e

    logger.info("[Composio] Found %d connections", len(connections))
    return ConnectedAccountsResponse(connections=connections)


@router.post("/initiate", response_model=InitiateConnectionResponse)
async def initiate_connection(
    payload: InitiateConnectionRequest = Depends(read_initiate_payload),
    composio: ComposioGateway = Depends(get_composio),
    settings: Settings = Depends(get_app_settings),
):
    """
    Start an OAuth connection and return the platform's redirect URL.

    When no authConfigId is given, the first auth config registered for
    the app's toolkit slug is used.
    """
    if not payload.app_name or not payload.entity_id:
        raise ValidationError("appName and entityId are required")

    logger.info(
        "[Composio] Initiating connection for app: %s, entity: %s",
        payload.app_name,
        payload.entity_id,
    )
    callback_url = payload.redirect_url or settings.callback_url

    config_id = payload.auth_config_id
    if not config_id:
        config_id = await resolve_auth_config_id(composio, payload.app_name)
    if not config_id:
        raise ValidationError(NO_AUTH_CONFIG_ERROR, appName=payload.app_name)

    try:
        request = await composio.initiate_connection(
            payload.entity_id,
            config_id,
            callback_url=callback_url,
            allow_multiple=True,
        )
    except BridgeError:
        raise
    except Exception as e:
        logger.error("[Composio] Error initiating connection: %s", e)
        raise UpstreamError.wrap("Failed to initiate connection", e) from e

    logger.info("[Composio] Connection initiated, redirect URL: %s", request.redirect_url)
    return InitiateConnectionResponse(redirect_url=request.redirect_url, connection_id=request.id)


@router.get("/callback", response_class=RedirectResponse)
async def handle_callback(
    request: Request,
    settings: Settings = Depends(get_app_settings),
):
    """
    OAuth callback target for the platform.

    Always sends the browser back to the frontend; the platform has already
    stored the grant by the time it redirects here.
    """
    try:
        logger.info("[Composio] Handling OAuth callback, query params: %s", dict(request.query_params))
        target = frontend_redirect(settings, connected="true")
    except Exception as e:
        logger.error("[Composio] Error handling callback: %s", e)
        target = frontend_redirect(settings, error=str(e))

    logger.info("[Composio] Redirecting to: %s", target)
    return RedirectResponse(target, status_code=302)


@router.delete("/disconnect", response_model=DisconnectResponse)
async def disconnect_account(
    connection_id: Optional[str] = Query(default=None, alias="connectionId"),
    composio: ComposioGateway = Depends(get_composio),
):
    """Delete a connected account on the platform."""
    if not connection_id:
        raise ValidationError("connectionId is required")

    logger.info("[Composio] Disconnecting connection: %s", connection_id)
    try:
        await composio.delete_connected_account(connection_id)
    except BridgeError:
        raise
    except Exception as e:
        logger.error("[Composio] Error disconnecting account: %s", e)
        raise UpstreamError.wrap("Failed to disconnect account", e) from e

    logger.info("[Composio] Connection disconnected successfully")
    return DisconnectResponse(success=True)
