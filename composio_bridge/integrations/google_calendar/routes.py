"""
Google Calendar integration API routes.
"""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from ...config import Settings
from ...deps import get_app_settings, get_composio
from ...errors import BridgeError, UpstreamError, ValidationError
from ...gateway import ComposioGateway
from ...models import CalendarEventsResponse
from .client import CalendarClient

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/calendar", tags=["calendar"])


@router.get("/events", response_model=CalendarEventsResponse)
async def get_calendar_events(
    entity_id: Optional[str] = Query(default=None, alias="entityId"),
    connected_account_id: Optional[str] = Query(default=None, alias="connectedAccountId"),
    composio: ComposioGateway = Depends(get_composio),
    settings: Settings = Depends(get_app_settings),
):
    """List upcoming events from the entity's connected Google Calendar."""
    if not entity_id:
        raise ValidationError("entityId is required")

    logger.info("[Calendar] Fetching calendar events for entity: %s", entity_id)
    calendar = CalendarClient(composio, settings)
    try:
        events = await calendar.list_upcoming_events(entity_id, connected_account_id)
    except BridgeError as e:
        logger.error("[Calendar] %s: %s", e.error, e.message)
        raise
    except Exception as e:
        logger.error("[Calendar] Error fetching calendar events: %s", e)
        raise UpstreamError.wrap("Failed to fetch calendar events", e) from e

    logger.info("[Calendar] Retrieved %d calendar events", len(events))
    return CalendarEventsResponse(events=events)
