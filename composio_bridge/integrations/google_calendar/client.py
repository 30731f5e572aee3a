"""
Google Calendar access through Composio.

Events are never fetched from Google directly: the platform holds the
user's OAuth grant and runs the calendar tool on the bridge's behalf.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from ...config import Settings
from ...errors import NotFoundError
from ...gateway import ComposioGateway, get_field


DEFAULT_MAX_RESULTS = 50


# --------------------------------------------------------------------------- #
# Google Calendar Client
# --------------------------------------------------------------------------- #

class CalendarClient:
    """
    Lists upcoming events from an entity's connected Google Calendar.

    Usage:
        calendar = CalendarClient(gateway, settings)
        events = await calendar.list_upcoming_events("user-1")
    """

    def __init__(self, composio: ComposioGateway, settings: Settings):
        self._composio = composio
        self._toolkit = settings.google_calendar_toolkit
        self._list_action = settings.google_calendar_list_action
        self._version = settings.google_calendar_toolkit_version

    async def resolve_connected_account_id(
        self,
        entity_id: str,
        connected_account_id: Optional[str] = None,
    ) -> str:
        """
        Pick the connected account that serves calendar calls.

        An explicit id wins. Otherwise the entity's Google Calendar accounts
        are listed and the first active one (or failing that, the first one)
        is used.

        Raises:
            NotFoundError: If the entity has no Google Calendar account
        """
        if connected_account_id:
            return connected_account_id

        connections = await self._composio.list_connections(entity_id, toolkit_slug=self._toolkit)
        matching = [
            c for c in connections
            if c.id and (c.toolkit_slug or "").lower() == self._toolkit.lower()
        ]
        if not matching:
            raise NotFoundError(
                "No Google Calendar connection found",
                f"Entity {entity_id} has not connected Google Calendar",
            )

        active = [c for c in matching if c.is_active]
        return (active or matching)[0].id

    async def list_upcoming_events(
        self,
        entity_id: str,
        connected_account_id: Optional[str] = None,
        max_results: int = DEFAULT_MAX_RESULTS,
        time_min: Optional[datetime] = None,
    ) -> List[Dict[str, Any]]:
        """
        List upcoming single-instance events on the primary calendar.

        Args:
            entity_id: The entity whose calendar is read
            connected_account_id: Optional explicit connected account
            max_results: Maximum number of events to return
            time_min: Minimum start time (default: now)

        Returns:
            List of event dictionaries, ordered by start time
        """
        account_id = await self.resolve_connected_account_id(entity_id, connected_account_id)

        if time_min is None:
            time_min = datetime.now(timezone.utc)

        result = await self._composio.execute_tool(
            self._list_action,
            user_id=entity_id,
            arguments={
                "calendarId": "primary",
                "maxResults": max_results,
                "timeMin": time_min.isoformat().replace("+00:00", "Z"),
                "singleEvents": True,
                "orderBy": "startTime",
            },
            connected_account_id=account_id,
            version=self._version,
        )
        return extract_events(result)


def extract_events(result: Any) -> List[Dict[str, Any]]:
    """Pull the event list out of a tool result; empty if the shape has none."""
    data = get_field(result, "data", default={})
    candidates = [
        get_field(data, "items"),
        get_field(get_field(data, "response_data", default={}), "items"),
        get_field(result, "items"),
    ]
    for items in candidates:
        if isinstance(items, list):
            return items
    return []
