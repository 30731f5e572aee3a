"""
Google Calendar integration for the Composio bridge.

Lists upcoming events through the platform's calendar tool.
"""
from .client import CalendarClient, extract_events
from .routes import router

__all__ = [
    "CalendarClient",
    "extract_events",
    # API Router
    "router",
]
