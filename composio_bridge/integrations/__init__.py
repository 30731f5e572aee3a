"""
Integrations package for the Composio bridge.

Each integration has its own subfolder exposing a FastAPI router.
"""
from .composio import router as composio_router
from .google_calendar import router as calendar_router

__all__ = [
    "composio_router",
    "calendar_router",
]
