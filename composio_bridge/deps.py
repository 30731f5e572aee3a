"""
FastAPI dependencies.

The gateway and settings are owned by the application (see ``create_app``)
and read back from ``app.state`` for each request.

Usage:
    @router.get("/thing")
    async def thing(composio: ComposioGateway = Depends(get_composio)):
        ...
"""
from __future__ import annotations

from fastapi import Request

from .config import Settings
from .gateway import ComposioGateway


def get_composio(request: Request) -> ComposioGateway:
    """Get the application's Composio gateway."""
    return request.app.state.composio


def get_app_settings(request: Request) -> Settings:
    """Get the settings the application was created with."""
    return request.app.state.settings
