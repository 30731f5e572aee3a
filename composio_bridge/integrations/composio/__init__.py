"""
Composio connection management.

Provides the connect / callback / disconnect flow for third-party apps.
"""
from .routes import router

__all__ = [
    "router",
]
