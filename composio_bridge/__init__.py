"""
Composio bridge - Python package.

A small FastAPI backend between a frontend web client and the Composio
integration platform:
- Connected account listing, OAuth initiation and disconnect
- OAuth callback redirect back to the frontend
- Google Calendar event listing through Composio tools
"""

__all__ = [
    "config",
    "errors",
    "models",
    "gateway",
    "deps",
    "integrations",
    "api",
]
