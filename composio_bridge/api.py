from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from .config import Settings, get_settings
from .deps import get_app_settings
from .errors import register_error_handlers
from .gateway import ComposioGateway
from .models import HealthResponse

# Import integration routers
from .integrations.composio.routes import router as composio_router
from .integrations.google_calendar.routes import router as calendar_router

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    for issue in settings.validate_config():
        logger.warning("Configuration: %s", issue)

    logger.info("Backend URL: %s", settings.public_backend_url)
    logger.info("CORS enabled for: %s", ", ".join(settings.allowed_origins))
    logger.info("OAuth Callback: %s", settings.callback_url)
    logger.info("Composio API Key: %s", "configured" if settings.composio_api_key else "missing")
    try:
        yield
    finally:
        await app.state.composio.close()


def create_app(
    settings: Optional[Settings] = None,
    composio: Optional[ComposioGateway] = None,
) -> FastAPI:
    """
    Build the bridge application.

    Args:
        settings: Settings to use (default: cached environment settings)
        composio: Gateway to use (default: one built from settings)

    Returns:
        The configured FastAPI app
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(title="Composio Bridge", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.composio = composio or ComposioGateway.from_settings(settings)

    register_error_handlers(app)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        logger.info("%s %s", request.method, request.url.path)
        return await call_next(request)

    # Browsers may only call in from the frontend; requests without an Origin pass through
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include integration routers
    app.include_router(composio_router)
    app.include_router(calendar_router)

    @app.get("/health", response_model=HealthResponse)
    def health(settings: Settings = Depends(get_app_settings)):
        return HealthResponse(
            status="ok",
            timestamp=datetime.now(timezone.utc),
            composio_api_key="configured" if settings.composio_api_key else "missing",
        )

    return app
