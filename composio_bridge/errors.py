"""
Error taxonomy and FastAPI exception handlers.

Every error leaves the API as a JSON body of the form
``{"error": ..., "message": ..., **extra}``.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response

logger = logging.getLogger(__name__)


class BridgeError(Exception):
    """Base class for errors rendered as ``{error, message}`` responses."""

    status_code = 500

    def __init__(
        self,
        error: str,
        message: Optional[str] = None,
        **extra: Any,
    ):
        super().__init__(message or error)
        self.error = error
        self.message = message or error
        self.extra = extra

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.error, "message": self.message, **self.extra}


class ValidationError(BridgeError):
    """A required input is missing or malformed."""
    status_code = 400


class NotFoundError(BridgeError):
    """No matching connected account."""
    status_code = 404


class UpstreamError(BridgeError):
    """The Composio platform call failed."""
    status_code = 500

    @classmethod
    def wrap(cls, error: str, exc: BaseException) -> "UpstreamError":
        return cls(error, str(exc) or exc.__class__.__name__)


class ServerError(BridgeError):
    """Uncaught exception, rendered by the fallback handler."""
    status_code = 500


# --------------------------------------------------------------------------- #
# Handlers
# --------------------------------------------------------------------------- #

async def handle_bridge_error(request: Request, exc: BridgeError) -> JSONResponse:
    return JSONResponse(exc.to_dict(), status_code=exc.status_code)


async def handle_request_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    details = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        details.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    error = ValidationError("Invalid request", "; ".join(details) or "Invalid request")
    return JSONResponse(error.to_dict(), status_code=error.status_code)


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("[Server Error] %s %s", request.method, request.url.path)
    error = ServerError("Internal server error", str(exc) or exc.__class__.__name__)
    return JSONResponse(error.to_dict(), status_code=error.status_code)


async def catch_unexpected_errors(request: Request, call_next) -> Response:
    """HTTP middleware rendering uncaught exceptions as ``ServerError`` JSON."""
    try:
        return await call_next(request)
    except Exception as exc:
        return await handle_unexpected_error(request, exc)


def register_error_handlers(app: FastAPI) -> None:
    """
    Attach the bridge's exception handlers to ``app``.

    Call before adding CORSMiddleware: the fallback runs as middleware so
    that it sits inside the CORS layer and 500s keep their CORS headers.
    """
    app.add_exception_handler(BridgeError, handle_bridge_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.middleware("http")(catch_unexpected_errors)
