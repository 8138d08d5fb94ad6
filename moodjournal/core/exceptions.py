"""
Global exception handlers for FastAPI.

Maps journal exceptions to HTTP responses, eliminating try/except
boilerplate from routers. Register with register_exception_handlers(app).
"""

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from moodjournal.models.entry import (
    AuthRequiredError,
    ConflictPendingError,
    EntryDecodeError,
    EntryValidationError,
    NetworkUnavailableError,
    NoPendingConflictError,
    RemoteDeleteError,
    RemoteReadError,
    RemoteWriteError,
    SyncInProgressError,
)

logger = logging.getLogger(__name__)


def error_response(status_code: int, detail: str, code: Optional[str] = None) -> JSONResponse:
    """Build a standardized error JSON response."""
    content: dict = {"detail": detail}
    if code:
        content["code"] = code
    return JSONResponse(status_code=status_code, content=content)


def register_exception_handlers(app: FastAPI) -> None:
    """Register all journal exception handlers on the FastAPI app."""

    # --- Gate / identity ---

    @app.exception_handler(NetworkUnavailableError)
    async def _network_unavailable(request: Request, exc: NetworkUnavailableError) -> JSONResponse:
        return error_response(503, "No internet connection.", "NETWORK_UNAVAILABLE")

    @app.exception_handler(AuthRequiredError)
    async def _auth_required(request: Request, exc: AuthRequiredError) -> JSONResponse:
        return error_response(401, "Sign in required.", "AUTH_REQUIRED")

    # --- Sync transaction ---

    @app.exception_handler(ConflictPendingError)
    async def _conflict_pending(request: Request, exc: ConflictPendingError) -> JSONResponse:
        return error_response(
            409,
            "An entry replacement is awaiting confirmation. Confirm or cancel it first.",
            "CONFLICT_PENDING",
        )

    @app.exception_handler(SyncInProgressError)
    async def _sync_in_progress(request: Request, exc: SyncInProgressError) -> JSONResponse:
        return error_response(409, "Another entry change is in progress.", "SYNC_IN_PROGRESS")

    @app.exception_handler(NoPendingConflictError)
    async def _no_pending(request: Request, exc: NoPendingConflictError) -> JSONResponse:
        return error_response(404, "No entry replacement is pending.", "NO_PENDING_CONFLICT")

    @app.exception_handler(EntryValidationError)
    async def _validation(request: Request, exc: EntryValidationError) -> JSONResponse:
        return error_response(422, str(exc), "VALIDATION_FAILURE")

    # --- Remote store ---

    @app.exception_handler(RemoteWriteError)
    async def _remote_write(request: Request, exc: RemoteWriteError) -> JSONResponse:
        logger.error("Remote write failed: %s", exc)
        return error_response(502, "Could not save the entry.", "REMOTE_WRITE_FAILURE")

    @app.exception_handler(RemoteDeleteError)
    async def _remote_delete(request: Request, exc: RemoteDeleteError) -> JSONResponse:
        logger.error("Remote delete failed: %s", exc)
        return error_response(502, "Could not replace the entry.", "REMOTE_DELETE_FAILURE")

    @app.exception_handler(RemoteReadError)
    async def _remote_read(request: Request, exc: RemoteReadError) -> JSONResponse:
        logger.error("Remote read failed: %s", exc)
        return error_response(502, "Could not load entries.", "REMOTE_READ_FAILURE")

    @app.exception_handler(EntryDecodeError)
    async def _decode(request: Request, exc: EntryDecodeError) -> JSONResponse:
        logger.error("Entry decode failed: %s", exc)
        return error_response(502, "Stored entry is malformed.", "DECODE_FAILURE")

    # --- Catch-all ---

    @app.exception_handler(Exception)
    async def _unhandled(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
        return error_response(500, "Internal server error.", "INTERNAL_ERROR")
