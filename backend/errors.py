"""
Error taxonomy for the VibeIn backend.

Services raise these; handlers registered on the app turn them into
`{"error": "..."}` JSON responses with the matching status code.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class VibeInError(Exception):
    """Base exception. Subclasses pin the HTTP status they map to."""

    status_code: int = 400

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class InvalidRequest(VibeInError):
    status_code = 400


class SessionNotFound(VibeInError):
    status_code = 404

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__("Session not found")


class CatalogUnavailable(VibeInError):
    """The catalog answered with an error or could not be reached."""

    status_code = 502


class CatalogNotConfigured(VibeInError):
    status_code = 503


class CatalogTimeout(VibeInError):
    status_code = 504


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(VibeInError)
    async def _vibein_error_handler(_request: Request, exc: VibeInError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def _validation_error_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
        # Malformed bodies are client errors like any other missing field
        logger.debug("Rejected request body: %s", exc.errors())
        return JSONResponse(status_code=400, content={"error": "Invalid request body"})
