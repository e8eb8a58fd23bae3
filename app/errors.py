# app/errors.py
"""Application exceptions and the FastAPI handlers that turn them into JSON errors."""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class ConciergeError(Exception):
    """Base exception carrying the HTTP status code to respond with."""

    def __init__(self, message: str, status_code: int = 500):
        super().__init__(message)
        self.status_code = status_code


class AuthenticationError(ConciergeError):
    def __init__(self, message: str = "Authentication required"):
        super().__init__(message, status_code=401)


class PermissionDeniedError(ConciergeError):
    def __init__(self, message: str = "Admin access required"):
        super().__init__(message, status_code=403)


class NotFoundError(ConciergeError):
    def __init__(self, resource: str):
        super().__init__(f"{resource} not found", status_code=404)


def register_error_handlers(app: FastAPI) -> None:
    """Register centralized exception handlers on the FastAPI app."""

    @app.exception_handler(ConciergeError)
    async def handle_concierge_error(_request: Request, exc: ConciergeError):
        return JSONResponse({"error": str(exc)}, status_code=exc.status_code)

    @app.exception_handler(SQLAlchemyError)
    async def handle_db_error(request: Request, exc: SQLAlchemyError):
        logger.exception("Database error on %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse({"error": "Database error"}, status_code=500)

    @app.exception_handler(Exception)
    async def handle_unexpected(_request: Request, exc: Exception):
        logger.exception("Unhandled error: %s", exc)
        return JSONResponse({"error": "Internal server error"}, status_code=500)
