"""Map account service exceptions onto HTTP responses.

Error bodies keep FastAPI's ``{"detail": "<message>"}`` shape; the message
is human readable and not meant to be parsed.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from ..domain.errors import AccountServiceError, AuthError, Conflict

logger = logging.getLogger(__name__)


def status_for(exc: AccountServiceError) -> int:
    """Return the HTTP status code for a domain exception."""
    if isinstance(exc, AuthError):
        return status.HTTP_401_UNAUTHORIZED
    if isinstance(exc, Conflict):
        return status.HTTP_409_CONFLICT
    # ValidationError, NotFound, InvalidCredentials
    return status.HTTP_400_BAD_REQUEST


def setup_exception_handlers(app: FastAPI) -> None:
    """Register the domain and fallback exception handlers on ``app``."""

    @app.exception_handler(AccountServiceError)
    async def account_error_handler(request: Request, exc: AccountServiceError) -> JSONResponse:
        status_code = status_for(exc)
        logger.info(
            "%s %s rejected with %s: %s",
            request.method,
            request.url.path,
            status_code,
            exc.message,
        )
        headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthError) else None
        return JSONResponse(status_code=status_code, content={"detail": exc.message}, headers=headers)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error("unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal server error"},
        )
