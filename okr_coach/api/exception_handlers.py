"""
Global exception handlers for FastAPI.

Every error leaves the API as ``{"error": {"type": ..., "message": ...}}``.
"""

from typing import Dict, Type

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

import structlog

from okr_coach.core.exceptions import (
    CoachingSystemError,
    ConfigurationError,
    InvalidTransitionError,
    SessionCompletedError,
    SessionNotFoundError,
    ValidationError,
)

log = structlog.get_logger(__name__)

# Errors the caller can act on; any other CoachingSystemError is a 500
CLIENT_ERROR_STATUS: Dict[Type[CoachingSystemError], int] = {
    SessionNotFoundError: status.HTTP_404_NOT_FOUND,
    SessionCompletedError: status.HTTP_400_BAD_REQUEST,
    InvalidTransitionError: status.HTTP_400_BAD_REQUEST,
    ValidationError: status.HTTP_400_BAD_REQUEST,
}


def status_for(exc: CoachingSystemError) -> int:
    for error_type, code in CLIENT_ERROR_STATUS.items():
        if isinstance(exc, error_type):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def _error_response(status_code: int, error_type: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": {"type": error_type, "message": message}},
    )


def setup_exception_handlers(app: FastAPI):
    """Register handlers for configuration, coaching and unexpected errors."""

    @app.exception_handler(ConfigurationError)
    async def configuration_error_handler(
        request: Request,
        exc: ConfigurationError,
    ) -> JSONResponse:
        log.error("configuration_error", path=request.url.path, message=exc.message)
        # Details stay in the log
        return _error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "ConfigurationError",
            "Server configuration error",
        )

    @app.exception_handler(CoachingSystemError)
    async def coaching_system_error_handler(
        request: Request,
        exc: CoachingSystemError,
    ) -> JSONResponse:
        status_code = status_for(exc)
        log.bind(
            path=request.url.path,
            method=request.method,
            error_type=type(exc).__name__,
        ).warning("request_error", message=exc.message, status_code=status_code)
        return _error_response(status_code, type(exc).__name__, exc.message)

    @app.exception_handler(Exception)
    async def generic_exception_handler(
        request: Request,
        exc: Exception,
    ) -> JSONResponse:
        log.bind(
            path=request.url.path,
            method=request.method,
            error_type=type(exc).__name__,
        ).error("unhandled_exception", message=str(exc), exc_info=exc)
        return _error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "InternalServerError",
            "An unexpected error occurred",
        )
