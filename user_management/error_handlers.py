"""Global exception handlers that render problem responses."""

from __future__ import annotations

import logging
from typing import Dict, List

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .errors import UserManagementError, UserNotFoundError, ValidationFailedError

logger = logging.getLogger("usermanagement.service")


def register_error_handlers(app: FastAPI) -> None:
    """Register the domain, validation and catch-all handlers on ``app``."""

    @app.exception_handler(UserManagementError)
    async def handle_user_management_error(request: Request, exc: UserManagementError):
        headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
        return JSONResponse(status_code=exc.status_code, content=exc.to_response(), headers=headers)

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        errors = exc.errors()

        # Only UUID-shaped identifiers name a user, anything else is unknown.
        for error in errors:
            location = error.get("loc", ())
            if location and location[0] == "path":
                not_found = UserNotFoundError(str(error.get("input", "")))
                return JSONResponse(status_code=not_found.status_code, content=not_found.to_response())

        logger.info("Validation failed on %s: %s", request.url.path, errors)
        failure = ValidationFailedError(_collect_field_errors(errors))
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=failure.to_response())

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(
            "Unhandled exception while processing %s %s",
            request.method,
            request.url.path,
            exc_info=exc,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Internal server error."},
        )


def _collect_field_errors(errors) -> Dict[str, List[str]]:
    collected: Dict[str, List[str]] = {}
    for error in errors:
        location = [part for part in error.get("loc", ()) if part != "body"]
        # Undecodable JSON is located by character offset, not by field.
        if error.get("type") == "json_invalid" or not location or isinstance(location[0], int):
            field = "body"
        else:
            field = str(location[-1])

        message = error.get("msg", "Invalid value.")
        if error.get("type") == "value_error":
            cause = error.get("ctx", {}).get("error")
            if cause is not None:
                message = str(cause)

        collected.setdefault(field, []).append(message)
    return collected


__all__ = ["register_error_handlers"]
