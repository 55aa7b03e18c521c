"""
Exception handlers mapping errors onto the response envelope.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.responses import api_response
from utils.errors import AppError, ValidationFailed

logger = logging.getLogger(__name__)

_LOCATION_PREFIXES = {"body", "query", "path", "header"}


def field_errors(errors: Iterable[Dict[str, Any]]) -> List[Dict[str, str]]:
    """Flatten pydantic error dicts into ``{field, message}`` pairs."""
    flattened = []
    for err in errors:
        loc = list(err.get("loc", ()))
        if loc and loc[0] in _LOCATION_PREFIXES:
            loc = loc[1:]
        message = str(err.get("msg", "Invalid value"))
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        flattened.append({
            "field": ".".join(str(part) for part in loc) or "body",
            "message": message,
        })
    return flattened


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ValidationFailed)
    async def validation_failed(_request: Request, exc: ValidationFailed):
        return api_response(False, exc.message, errors=exc.errors, status_code=exc.status_code)

    @app.exception_handler(AppError)
    async def app_error(_request: Request, exc: AppError):
        return api_response(False, exc.message, status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def request_validation(request: Request, exc: RequestValidationError):
        failed = ValidationFailed(field_errors(exc.errors()))
        logger.debug("Validation failed on %s: %s", request.url.path, failed.errors)
        return api_response(False, failed.message, errors=failed.errors, status_code=failed.status_code)

    @app.exception_handler(StarletteHTTPException)
    async def http_error(_request: Request, exc: StarletteHTTPException):
        return api_response(False, str(exc.detail), status_code=exc.status_code)

    @app.exception_handler(Exception)
    async def unhandled(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return api_response(False, "Internal server error", status_code=500)
