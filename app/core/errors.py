"""Error taxonomy and JSON error rendering.

Every error response body is a JSON object with at least an ``error``
string.  Validation errors always carry ``details``; upstream errors carry
them only outside production so internal messages never leak in prod.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import SETTINGS

logger = logging.getLogger(__name__)


class LmsError(Exception):
    status_code = 500

    def __init__(self, message: str, *, details: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(LmsError):
    status_code = 400


class AuthenticationError(LmsError):
    status_code = 401


class AuthorizationError(LmsError):
    status_code = 403


class NotFoundError(LmsError):
    status_code = 404


class UpstreamError(LmsError):
    """Data store failure or any unexpected error while building a report."""

    status_code = 500


def error_body(exc: LmsError) -> dict[str, Any]:
    body: dict[str, Any] = {"error": exc.message}
    if exc.details is None:
        return body
    if isinstance(exc, UpstreamError) and SETTINGS.is_prod:
        return body
    body["details"] = exc.details
    return body


async def _lms_error_handler(_request: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, LmsError)
    headers = None
    if isinstance(exc, AuthenticationError):
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(error_body(exc), status_code=exc.status_code, headers=headers)


async def _http_error_handler(_request: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, StarletteHTTPException)
    return JSONResponse(
        {"error": exc.detail},
        status_code=exc.status_code,
        headers=getattr(exc, "headers", None),
    )


async def _request_validation_handler(
    _request: Request, exc: Exception
) -> JSONResponse:
    assert isinstance(exc, RequestValidationError)
    return JSONResponse(
        {
            "error": "Invalid request parameters",
            "details": _jsonable_errors(exc.errors()),
        },
        status_code=400,
    )


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    body: dict[str, Any] = {"error": "Internal server error"}
    if not SETTINGS.is_prod:
        body["details"] = str(exc)
    return JSONResponse(body, status_code=500)


def _jsonable_errors(errors: Any) -> list[dict[str, Any]]:
    # pydantic puts the raw exception object under ctx["error"] for some
    # validators; it is not JSON-serializable.
    cleaned = []
    for err in errors:
        item = {k: v for k, v in dict(err).items() if k not in ("ctx", "url")}
        if "ctx" in err:
            item["ctx"] = {k: str(v) for k, v in err["ctx"].items()}
        cleaned.append(item)
    return cleaned


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(LmsError, _lms_error_handler)
    app.add_exception_handler(StarletteHTTPException, _http_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)


def validation_details(errors: Any) -> list[dict[str, Any]]:
    """Public wrapper for routes that validate with pydantic by hand."""
    return _jsonable_errors(errors)
