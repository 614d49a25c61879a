"""
oishine_backoffice.api.errors

Exception handlers that give every failure the same wire shape: `{error, status}`.

Responsibilities:
- HTTPException and ServiceError -> their status code with the message as `error`.
- Request validation errors -> 400.
- Anything else -> logged with traceback, generic 500.
"""

from __future__ import annotations

from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.status import HTTP_400_BAD_REQUEST, HTTP_500_INTERNAL_SERVER_ERROR

from oishine_backoffice.observability.logging import get_logger
from oishine_backoffice.services.errors import ServiceError

log = get_logger(__name__)


def error_body(message: str, status_code: int) -> dict[str, Any]:
    return {"error": message, "status": status_code}


async def _http_error(_: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        error_body(str(exc.detail), exc.status_code),
        status_code=exc.status_code,
        headers=getattr(exc, "headers", None),
    )


async def _service_error(_: Request, exc: ServiceError) -> JSONResponse:
    return JSONResponse(error_body(exc.message, exc.status_code), status_code=exc.status_code)


async def _validation_error(_: Request, exc: RequestValidationError) -> JSONResponse:
    first = exc.errors()[0] if exc.errors() else {}
    field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    reason = first.get("msg", "invalid value")
    message = f"Invalid {field}: {reason}" if field else "Invalid request"
    return JSONResponse(
        error_body(message, HTTP_400_BAD_REQUEST), status_code=HTTP_400_BAD_REQUEST
    )


async def _unhandled_error(request: Request, exc: Exception) -> JSONResponse:
    # DB outages end up here, never as a false authorization decision.
    log.error("unhandled_error", path=request.url.path, exc_info=exc)
    return JSONResponse(
        error_body("Internal server error", HTTP_500_INTERNAL_SERVER_ERROR),
        status_code=HTTP_500_INTERNAL_SERVER_ERROR,
    )


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, _http_error)
    app.add_exception_handler(ServiceError, _service_error)
    app.add_exception_handler(RequestValidationError, _validation_error)
    app.add_exception_handler(Exception, _unhandled_error)
