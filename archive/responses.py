"""Regnum Forum Archive — response envelope and exception translation."""

from __future__ import annotations

import logging
from typing import Any

import config
from errors import NotFoundError, StoreUnavailableError
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from models import ApiResponse, ErrorResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

_PARAM_NAMES = {"thread_id": "thread ID", "user_id": "user ID"}


def api_response(data: Any, message: str = "Success", status: int = 200) -> ApiResponse:
    return ApiResponse(
        success=200 <= status < 300, status=status, message=message, data=data
    )


def error_response(status: int, message: str, details: Any = None) -> JSONResponse:
    body = ErrorResponse(status=status, message=message, error=details)
    return JSONResponse(status_code=status, content=body.model_dump())


@config.app.exception_handler(StarletteHTTPException)
async def http_error(request: Request, exc: StarletteHTTPException):
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    if exc.status_code == 404 and message == "Not Found":
        message = "API endpoint not found"
    return error_response(exc.status_code, message)


@config.app.exception_handler(RequestValidationError)
async def validation_error(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    name = str(errors[0]["loc"][-1]) if errors and errors[0].get("loc") else ""
    label = _PARAM_NAMES.get(name, name.replace("_", " "))
    message = f"Invalid {label}" if label else "Invalid request"
    details = [{"loc": list(e.get("loc", ())), "msg": e.get("msg")} for e in errors]
    return error_response(400, message, details)


@config.app.exception_handler(NotFoundError)
async def not_found(request: Request, exc: NotFoundError):
    return error_response(404, str(exc) or "Not found")


@config.app.exception_handler(StoreUnavailableError)
async def store_unavailable(request: Request, exc: StoreUnavailableError):
    logger.error("Archive store error on %s: %s", request.url.path, exc, exc_info=exc)
    details = None if config.IS_PRODUCTION else str(exc)
    return error_response(500, "Archive database unavailable", details)


@config.app.exception_handler(Exception)
async def unexpected_error(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s", request.url.path, exc_info=exc)
    details = None if config.IS_PRODUCTION else str(exc)
    return error_response(500, "Something went wrong", details)
