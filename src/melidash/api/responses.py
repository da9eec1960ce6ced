"""
JSON envelopes and exception handlers shared by every router.
"""
from typing import Any

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..utils.exceptions import MeliDashError, ValidationError
from ..utils.logger import get_logger

logger = get_logger(__name__)


def ok(data: Any = None, message: str | None = None) -> dict:
    """Success envelope: ``{"success": true, "data": ...}``."""
    body = {"success": True, "data": jsonable_encoder(data)}
    if message:
        body["message"] = message
    return body


def error_body(error: str, details: Any = None) -> dict:
    body = {"success": False, "error": error}
    if details:
        body["details"] = jsonable_encoder(details)
    return body


async def melidash_error_handler(request: Request, exc: MeliDashError):
    details = exc.errors if isinstance(exc, ValidationError) else None
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=error_body(exc.message, details))


async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content=error_body("Invalid data", exc.errors()))


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content=error_body(str(exc.detail)))


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content=error_body("Internal server error"))


def install_error_handlers(app: FastAPI):
    app.add_exception_handler(MeliDashError, melidash_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
