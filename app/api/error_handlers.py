"""
app/api/error_handlers.py

Centralized translation of exceptions into the failure envelope:

    {"success": false, "request": "<path>",
     "payload": {"token": null, "authenticated": <bool>, "message": "...",
                 "rejectedRows": [...]},     # all-rows-rejected only
     "stack": "..."}                         # API_DEBUG_ERRORS only
"""

from __future__ import annotations

import logging
import traceback
from typing import Any

import jwt
from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import get_api_settings
from app.errors import AllRowsRejectedError, AppError
from app.schemas.upload import RejectedRowResponse

logger = logging.getLogger(__name__)


def _error_response(
    request: Request,
    *,
    status_code: int,
    message: str,
    exc: BaseException,
    extra: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    if status_code >= 500:
        logger.error(
            "Request failed path=%s status=%s message=%s",
            request.url.path,
            status_code,
            message,
            exc_info=(type(exc), exc, exc.__traceback__),
        )
    else:
        logger.warning("Request rejected path=%s status=%s message=%s", request.url.path, status_code, message)

    payload: dict[str, Any] = {
        "token": None,
        "authenticated": getattr(request.state, "identity", None) is not None,
        "message": message,
    }
    if extra:
        payload.update(extra)

    body: dict[str, Any] = {"success": False, "request": request.url.path, "payload": payload}
    if get_api_settings().debug_errors:
        body["stack"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body), headers=headers)


async def handle_app_error(request: Request, exc: AppError) -> JSONResponse:
    extra = None
    if isinstance(exc, AllRowsRejectedError):
        extra = {
            "rejectedRows": [
                RejectedRowResponse.from_domain(row).model_dump(by_alias=True) for row in exc.rejected_rows
            ]
        }
    return _error_response(request, status_code=exc.status_code, message=exc.message, exc=exc, extra=extra)


async def handle_token_error(request: Request, exc: jwt.PyJWTError) -> JSONResponse:
    message = "Token has expired." if isinstance(exc, jwt.ExpiredSignatureError) else f"Invalid token: {exc}"
    return _error_response(request, status_code=status.HTTP_401_UNAUTHORIZED, message=message, exc=exc)


async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return _error_response(
        request,
        status_code=exc.status_code,
        message=str(exc.detail),
        exc=exc,
        headers=getattr(exc, "headers", None),
    )


async def handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    problems = "; ".join(
        f"{'.'.join(str(part) for part in error.get('loc', ()))}: {error.get('msg')}" for error in exc.errors()
    )
    return _error_response(
        request,
        status_code=status.HTTP_400_BAD_REQUEST,
        message=f"Invalid request: {problems}",
        exc=exc,
    )


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    return _error_response(
        request,
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        message="Internal server error.",
        exc=exc,
    )


def register_exception_handlers(application: FastAPI) -> None:
    application.add_exception_handler(AppError, handle_app_error)
    application.add_exception_handler(jwt.PyJWTError, handle_token_error)
    application.add_exception_handler(StarletteHTTPException, handle_http_exception)
    application.add_exception_handler(RequestValidationError, handle_request_validation_error)
    application.add_exception_handler(Exception, handle_unexpected_error)
