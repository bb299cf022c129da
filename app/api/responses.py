"""
app/api/responses.py

Success envelope shared by every endpoint:

    {"success": true, "request": "<path>", "payload": {...}}
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


def client_address(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def api_response(request: Request, status_code: int, payload: Any) -> JSONResponse:
    logger.info("client %s accessed %s", client_address(request), request.url.path)
    return JSONResponse(
        status_code=status_code,
        content={
            "success": True,
            "request": request.url.path,
            "payload": jsonable_encoder(payload, by_alias=True) if payload is not None else "",
        },
    )
