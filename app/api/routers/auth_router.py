"""
app/api/routers/auth_router.py

Login and token check endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.api.dependencies import get_current_identity
from app.api.responses import api_response
from app.domain.identity import SubmitterIdentity
from app.schemas.auth import LoginRequest, LoginResponse
from app.schemas.upload import StatusResponse
from app.services.auth_service import AuthenticationService, get_authentication_service
from db.session import get_db

router = APIRouter(tags=["auth"])


@router.post("/login")
def login(
    request: Request,
    body: LoginRequest | None = None,
    db: Session = Depends(get_db),
    auth_service: AuthenticationService = Depends(get_authentication_service),
) -> JSONResponse:
    """
    Exchange credentials for a signed token plus the caller's upload totals.
    """

    credentials = body or LoginRequest()
    result = auth_service.login(credentials.username, credentials.password, db=db)
    return api_response(request, status.HTTP_200_OK, LoginResponse.from_result(result))


@router.get("/protected")
def protected(
    request: Request,
    identity: SubmitterIdentity = Depends(get_current_identity),
) -> JSONResponse:
    payload = StatusResponse(authenticated=identity is not None, message="Protected route has been reached!")
    return api_response(request, status.HTTP_200_OK, payload)
