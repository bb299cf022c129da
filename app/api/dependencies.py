"""
app/api/dependencies.py

Shared FastAPI dependencies for request validation and authentication.
"""

from __future__ import annotations

import secrets

import jwt
from fastapi import Depends, File, Header, HTTPException, Request, UploadFile, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from app.config import DashboardSettings, get_dashboard_settings
from app.domain.identity import SubmitterIdentity
from app.errors import AuthError, ValidationError
from app.security.tokens import TokenService, get_token_service

CSV_CONTENT_TYPES = {
    "text/csv",
    "application/csv",
    "application/vnd.ms-excel",
}

# Matches the width of upload_statistics.uploaded_file.
MAX_FILE_NAME_LENGTH = 255

dashboard_basic_auth = HTTPBasic(auto_error=False)


def get_csv_upload(file: UploadFile | None = File(default=None)) -> UploadFile:
    """
    Validate that a file was sent and that it is a CSV by extension or MIME type.
    """

    if file is None or not file.filename:
        raise ValidationError("No file provided!")

    if len(file.filename) > MAX_FILE_NAME_LENGTH:
        raise ValidationError(f"File name is too long. Maximum length is {MAX_FILE_NAME_LENGTH} characters.")

    filename = file.filename.strip().lower()
    content_type = (file.content_type or "").strip().lower()

    is_csv_filename = filename.endswith(".csv")
    is_csv_content_type = content_type in CSV_CONTENT_TYPES

    if not is_csv_filename and not is_csv_content_type:
        raise ValidationError("Invalid file type. Only CSV files are allowed!")

    return file


def _extract_token(authorization: str | None, x_access_token: str | None) -> str | None:
    raw = (x_access_token or authorization or "").strip()
    scheme, _, credentials = raw.partition(" ")
    if scheme.lower() == "bearer":
        raw = credentials.strip()
    return raw or None


def get_current_identity(
    request: Request,
    authorization: str | None = Header(default=None),
    x_access_token: str | None = Header(default=None, alias="x-access-token"),
    token_service: TokenService = Depends(get_token_service),
) -> SubmitterIdentity:
    """
    Verify the request token and attach the identity to ``request.state``.

    A bad signature or an expired token propagates ``jwt.PyJWTError``.
    """

    token = _extract_token(authorization, x_access_token)
    if token is None:
        raise AuthError("Auth token is not supplied.")

    identity = token_service.verify(token)
    request.state.identity = identity
    return identity


def get_optional_identity(
    request: Request,
    authorization: str | None = Header(default=None),
    x_access_token: str | None = Header(default=None, alias="x-access-token"),
    token_service: TokenService = Depends(get_token_service),
) -> SubmitterIdentity | None:
    """
    Like ``get_current_identity`` but anonymous callers and unreadable
    tokens yield ``None``.
    """

    token = _extract_token(authorization, x_access_token)
    if token is None:
        return None
    try:
        identity = token_service.verify(token)
    except jwt.PyJWTError:
        return None
    request.state.identity = identity
    return identity


def require_dashboard_user(
    credentials: HTTPBasicCredentials | None = Depends(dashboard_basic_auth),
    settings: DashboardSettings = Depends(get_dashboard_settings),
) -> str:
    """
    HTTP Basic gate for dashboard endpoints.
    """

    unauthorized = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Unauthorized",
        headers={"WWW-Authenticate": "Basic"},
    )
    if credentials is None:
        raise unauthorized

    expected = settings.users.get(credentials.username)
    if expected is None or not secrets.compare_digest(credentials.password.encode(), expected.encode()):
        raise unauthorized
    return credentials.username
