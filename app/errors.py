"""
app/errors.py

Client-facing error taxonomy. Every error carries the HTTP status the
centralized handler answers with.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from app.domain.uploads import RejectedRow


class AppError(Exception):
    """
    Base class for errors surfaced to API callers.
    """

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(AppError):
    """Missing credentials, missing file or malformed input."""

    status_code = 400


class InvalidUploadTypeError(ValidationError):
    """File name does not carry a known upload type."""

    def __init__(self, upload_type: str | None) -> None:
        super().__init__(f"Invalid upload type: {upload_type}")
        self.upload_type = upload_type


class CSVParseError(ValidationError):
    """The uploaded buffer could not be read as UTF-8 CSV."""


class AuthError(AppError):
    """Missing or invalid credentials, or a caller not allowed to upload."""

    status_code = 401


class ServiceUnavailableError(AppError):
    """A required upstream service timed out or answered with a failure."""

    status_code = 502


class AllRowsRejectedError(AppError):
    """
    Every data row of an upload was rejected; nothing was written.
    """

    status_code = 400

    def __init__(self, rejected_rows: Sequence[RejectedRow]) -> None:
        super().__init__("All rows were rejected.")
        self.rejected_rows = list(rejected_rows)


class UploadPersistenceError(AppError):
    """Accepted rows or their statistics record could not be persisted."""

    status_code = 500
