"""
app/api/routers/upload_router.py

CSV upload HTTP endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request, UploadFile, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.api.dependencies import get_csv_upload, get_current_identity, get_optional_identity
from app.api.responses import api_response
from app.domain.identity import SubmitterIdentity
from app.schemas.upload import StatusResponse, UploadResultResponse
from app.services.csv_upload_service import CSVUploadService, get_csv_upload_service
from db.session import get_db

router = APIRouter(prefix="/upload", tags=["upload"])


@router.get("")
def upload_root(
    request: Request,
    identity: SubmitterIdentity | None = Depends(get_optional_identity),
) -> JSONResponse:
    payload = StatusResponse(authenticated=identity is not None, message="Root path reached")
    return api_response(request, status.HTTP_200_OK, payload)


@router.post("")
async def upload_csv(
    request: Request,
    identity: SubmitterIdentity = Depends(get_current_identity),
    file: UploadFile = Depends(get_csv_upload),
    db: Session = Depends(get_db),
    upload_service: CSVUploadService = Depends(get_csv_upload_service),
) -> JSONResponse:
    """
    Validate, deduplicate and store one CSV file of clients, contacts or results.
    """

    try:
        content = await file.read()
        outcome = await upload_service.process_upload(
            file_name=file.filename or "",
            content=content,
            identity=identity,
            db=db,
        )
    finally:
        await file.close()

    if outcome.accepted_count == 0:
        payload = UploadResultResponse.from_outcome(outcome, message="File contained no rows to import.")
        return api_response(request, status.HTTP_200_OK, payload)

    payload = UploadResultResponse.from_outcome(
        outcome,
        message="File uploaded, processed, and saved successfully!",
    )
    return api_response(request, status.HTTP_201_CREATED, payload)
