"""
app/schemas/upload.py

Response schemas for upload endpoints.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from app.domain.uploads import RejectedRow, UploadOutcome, UserUploadStats


class UploadStatsResponse(BaseModel):
    """
    Per-submitter upload totals.
    """

    model_config = ConfigDict(populate_by_name=True)

    client_files: int = Field(0, ge=0, alias="clientFiles")
    contact_files: int = Field(0, ge=0, alias="contactFiles")
    result_files: int = Field(0, ge=0, alias="resultFiles")
    accepted_records: int = Field(0, ge=0, alias="acceptedRecords")
    rejected_records: int = Field(0, ge=0, alias="rejectedRecords")
    last_upload_date: datetime | None = Field(None, alias="lastUploadDate")

    @classmethod
    def from_domain(cls, stats: UserUploadStats) -> UploadStatsResponse:
        return cls(
            client_files=stats.client_files,
            contact_files=stats.contact_files,
            result_files=stats.result_files,
            accepted_records=stats.accepted_records,
            rejected_records=stats.rejected_records,
            last_upload_date=stats.last_upload_date,
        )


class RejectedRowResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    row_number: int = Field(..., ge=1, alias="rowNumber")
    values: list[str]
    rejection_reason: str = Field(..., alias="rejectionReason")

    @classmethod
    def from_domain(cls, row: RejectedRow) -> RejectedRowResponse:
        return cls(row_number=row.row_number, values=list(row.values), rejection_reason=row.rejection_reason)


class UploadResultResponse(BaseModel):
    """
    Payload returned after a processed upload.
    """

    model_config = ConfigDict(populate_by_name=True)

    token: str | None = None
    authenticated: bool = True
    message: str
    rejected: bool = False
    rejected_rows: list[RejectedRowResponse] = Field(default_factory=list, alias="rejectedRows")
    stats: UploadStatsResponse

    @classmethod
    def from_outcome(cls, outcome: UploadOutcome, *, message: str) -> UploadResultResponse:
        return cls(
            message=message,
            rejected=outcome.rejected,
            rejected_rows=[RejectedRowResponse.from_domain(row) for row in outcome.rejected_rows],
            stats=UploadStatsResponse.from_domain(outcome.stats),
        )


class StatusResponse(BaseModel):
    """
    Plain token/authenticated/message payload.
    """

    token: str | None = None
    authenticated: bool = False
    message: str
