"""
app/schemas/auth.py

Request and response schemas for login endpoints.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from app.domain.uploads import RegionUploadStats
from app.schemas.upload import UploadStatsResponse
from app.services.auth_service import LoginResult


class LoginRequest(BaseModel):
    """
    Missing fields are reported by the login service, not by validation.
    """

    username: str | None = None
    password: str | None = None


class RegionStatsResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    region: str
    client_files: int = Field(0, ge=0, alias="clientFiles")
    contact_files: int = Field(0, ge=0, alias="contactFiles")
    result_files: int = Field(0, ge=0, alias="resultFiles")
    accepted_records: int = Field(0, ge=0, alias="acceptedRecords")
    rejected_records: int = Field(0, ge=0, alias="rejectedRecords")

    @classmethod
    def from_domain(cls, stats: RegionUploadStats) -> RegionStatsResponse:
        return cls(
            region=stats.region,
            client_files=stats.client_files,
            contact_files=stats.contact_files,
            result_files=stats.result_files,
            accepted_records=stats.accepted_records,
            rejected_records=stats.rejected_records,
        )


class LoginResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    token: str
    authenticated: bool = True
    message: str
    stats: UploadStatsResponse
    region_stats: list[RegionStatsResponse] | None = Field(None, alias="regionStats")

    @classmethod
    def from_result(cls, result: LoginResult) -> LoginResponse:
        return cls(
            token=result.token,
            message=result.message,
            stats=UploadStatsResponse.from_domain(result.stats),
            region_stats=[RegionStatsResponse.from_domain(item) for item in result.region_stats] or None,
        )
