"""
app/schemas package marker.
"""

from app.schemas.auth import LoginRequest, LoginResponse, RegionStatsResponse
from app.schemas.dashboard import SummaryQuery
from app.schemas.upload import (
    RejectedRowResponse,
    StatusResponse,
    UploadResultResponse,
    UploadStatsResponse,
)

__all__ = [
    "LoginRequest",
    "LoginResponse",
    "RegionStatsResponse",
    "RejectedRowResponse",
    "StatusResponse",
    "SummaryQuery",
    "UploadResultResponse",
    "UploadStatsResponse",
]
