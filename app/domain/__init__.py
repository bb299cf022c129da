"""
app/domain package marker.
"""

from app.domain.identity import SubmitterIdentity
from app.domain.uploads import (
    AcceptedRow,
    DedupRegistry,
    ParsedRow,
    RejectedRow,
    UploadOutcome,
    UploadType,
    UserUploadStats,
)

__all__ = [
    "AcceptedRow",
    "DedupRegistry",
    "ParsedRow",
    "RejectedRow",
    "SubmitterIdentity",
    "UploadOutcome",
    "UploadType",
    "UserUploadStats",
]
