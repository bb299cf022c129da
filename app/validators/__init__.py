"""
app/validators package marker.
"""

from app.validators.upload_row_validator import RejectionReason, UploadRowValidator, is_valid_ctc_number

__all__ = [
    "RejectionReason",
    "UploadRowValidator",
    "is_valid_ctc_number",
]
