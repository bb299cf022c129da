"""
app/repositories package marker.
"""

from app.repositories.upload_file_storage import FileStorageError, UploadFileStorage
from app.repositories.upload_stats_repository import UploadStatsRepository

__all__ = [
    "FileStorageError",
    "UploadFileStorage",
    "UploadStatsRepository",
]
