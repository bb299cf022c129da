"""
app/repositories/upload_stats_repository.py

Per-upload statistics records and the per-user and per-region aggregates
read back from them.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.orm import Session
from sqlalchemy.sql import Select

from app.domain.uploads import RegionUploadStats, UploadType, UserUploadStats
from db.models.location import Location, TeamMember
from db.models.upload import Upload


class UploadStatsRepository:
    """
    Repository over the ``uploads`` table.

    The caller owns the transaction; ``record`` only adds and flushes.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def record(
        self,
        *,
        username: str,
        user_base_entity_id: str | None,
        uploaded_file: str,
        uploaded_file_type: str,
        imported_rows: int,
        rejected_rows: int,
        upload_date: datetime | None = None,
    ) -> Upload:
        upload = Upload(
            username=username,
            user_base_entity_id=user_base_entity_id,
            uploaded_file=uploaded_file,
            uploaded_file_type=uploaded_file_type,
            imported_rows=imported_rows,
            rejected_rows=rejected_rows,
        )
        if upload_date is not None:
            upload.upload_date = upload_date
        self._session.add(upload)
        self._session.flush()
        return upload

    def count_by_user(self, username: str, file_type: str) -> int:
        stmt = select(func.count(Upload.id)).where(
            Upload.username == username,
            Upload.uploaded_file_type == file_type,
        )
        return int(self._session.execute(stmt).scalar_one() or 0)

    def sum_imported(self, username: str) -> int:
        stmt = select(func.coalesce(func.sum(Upload.imported_rows), 0)).where(Upload.username == username)
        return int(self._session.execute(stmt).scalar_one() or 0)

    def sum_rejected(self, username: str) -> int:
        stmt = select(func.coalesce(func.sum(Upload.rejected_rows), 0)).where(Upload.username == username)
        return int(self._session.execute(stmt).scalar_one() or 0)

    def last_upload_date(self, username: str) -> datetime | None:
        stmt = select(func.max(Upload.upload_date)).where(Upload.username == username)
        return self._session.execute(stmt).scalar_one_or_none()

    def user_stats(self, username: str) -> UserUploadStats:
        return UserUploadStats(
            client_files=self.count_by_user(username, UploadType.CLIENTS.value),
            contact_files=self.count_by_user(username, UploadType.CONTACTS.value),
            result_files=self.count_by_user(username, UploadType.RESULTS.value),
            accepted_records=self.sum_imported(username),
            rejected_records=self.sum_rejected(username),
            last_upload_date=self.last_upload_date(username),
        )

    def count_by_region(self, file_type: str, region: str) -> int:
        stmt = _join_region(select(func.count(Upload.id)), region).where(
            Upload.uploaded_file_type == file_type,
        )
        return int(self._session.execute(stmt).scalar_one() or 0)

    def sum_imported_by_region(self, region: str) -> int:
        stmt = _join_region(select(func.coalesce(func.sum(Upload.imported_rows), 0)), region)
        return int(self._session.execute(stmt).scalar_one() or 0)

    def sum_rejected_by_region(self, region: str) -> int:
        stmt = _join_region(select(func.coalesce(func.sum(Upload.rejected_rows), 0)), region)
        return int(self._session.execute(stmt).scalar_one() or 0)

    def region_stats(self, region: str) -> RegionUploadStats:
        return RegionUploadStats(
            region=region,
            client_files=self.count_by_region(UploadType.CLIENTS.value, region),
            contact_files=self.count_by_region(UploadType.CONTACTS.value, region),
            result_files=self.count_by_region(UploadType.RESULTS.value, region),
            accepted_records=self.sum_imported_by_region(region),
            rejected_records=self.sum_rejected_by_region(region),
        )


def _join_region(stmt: Select, region: str) -> Select:
    return (
        stmt.select_from(Upload)
        .join(TeamMember, TeamMember.identifier == Upload.user_base_entity_id)
        .join(Location, Location.location_uuid == TeamMember.location_uuid)
        .where(Location.region_name == region)
    )
