"""
db/models/upload.py

Upload statistics model: one immutable row per completed CSV upload.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, Index, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base


class Upload(Base):
    __tablename__ = "uploads"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    user_base_entity_id: Mapped[str | None] = mapped_column(
        String(64),
        nullable=True,
        comment="Identity-service base entity id of the submitter",
    )
    username: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Submitter provider id",
    )
    uploaded_file: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    uploaded_file_type: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        comment="clients, contacts, results",
    )
    imported_rows: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )
    rejected_rows: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )
    upload_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        Index("ix_uploads_username", "username"),
        Index("ix_uploads_username_file_type", "username", "uploaded_file_type"),
        Index("ix_uploads_user_base_entity_id", "user_base_entity_id"),
        Index("ix_uploads_upload_date", "upload_date"),
    )

    def __repr__(self) -> str:
        return (
            f"<Upload id={self.id} username={self.username!r} "
            f"type={self.uploaded_file_type!r} imported={self.imported_rows} "
            f"rejected={self.rejected_rows}>"
        )
