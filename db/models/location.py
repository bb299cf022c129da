"""
db/models/location.py

Read-only mappings of the facility location tree and the team members
assigned to it. Both tables are populated by the identity service sync.
"""

from __future__ import annotations

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from db.base import UNMANAGED, Base


class Location(Base):
    """
    One health facility, keyed by the identity-service location uuid.
    """

    __tablename__ = "locations"
    __table_args__ = {"info": UNMANAGED}

    location_uuid: Mapped[str] = mapped_column(String(64), primary_key=True)
    hfr_code: Mapped[str | None] = mapped_column(String(64), nullable=True)
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    district_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    region_name: Mapped[str | None] = mapped_column(String(255), nullable=True)

    def __repr__(self) -> str:
        return f"<Location uuid={self.location_uuid} hfr={self.hfr_code!r} region={self.region_name!r}>"


class TeamMember(Base):
    """
    A provider account and the facility it is assigned to.
    """

    __tablename__ = "team_members"
    __table_args__ = {"info": UNMANAGED}

    identifier: Mapped[str] = mapped_column(
        String(64),
        primary_key=True,
        comment="Identity-service base entity id",
    )
    username: Mapped[str | None] = mapped_column(String(255), nullable=True)
    team_uuid: Mapped[str | None] = mapped_column(String(64), nullable=True)
    location_uuid: Mapped[str | None] = mapped_column(String(64), nullable=True)
