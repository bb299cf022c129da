"""
db/models/surveillance.py

Read-only mappings of warehouse tables fed from processed uploads:
contact elicitations, test outcomes and the pre-aggregated summary views
the dashboard reads.
"""

from __future__ import annotations

from datetime import date

from sqlalchemy import BigInteger, Boolean, Date, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from db.base import UNMANAGED, Base


class Elicitation(Base):
    __tablename__ = "elicitation"
    __table_args__ = {"info": UNMANAGED}

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    elicitation_number: Mapped[str | None] = mapped_column(String(64), nullable=True)
    sex: Mapped[str | None] = mapped_column(String(16), nullable=True)
    age_at_elicitation: Mapped[int | None] = mapped_column(Integer, nullable=True)
    relationship: Mapped[str | None] = mapped_column(String(64), nullable=True)
    elicitation_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    location_id: Mapped[str | None] = mapped_column(String(64), nullable=True)


class TestOutcome(Base):
    __tablename__ = "test_outcome"
    __table_args__ = {"info": UNMANAGED}

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    elicitation_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    location_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    event_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    sex: Mapped[str | None] = mapped_column(String(16), nullable=True)
    age_at_outcome: Mapped[int | None] = mapped_column(Integer, nullable=True)
    place_where_test_was_conducted: Mapped[str | None] = mapped_column(String(64), nullable=True)
    test_results: Mapped[str | None] = mapped_column(String(32), nullable=True)
    is_known_positive: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    has_the_contact_client_been_tested: Mapped[str | None] = mapped_column(String(16), nullable=True)


class IndexClientSummary(Base):
    """Index-client totals per facility and registration date."""

    __tablename__ = "index_clients_mv"
    __table_args__ = {"info": UNMANAGED}

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True)
    hfr_code: Mapped[str] = mapped_column(String(64))
    ucs_registration_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    ctcclients: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    ucsclients: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    reachedclients: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    unreachedclients: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    totalelicitations: Mapped[int | None] = mapped_column(BigInteger, nullable=True)


class ElicitationSummary(Base):
    """Elicitation totals per facility, date, age group, relationship and sex."""

    __tablename__ = "elicitations_mv"
    __table_args__ = {"info": UNMANAGED}

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True)
    hfr_code: Mapped[str] = mapped_column(String(64))
    elicitation_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    age_group: Mapped[str | None] = mapped_column(String(16), nullable=True)
    relationship: Mapped[str | None] = mapped_column(String(64), nullable=True)
    sex: Mapped[str | None] = mapped_column(String(16), nullable=True)
    totalelicitations: Mapped[int | None] = mapped_column(BigInteger, nullable=True)


class OutcomeSummary(Base):
    """Test outcome totals per facility, date, band, testing point and result."""

    __tablename__ = "outcomes_mv"
    __table_args__ = {"info": UNMANAGED}

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True)
    hfr_code: Mapped[str] = mapped_column(String(64))
    outcome_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    age_group: Mapped[str | None] = mapped_column(String(16), nullable=True)
    relationship: Mapped[str | None] = mapped_column(String(64), nullable=True)
    sex: Mapped[str | None] = mapped_column(String(16), nullable=True)
    testingpoint: Mapped[str | None] = mapped_column(String(32), nullable=True)
    test_results: Mapped[str | None] = mapped_column(String(32), nullable=True)
    count: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
