"""
Model package exports.

Import all SQLAlchemy models here so metadata registration and Alembic
autogeneration work without extra imports.
"""

from db.models.location import Location, TeamMember
from db.models.surveillance import (
    Elicitation,
    ElicitationSummary,
    IndexClientSummary,
    OutcomeSummary,
    TestOutcome,
)
from db.models.upload import Upload

__all__ = [
    "Elicitation",
    "ElicitationSummary",
    "IndexClientSummary",
    "Location",
    "OutcomeSummary",
    "TeamMember",
    "TestOutcome",
    "Upload",
]
