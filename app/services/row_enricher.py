"""
app/services/row_enricher.py

Appends the submitter identity columns to accepted rows.
"""

from __future__ import annotations

from app.domain.identity import SubmitterIdentity
from app.domain.uploads import AcceptedRow, ParsedRow

# Downstream import tooling reads the first output line as column names.
IDENTITY_COLUMNS: tuple[str, str, str, str] = ("providerId", "team", "teamId", "locationId")


class RowEnricher:
    """
    One instance per upload run. The first accepted row carries the column
    name placeholders; every later accepted row carries the real identity.
    """

    def __init__(self, identity: SubmitterIdentity) -> None:
        self._identity = identity
        self._placeholder_written = False

    @property
    def placeholder_written(self) -> bool:
        return self._placeholder_written

    def enrich(self, row: ParsedRow) -> AcceptedRow:
        if not self._placeholder_written:
            self._placeholder_written = True
            provider_id, team, team_id, location_id = IDENTITY_COLUMNS
        else:
            provider_id = self._identity.provider_id
            team = self._identity.team
            team_id = self._identity.team_id
            location_id = self._identity.location_id

        return AcceptedRow(
            row_number=row.row_number,
            values=row.values,
            provider_id=provider_id,
            team=team,
            team_id=team_id,
            location_id=location_id,
        )
