from __future__ import annotations

from app.domain.identity import SubmitterIdentity
from app.domain.uploads import ParsedRow, UploadType
from app.services.row_enricher import IDENTITY_COLUMNS, RowEnricher


def _row(number: int, ctc: str) -> ParsedRow:
    return ParsedRow.from_values(row_number=number, values=[ctc, "name"], upload_type=UploadType.CLIENTS)


def test_first_accepted_row_carries_placeholders(identity: SubmitterIdentity) -> None:
    enricher = RowEnricher(identity)

    first = enricher.enrich(_row(1, "01-23-4567-890123"))

    assert first.to_csv_record() == ["01-23-4567-890123", "name", *IDENTITY_COLUMNS]
    assert IDENTITY_COLUMNS == ("providerId", "team", "teamId", "locationId")
    assert enricher.placeholder_written


def test_later_rows_carry_real_identity(identity: SubmitterIdentity) -> None:
    enricher = RowEnricher(identity)
    enricher.enrich(_row(1, "01-23-4567-890123"))

    second = enricher.enrich(_row(4, "11-22-3333-444444"))
    third = enricher.enrich(_row(5, "22-33-4444-555555"))

    expected_tail = ["provider1", "Team Alpha", "team-uuid-1", "location-uuid-1"]
    assert second.to_csv_record()[2:] == expected_tail
    assert third.to_csv_record()[2:] == expected_tail
    assert second.row_number == 4


def test_each_run_starts_with_a_fresh_placeholder(identity: SubmitterIdentity) -> None:
    RowEnricher(identity).enrich(_row(1, "01-23-4567-890123"))

    fresh = RowEnricher(identity)
    assert not fresh.placeholder_written
    assert fresh.enrich(_row(1, "01-23-4567-890123")).provider_id == "providerId"
