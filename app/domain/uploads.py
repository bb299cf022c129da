"""
app/domain/uploads.py

Domain models used by the CSV upload pipeline.

Uploaded files carry no header row that can be trusted, so columns are
addressed by position. Each upload type declares the positions it needs
once, in ``COLUMN_LAYOUTS``; the rest of the pipeline works with the named
fields of ``ParsedRow``.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import PurePath
from types import MappingProxyType

from app.errors import InvalidUploadTypeError


class UploadType(str, Enum):
    CLIENTS = "clients"
    CONTACTS = "contacts"
    RESULTS = "results"


# Subdirectory of the output root that receives accepted rows per type.
OUTPUT_DIRECTORIES: Mapping[UploadType, str] = MappingProxyType(
    {
        UploadType.CLIENTS: "index_uploads",
        UploadType.CONTACTS: "contacts_uploads",
        UploadType.RESULTS: "results_uploads",
    }
)

# Named field -> zero-based column position, per upload type.
COLUMN_LAYOUTS: Mapping[UploadType, Mapping[str, int]] = MappingProxyType(
    {
        UploadType.CLIENTS: MappingProxyType({"ctc_number": 0}),
        UploadType.CONTACTS: MappingProxyType({"index_ctc_number": 12, "elicitation_number": 13}),
        UploadType.RESULTS: MappingProxyType({"index_ctc_number": 12, "elicitation_number": 13}),
    }
)


def parse_upload_type(file_name: str) -> UploadType:
    """
    Read the upload type from a `<date>_<type>_...` file name.
    """

    parts = PurePath(file_name).name.split("_")
    candidate = parts[1] if len(parts) > 1 else None
    try:
        return UploadType(candidate)
    except ValueError:
        raise InvalidUploadTypeError(candidate) from None


def output_directory_for(upload_type: UploadType) -> str:
    try:
        return OUTPUT_DIRECTORIES[upload_type]
    except KeyError:
        raise InvalidUploadTypeError(str(upload_type)) from None


@dataclass(frozen=True)
class ParsedRow:
    """
    One CSV data row: its raw values plus the named fields of its layout.

    Named fields are whitespace-trimmed; a position past the end of a short
    row maps to the empty string.
    """

    row_number: int
    values: tuple[str, ...]
    fields: Mapping[str, str]

    @classmethod
    def from_values(
        cls,
        *,
        row_number: int,
        values: list[str] | tuple[str, ...],
        upload_type: UploadType,
    ) -> ParsedRow:
        raw = tuple(values)
        layout = COLUMN_LAYOUTS[upload_type]
        named = {
            name: (raw[position].strip() if position < len(raw) else "")
            for name, position in layout.items()
        }
        return cls(row_number=row_number, values=raw, fields=MappingProxyType(named))

    def value_of(self, name: str) -> str:
        return self.fields.get(name, "")


@dataclass(frozen=True)
class RowDecision:
    """
    Accept/reject verdict for one row.
    """

    accepted: bool
    reason: str | None = None

    @classmethod
    def accept(cls) -> RowDecision:
        return cls(accepted=True)

    @classmethod
    def reject(cls, reason: str) -> RowDecision:
        return cls(accepted=False, reason=reason)


@dataclass(frozen=True)
class AcceptedRow:
    """
    An accepted row with the four submitter identity columns appended.
    """

    row_number: int
    values: tuple[str, ...]
    provider_id: str
    team: str
    team_id: str
    location_id: str

    def to_csv_record(self) -> list[str]:
        return [*self.values, self.provider_id, self.team, self.team_id, self.location_id]


@dataclass(frozen=True)
class RejectedRow:
    row_number: int
    values: tuple[str, ...]
    rejection_reason: str


@dataclass(frozen=True)
class DedupRegistry:
    """
    Identifiers already ingested elsewhere, fetched fresh per upload.

    ``elicitations`` maps an elicitation number to its ``has_results`` flag.
    """

    ctc_numbers: frozenset[str] = frozenset()
    elicitations: Mapping[str, bool] = field(default_factory=lambda: MappingProxyType({}))

    def has_ctc_number(self, ctc_number: str) -> bool:
        return ctc_number in self.ctc_numbers

    def has_elicitation(self, elicitation_number: str) -> bool:
        return elicitation_number in self.elicitations

    def elicitation_has_results(self, elicitation_number: str) -> bool:
        return bool(self.elicitations.get(elicitation_number, False))


@dataclass(frozen=True)
class UserUploadStats:
    """
    Per-submitter aggregate returned after each upload and at login.
    """

    client_files: int = 0
    contact_files: int = 0
    result_files: int = 0
    accepted_records: int = 0
    rejected_records: int = 0
    last_upload_date: datetime | None = None


@dataclass(frozen=True)
class RegionUploadStats:
    region: str
    client_files: int = 0
    contact_files: int = 0
    result_files: int = 0
    accepted_records: int = 0
    rejected_records: int = 0


class PipelineState(str, Enum):
    IDLE = "idle"
    AWAITING_REGISTRIES = "awaiting_registries"
    STREAMING = "streaming"
    FINALIZING = "finalizing"
    DONE = "done"
    ERRORED = "errored"


@dataclass(frozen=True)
class UploadOutcome:
    """
    End-of-run upload summary.
    """

    file_name: str
    upload_type: UploadType
    accepted_count: int
    rejected_rows: list[RejectedRow]
    stats: UserUploadStats
    output_path: str | None = None

    @property
    def rejected(self) -> bool:
        return bool(self.rejected_rows)

    @property
    def rejected_count(self) -> int:
        return len(self.rejected_rows)
