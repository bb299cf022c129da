"""
tests/helpers.py

Row builders shared by the upload tests.
"""

from __future__ import annotations

CONTACT_COLUMNS = 14


def contact_row(index_ctc_number: str, elicitation_number: str, *, prefix: str = "c") -> list[str]:
    """Build a contacts/results row with the two addressed columns filled in."""
    values = [f"{prefix}{position}" for position in range(CONTACT_COLUMNS)]
    values[12] = index_ctc_number
    values[13] = elicitation_number
    return values


def to_csv_bytes(rows: list[list[str]]) -> bytes:
    """Serialize rows the way a spreadsheet export would (no header line)."""
    lines = []
    for row in rows:
        lines.append(",".join(f'"{value}"' if "," in value else value for value in row))
    return ("\r\n".join(lines) + ("\r\n" if lines else "")).encode("utf-8")
