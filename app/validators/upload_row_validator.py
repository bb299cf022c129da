"""
app/validators/upload_row_validator.py

Accept/reject rules for uploaded rows.

Each upload type checks, in this order, and reports the first failure:

    1. existence  - the referenced index client CTC number is registered
    2. format     - the CTC number matches DD-DD-DDDD-DDDDDD
    3. duplicate  - the row's own identifier has not been uploaded before
"""

from __future__ import annotations

import re

from app.domain.uploads import DedupRegistry, ParsedRow, RowDecision, UploadType
from app.errors import InvalidUploadTypeError

CTC_NUMBER_PATTERN = re.compile(r"\d{2}-\d{2}-\d{4}-\d{6}", re.ASCII)


class RejectionReason:
    INVALID_CTC_NUMBER = "Invalid CTC number"
    DUPLICATE_CLIENT_CTC_NUMBER = "Duplicate CTC number in clients file"
    NO_INDEX_CLIENT_IN_CONTACTS = "No matching index client CTC number in contacts file"
    NO_INDEX_CLIENT_IN_RESULTS = "No matching index client CTC number in results file"
    DUPLICATE_ELICITATION_NUMBER = "Duplicate elicitation number, already uploaded!"
    ELICITATION_HAS_RESULTS = "Elicitation number has already been registered with results."


def is_valid_ctc_number(value: str) -> bool:
    return CTC_NUMBER_PATTERN.fullmatch(value) is not None


class UploadRowValidator:
    """
    Pure row validator; registries are read, never modified.
    """

    def validate(
        self,
        *,
        upload_type: UploadType,
        row: ParsedRow,
        registry: DedupRegistry,
    ) -> RowDecision:
        if upload_type is UploadType.CLIENTS:
            return self._validate_client(row, registry)
        if upload_type is UploadType.CONTACTS:
            return self._validate_contact(row, registry)
        if upload_type is UploadType.RESULTS:
            return self._validate_result(row, registry)
        raise InvalidUploadTypeError(str(upload_type))

    def _validate_client(self, row: ParsedRow, registry: DedupRegistry) -> RowDecision:
        ctc_number = row.value_of("ctc_number")
        if not is_valid_ctc_number(ctc_number):
            return RowDecision.reject(RejectionReason.INVALID_CTC_NUMBER)
        if registry.has_ctc_number(ctc_number):
            return RowDecision.reject(RejectionReason.DUPLICATE_CLIENT_CTC_NUMBER)
        return RowDecision.accept()

    def _validate_contact(self, row: ParsedRow, registry: DedupRegistry) -> RowDecision:
        rejection = self._check_index_client(
            row,
            registry,
            missing_reason=RejectionReason.NO_INDEX_CLIENT_IN_CONTACTS,
        )
        if rejection is not None:
            return rejection
        if registry.has_elicitation(row.value_of("elicitation_number")):
            return RowDecision.reject(RejectionReason.DUPLICATE_ELICITATION_NUMBER)
        return RowDecision.accept()

    def _validate_result(self, row: ParsedRow, registry: DedupRegistry) -> RowDecision:
        rejection = self._check_index_client(
            row,
            registry,
            missing_reason=RejectionReason.NO_INDEX_CLIENT_IN_RESULTS,
        )
        if rejection is not None:
            return rejection
        if registry.elicitation_has_results(row.value_of("elicitation_number")):
            return RowDecision.reject(RejectionReason.ELICITATION_HAS_RESULTS)
        return RowDecision.accept()

    def _check_index_client(
        self,
        row: ParsedRow,
        registry: DedupRegistry,
        *,
        missing_reason: str,
    ) -> RowDecision | None:
        index_ctc_number = row.value_of("index_ctc_number")
        if not registry.has_ctc_number(index_ctc_number):
            return RowDecision.reject(missing_reason)
        if not is_valid_ctc_number(index_ctc_number):
            return RowDecision.reject(RejectionReason.INVALID_CTC_NUMBER)
        return None
