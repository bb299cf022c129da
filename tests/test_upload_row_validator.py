from __future__ import annotations

import unittest
from types import MappingProxyType

from app.domain.uploads import DedupRegistry, ParsedRow, UploadType
from app.validators.upload_row_validator import RejectionReason, UploadRowValidator, is_valid_ctc_number
from tests.helpers import contact_row

KNOWN_CTC = "01-23-4567-890123"
OTHER_CTC = "11-22-3333-444444"


def _registry() -> DedupRegistry:
    return DedupRegistry(
        ctc_numbers=frozenset({KNOWN_CTC, "bad-but-registered"}),
        elicitations=MappingProxyType({"E-100": False, "E-200": True}),
    )


def _row(upload_type: UploadType, values: list[str]) -> ParsedRow:
    return ParsedRow.from_values(row_number=1, values=values, upload_type=upload_type)


class TestCTCNumberFormat(unittest.TestCase):
    def test_accepts_canonical_format(self) -> None:
        self.assertTrue(is_valid_ctc_number("01-23-4567-890123"))

    def test_rejects_wrong_group_lengths_and_trailing_text(self) -> None:
        for value in ("1-23-4567-890123", "01-23-4567-89012", "01-23-4567-890123x", "", "notanumber"):
            with self.subTest(value=value):
                self.assertFalse(is_valid_ctc_number(value))

    def test_rejects_non_ascii_digits(self) -> None:
        self.assertFalse(is_valid_ctc_number("٠١-23-4567-890123"))


class TestClientRows(unittest.TestCase):
    def setUp(self) -> None:
        self.validator = UploadRowValidator()
        self.registry = _registry()

    def test_new_valid_ctc_number_is_accepted(self) -> None:
        decision = self.validator.validate(
            upload_type=UploadType.CLIENTS,
            row=_row(UploadType.CLIENTS, [OTHER_CTC, "Jane"]),
            registry=self.registry,
        )
        self.assertTrue(decision.accepted)
        self.assertIsNone(decision.reason)

    def test_malformed_ctc_number_is_rejected(self) -> None:
        decision = self.validator.validate(
            upload_type=UploadType.CLIENTS,
            row=_row(UploadType.CLIENTS, ["notanumber"]),
            registry=self.registry,
        )
        self.assertFalse(decision.accepted)
        self.assertEqual(decision.reason, RejectionReason.INVALID_CTC_NUMBER)

    def test_registered_ctc_number_is_duplicate(self) -> None:
        decision = self.validator.validate(
            upload_type=UploadType.CLIENTS,
            row=_row(UploadType.CLIENTS, [KNOWN_CTC]),
            registry=self.registry,
        )
        self.assertEqual(decision.reason, "Duplicate CTC number in clients file")

    def test_surrounding_whitespace_is_ignored(self) -> None:
        decision = self.validator.validate(
            upload_type=UploadType.CLIENTS,
            row=_row(UploadType.CLIENTS, [f"  {OTHER_CTC} "]),
            registry=self.registry,
        )
        self.assertTrue(decision.accepted)


class TestContactRows(unittest.TestCase):
    def setUp(self) -> None:
        self.validator = UploadRowValidator()
        self.registry = _registry()

    def _validate(self, index_ctc: str, elicitation: str):
        return self.validator.validate(
            upload_type=UploadType.CONTACTS,
            row=_row(UploadType.CONTACTS, contact_row(index_ctc, elicitation)),
            registry=self.registry,
        )

    def test_known_index_and_new_elicitation_is_accepted(self) -> None:
        self.assertTrue(self._validate(KNOWN_CTC, "E-999").accepted)

    def test_unknown_index_client_is_rejected(self) -> None:
        decision = self._validate(OTHER_CTC, "E-999")
        self.assertEqual(decision.reason, "No matching index client CTC number in contacts file")

    def test_existence_is_checked_before_format(self) -> None:
        decision = self._validate("notanumber", "E-999")
        self.assertEqual(decision.reason, RejectionReason.NO_INDEX_CLIENT_IN_CONTACTS)

    def test_registered_but_malformed_index_is_invalid(self) -> None:
        decision = self._validate("bad-but-registered", "E-999")
        self.assertEqual(decision.reason, RejectionReason.INVALID_CTC_NUMBER)

    def test_any_registered_elicitation_is_a_duplicate(self) -> None:
        for elicitation in ("E-100", "E-200"):
            with self.subTest(elicitation=elicitation):
                decision = self._validate(KNOWN_CTC, elicitation)
                self.assertEqual(decision.reason, "Duplicate elicitation number, already uploaded!")

    def test_short_row_has_no_index_client(self) -> None:
        decision = self.validator.validate(
            upload_type=UploadType.CONTACTS,
            row=_row(UploadType.CONTACTS, ["only", "three", "columns"]),
            registry=self.registry,
        )
        self.assertEqual(decision.reason, RejectionReason.NO_INDEX_CLIENT_IN_CONTACTS)


class TestResultRows(unittest.TestCase):
    def setUp(self) -> None:
        self.validator = UploadRowValidator()
        self.registry = _registry()

    def _validate(self, index_ctc: str, elicitation: str):
        return self.validator.validate(
            upload_type=UploadType.RESULTS,
            row=_row(UploadType.RESULTS, contact_row(index_ctc, elicitation)),
            registry=self.registry,
        )

    def test_elicitation_without_results_is_accepted(self) -> None:
        self.assertTrue(self._validate(KNOWN_CTC, "E-100").accepted)

    def test_unregistered_elicitation_is_accepted(self) -> None:
        self.assertTrue(self._validate(KNOWN_CTC, "E-new").accepted)

    def test_elicitation_with_results_is_rejected(self) -> None:
        decision = self._validate(KNOWN_CTC, "E-200")
        self.assertEqual(decision.reason, "Elicitation number has already been registered with results.")

    def test_unknown_index_client_is_rejected(self) -> None:
        decision = self._validate(OTHER_CTC, "E-100")
        self.assertEqual(decision.reason, "No matching index client CTC number in results file")

    def test_registry_is_not_modified(self) -> None:
        before = (self.registry.ctc_numbers, dict(self.registry.elicitations))
        self._validate(KNOWN_CTC, "E-new")
        self.assertEqual((self.registry.ctc_numbers, dict(self.registry.elicitations)), before)


if __name__ == "__main__":
    unittest.main()
