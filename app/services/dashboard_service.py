"""
app/services/dashboard_service.py

Read-only aggregate queries behind the dashboard endpoints.

Two families:

* summary views (index clients, elicitations, outcomes) grouped by
  facility HFR code with camelCase keys;
* paediatric grids counting contacts and test outcomes per sex, age band
  and child relationship for one facility.

All date ranges are inclusive on both ends. Counts are returned as plain
ints.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import date
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from db.models.location import Location
from db.models.surveillance import (
    Elicitation,
    ElicitationSummary,
    IndexClientSummary,
    OutcomeSummary,
    TestOutcome,
)

logger = logging.getLogger(__name__)

SUMMARY_RELATIONSHIPS: tuple[str, ...] = ("biological_child", "non_biological_child", "sibling")

AGE_BANDS: tuple[tuple[int, int], ...] = ((0, 4), (5, 9), (10, 14), (15, 19))

FACILITY_TESTING_POINTS: tuple[str, ...] = (
    "outpatient_department",
    "inpatient_department",
    "ctc",
    "other",
)
COMMUNITY_TESTING_POINTS: tuple[str, ...] = (
    "community_based_hiv_testing_service",
    "outreach_services",
)
TESTING_POINTS: dict[str, tuple[str, ...]] = {
    "facility": FACILITY_TESTING_POINTS,
    "community": COMMUNITY_TESTING_POINTS,
}

RELATIONSHIP_LABELS: dict[str, str] = {
    "biological_child": "biological",
    "non_biological_child": "non-biological",
}


def _as_int(value: Any) -> int:
    return int(value) if value is not None else 0


def _band_label(band: tuple[int, int]) -> str:
    return f"{band[0]}-{band[1]}"


class DashboardService:
    def __init__(self, session: Session, *, regions: Sequence[str]) -> None:
        self._session = session
        self._regions = tuple(regions)

    # ------------------------------------------------------------------
    # Summary views
    # ------------------------------------------------------------------

    def index_client_summaries(
        self,
        hfr_codes: Sequence[str],
        start: date,
        end: date,
    ) -> dict[str, list[dict[str, Any]]]:
        stmt = (
            select(IndexClientSummary)
            .where(
                IndexClientSummary.hfr_code.in_(list(hfr_codes)),
                IndexClientSummary.ucs_registration_date >= start,
                IndexClientSummary.ucs_registration_date <= end,
            )
            .order_by(IndexClientSummary.hfr_code, IndexClientSummary.ucs_registration_date)
        )
        grouped: dict[str, list[dict[str, Any]]] = {}
        for row in self._session.execute(stmt).scalars():
            grouped.setdefault(row.hfr_code, []).append(
                {
                    "registrationDate": row.ucs_registration_date,
                    "totalCTCClients": _as_int(row.ctcclients),
                    "totalUCSClients": _as_int(row.ucsclients),
                    "totalReachedClients": _as_int(row.reachedclients),
                    "totalUnreachedClients": _as_int(row.unreachedclients),
                    "totalElicitations": _as_int(row.totalelicitations),
                }
            )
        return grouped

    def elicitation_summaries(
        self,
        hfr_codes: Sequence[str],
        start: date,
        end: date,
    ) -> dict[str, list[dict[str, Any]]]:
        stmt = (
            select(ElicitationSummary)
            .where(
                ElicitationSummary.hfr_code.in_(list(hfr_codes)),
                ElicitationSummary.relationship.in_(SUMMARY_RELATIONSHIPS),
                ElicitationSummary.elicitation_date >= start,
                ElicitationSummary.elicitation_date <= end,
            )
            .order_by(ElicitationSummary.hfr_code, ElicitationSummary.elicitation_date)
        )
        grouped: dict[str, list[dict[str, Any]]] = {}
        for row in self._session.execute(stmt).scalars():
            grouped.setdefault(row.hfr_code, []).append(
                {
                    "elicitationDate": row.elicitation_date,
                    "ageGroup": row.age_group,
                    "relationship": row.relationship,
                    "sex": row.sex,
                    "totalElicitations": _as_int(row.totalelicitations),
                }
            )
        return grouped

    def outcome_summaries(
        self,
        hfr_codes: Sequence[str],
        start: date,
        end: date,
    ) -> dict[str, list[dict[str, Any]]]:
        stmt = (
            select(OutcomeSummary)
            .where(
                OutcomeSummary.hfr_code.in_(list(hfr_codes)),
                OutcomeSummary.relationship.in_(SUMMARY_RELATIONSHIPS),
                OutcomeSummary.outcome_date >= start,
                OutcomeSummary.outcome_date <= end,
            )
            .order_by(OutcomeSummary.hfr_code, OutcomeSummary.outcome_date)
        )
        grouped: dict[str, list[dict[str, Any]]] = {}
        for row in self._session.execute(stmt).scalars():
            grouped.setdefault(row.hfr_code, []).append(
                {
                    "outcomeDate": row.outcome_date,
                    "ageGroup": row.age_group,
                    "relationship": row.relationship,
                    "sex": row.sex,
                    "testingPoint": row.testingpoint,
                    "testResults": row.test_results,
                    "count": _as_int(row.count),
                }
            )
        return grouped

    # ------------------------------------------------------------------
    # Paediatric grids
    # ------------------------------------------------------------------

    def paediatric_contacts(self, hfr_code: str, start: date, end: date) -> list[dict[str, Any]]:
        """
        Elicited child contacts: sex x age band x relationship.
        """

        results: list[dict[str, Any]] = []
        for sex in ("Male", "Female"):
            for band in AGE_BANDS:
                for relationship in ("biological_child", "non_biological_child"):
                    count = self._count_elicitations(
                        hfr_code=hfr_code,
                        start=start,
                        end=end,
                        sex=sex,
                        band=band,
                        relationship=relationship,
                    )
                    results.append(
                        {
                            "sex": sex,
                            "ageGroup": _band_label(band),
                            "relationship": RELATIONSHIP_LABELS[relationship],
                            "contactCount": count,
                        }
                    )
        logger.debug("Paediatric contacts computed hfr_code=%s cells=%d", hfr_code, len(results))
        return results

    def paediatric_test_outcomes(self, hfr_code: str, start: date, end: date) -> list[dict[str, Any]]:
        """
        Child contact test outcomes: age band x sex x testing point x relationship.

        Known positive and not tested have no testing place recorded, so they
        are only reported on the facility rows.
        """

        results: list[dict[str, Any]] = []
        for band in AGE_BANDS:
            for sex in ("Female", "Male"):
                for testing_point in ("facility", "community"):
                    for relationship in ("non_biological_child", "biological_child"):
                        results.append(
                            self._outcome_cell(
                                hfr_code=hfr_code,
                                start=start,
                                end=end,
                                sex=sex,
                                band=band,
                                testing_point=testing_point,
                                relationship=relationship,
                            )
                        )
        logger.debug("Paediatric outcomes computed hfr_code=%s cells=%d", hfr_code, len(results))
        return results

    def _count_elicitations(
        self,
        *,
        hfr_code: str,
        start: date,
        end: date,
        sex: str,
        band: tuple[int, int],
        relationship: str,
    ) -> int:
        stmt = (
            select(func.count(Elicitation.id))
            .join(Location, Location.location_uuid == Elicitation.location_id)
            .where(
                Elicitation.sex == sex,
                Elicitation.age_at_elicitation >= band[0],
                Elicitation.age_at_elicitation <= band[1],
                Elicitation.relationship == relationship,
                Elicitation.elicitation_date >= start,
                Elicitation.elicitation_date <= end,
                Location.hfr_code == hfr_code,
                Location.region_name.in_(self._regions),
            )
        )
        return _as_int(self._session.execute(stmt).scalar_one())

    def _outcome_cell(
        self,
        *,
        hfr_code: str,
        start: date,
        end: date,
        sex: str,
        band: tuple[int, int],
        testing_point: str,
        relationship: str,
    ) -> dict[str, Any]:
        base = dict(hfr_code=hfr_code, start=start, end=end, sex=sex, band=band, relationship=relationship)
        tested_here = TestOutcome.place_where_test_was_conducted.in_(TESTING_POINTS[testing_point])
        no_place = TestOutcome.place_where_test_was_conducted.is_(None)

        newly_negative = self._count_outcomes(**base, criteria=[tested_here, TestOutcome.test_results == "negative"])
        newly_positive = self._count_outcomes(**base, criteria=[tested_here, TestOutcome.test_results == "positive"])
        known_positive = 0
        not_tested = 0
        if testing_point == "facility":
            known_positive = self._count_outcomes(
                **base,
                criteria=[no_place, TestOutcome.is_known_positive.is_(True)],
            )
            not_tested = self._count_outcomes(
                **base,
                criteria=[no_place, TestOutcome.has_the_contact_client_been_tested == "no"],
            )

        return {
            "sex": sex,
            "ageGroup": _band_label(band),
            "relationship": RELATIONSHIP_LABELS[relationship],
            "testingPoint": testing_point,
            "knownPositive": known_positive,
            "newlyTestedNegative": newly_negative,
            "newlyTestedPositive": newly_positive,
            "notTested": not_tested,
        }

    def _count_outcomes(
        self,
        *,
        hfr_code: str,
        start: date,
        end: date,
        sex: str,
        band: tuple[int, int],
        relationship: str,
        criteria: list[Any],
    ) -> int:
        stmt = (
            select(func.count(TestOutcome.id))
            .join(Elicitation, Elicitation.id == TestOutcome.elicitation_id)
            .join(Location, Location.location_uuid == TestOutcome.location_id)
            .where(
                TestOutcome.event_date >= start,
                TestOutcome.event_date <= end,
                TestOutcome.sex == sex,
                TestOutcome.age_at_outcome >= band[0],
                TestOutcome.age_at_outcome <= band[1],
                Elicitation.relationship == relationship,
                Location.hfr_code == hfr_code,
                Location.region_name.in_(self._regions),
                *criteria,
            )
        )
        return _as_int(self._session.execute(stmt).scalar_one())
