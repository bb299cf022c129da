"""
app/schemas/dashboard.py

Request schema for the dashboard summary endpoints.
"""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel, ConfigDict, Field, model_validator


class SummaryQuery(BaseModel):
    """
    Facilities (HFR codes) and an inclusive date range.
    """

    model_config = ConfigDict(populate_by_name=True)

    location: list[str] = Field(..., min_length=1)
    start_date: date = Field(..., alias="startDate")
    end_date: date = Field(..., alias="endDate")

    @model_validator(mode="after")
    def _check_range(self) -> SummaryQuery:
        if self.start_date > self.end_date:
            raise ValueError("startDate must not be after endDate.")
        return self
