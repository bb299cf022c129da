"""
app/api/routers/dashboard_router.py

Basic-Auth protected dashboard count endpoints.
"""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.api.dependencies import require_dashboard_user
from app.api.responses import api_response
from app.config import DashboardSettings, get_dashboard_settings
from app.errors import ValidationError
from app.schemas.dashboard import SummaryQuery
from app.services.dashboard_service import DashboardService
from db.session import get_db

router = APIRouter(
    prefix="/dashboard",
    tags=["dashboard"],
    dependencies=[Depends(require_dashboard_user)],
)


def get_dashboard_service(
    db: Session = Depends(get_db),
    settings: DashboardSettings = Depends(get_dashboard_settings),
) -> DashboardService:
    return DashboardService(db, regions=settings.regions)


def _check_range(start: date, end: date) -> None:
    if start > end:
        raise ValidationError("startdate must not be after enddate.")


@router.post("/index-clients")
def index_clients(
    request: Request,
    query: SummaryQuery,
    service: DashboardService = Depends(get_dashboard_service),
) -> JSONResponse:
    grouped = service.index_client_summaries(query.location, query.start_date, query.end_date)
    return api_response(request, status.HTTP_200_OK, grouped)


@router.post("/elicitations")
def elicitations(
    request: Request,
    query: SummaryQuery,
    service: DashboardService = Depends(get_dashboard_service),
) -> JSONResponse:
    grouped = service.elicitation_summaries(query.location, query.start_date, query.end_date)
    return api_response(request, status.HTTP_200_OK, grouped)


@router.post("/outcomes")
def outcomes(
    request: Request,
    query: SummaryQuery,
    service: DashboardService = Depends(get_dashboard_service),
) -> JSONResponse:
    grouped = service.outcome_summaries(query.location, query.start_date, query.end_date)
    return api_response(request, status.HTTP_200_OK, grouped)


@router.get("/paediatric-contacts")
def paediatric_contacts(
    request: Request,
    locationid: str = Query(..., min_length=1, description="Facility HFR code"),
    startdate: date = Query(...),
    enddate: date = Query(...),
    service: DashboardService = Depends(get_dashboard_service),
) -> JSONResponse:
    _check_range(startdate, enddate)
    return api_response(request, status.HTTP_200_OK, service.paediatric_contacts(locationid, startdate, enddate))


@router.get("/paediatric-outcomes")
def paediatric_outcomes(
    request: Request,
    locationid: str = Query(..., min_length=1, description="Facility HFR code"),
    startdate: date = Query(...),
    enddate: date = Query(...),
    service: DashboardService = Depends(get_dashboard_service),
) -> JSONResponse:
    _check_range(startdate, enddate)
    return api_response(
        request,
        status.HTTP_200_OK,
        service.paediatric_test_outcomes(locationid, startdate, enddate),
    )
