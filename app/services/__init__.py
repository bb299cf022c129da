"""
app/services package marker.
"""

from app.services.auth_service import AuthenticationService, LoginResult, get_authentication_service
from app.services.csv_upload_service import CSVUploadService, get_csv_upload_service
from app.services.dashboard_service import DashboardService
from app.services.row_enricher import RowEnricher

__all__ = [
    "AuthenticationService",
    "CSVUploadService",
    "DashboardService",
    "LoginResult",
    "RowEnricher",
    "get_authentication_service",
    "get_csv_upload_service",
]
