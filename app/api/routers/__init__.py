"""
app/api/routers package marker.
"""

from app.api.routers.auth_router import router as auth_router
from app.api.routers.dashboard_router import router as dashboard_router
from app.api.routers.upload_router import router as upload_router

__all__ = [
    "auth_router",
    "dashboard_router",
    "upload_router",
]
