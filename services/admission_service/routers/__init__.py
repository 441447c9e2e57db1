"""Admission service routers."""

from services.admission_service.routers.admission import router as admission_router
from services.admission_service.routers.attendance import router as attendance_router
from services.admission_service.routers.members import router as members_router
from services.admission_service.routers.records import router as records_router

__all__ = [
    "admission_router",
    "attendance_router",
    "members_router",
    "records_router",
]
