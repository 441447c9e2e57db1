"""Admission Service schemas package."""

from services.admission_service.schemas.main import (
    AdmissionCheckRequest,
    AdmissionCheckResponse,
    AttendanceEntry,
    MemberResponse,
    MemberUpsert,
    MemberUpsertResponse,
    PaymentResponse,
    PaymentTermResponse,
    TermRecordCreate,
    WaiverResponse,
    WaiverTermResponse,
)

__all__ = [
    "AdmissionCheckRequest",
    "AdmissionCheckResponse",
    "AttendanceEntry",
    "MemberResponse",
    "MemberUpsert",
    "MemberUpsertResponse",
    "PaymentResponse",
    "PaymentTermResponse",
    "TermRecordCreate",
    "WaiverResponse",
    "WaiverTermResponse",
]
