"""Admission Service models package.

Re-exports all models and enums so that Alembic env.py and SQLAlchemy's mapper
registry see every model class on import.
"""

from services.admission_service.models.core import (
    Member,
    PaymentRecord,
    PaymentTerm,
    SignInRecord,
    WaiverRecord,
    WaiverTerm,
    WarningRecord,
)
from services.admission_service.models.enums import (
    ADMITTED_STATUSES,
    AdmissionStatus,
    MemberUpsertResult,
)

__all__ = [
    "ADMITTED_STATUSES",
    "AdmissionStatus",
    "Member",
    "MemberUpsertResult",
    "PaymentRecord",
    "PaymentTerm",
    "SignInRecord",
    "WaiverRecord",
    "WaiverTerm",
    "WarningRecord",
]
