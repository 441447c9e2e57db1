from datetime import date, datetime
from decimal import Decimal
from typing import Annotated, Optional

from libs.common.identifiers import IDENTIFIER_PATTERN, format_identifier
from pydantic import BaseModel, BeforeValidator, ConfigDict, Field
from services.admission_service.models import AdmissionStatus, MemberUpsertResult


def _normalize_identifier(value):
    # Non-strings fall through to the str check
    if isinstance(value, str):
        return format_identifier(value)
    return value


Identifier = Annotated[
    str,
    BeforeValidator(_normalize_identifier),
    Field(
        pattern=IDENTIFIER_PATTERN,
        description="Member identifier; shorter digit strings are zero-padded",
        examples=["0000012345"],
    ),
]


class AdmissionCheckRequest(BaseModel):
    identifier: Identifier


class AdmissionCheckResponse(BaseModel):
    status: AdmissionStatus
    message: str
    name: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


# ---------------------------------------------------------------------------
# Members
# ---------------------------------------------------------------------------


class MemberUpsert(BaseModel):
    identifier: Identifier
    name: Optional[str] = None
    email: Optional[str] = None


class MemberResponse(BaseModel):
    identifier: str
    name: Optional[str] = None
    email: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class MemberUpsertResponse(BaseModel):
    result: MemberUpsertResult
    message: str
    member: MemberResponse


# ---------------------------------------------------------------------------
# Terms, waivers, payments
# ---------------------------------------------------------------------------


class WaiverTermResponse(BaseModel):
    name: str
    valid_until: Optional[date] = None

    model_config = ConfigDict(from_attributes=True)


class PaymentTermResponse(BaseModel):
    name: str
    amount: Decimal
    valid_until: Optional[date] = None

    model_config = ConfigDict(from_attributes=True)


class TermRecordCreate(BaseModel):
    identifier: Identifier
    term_name: str = Field(..., min_length=1)


class WaiverResponse(BaseModel):
    id: int
    member_identifier: str
    valid_until: date
    signed_on: datetime

    model_config = ConfigDict(from_attributes=True)


class PaymentResponse(BaseModel):
    id: int
    member_identifier: str
    amount: Decimal
    paid_on: datetime
    valid_until: date

    model_config = ConfigDict(from_attributes=True)


# ---------------------------------------------------------------------------
# Attendance
# ---------------------------------------------------------------------------


class AttendanceEntry(BaseModel):
    """One door sign-in, joined to the member's name when known."""

    identifier: str
    name: Optional[str] = None
    timestamp: datetime
    admitted: bool
