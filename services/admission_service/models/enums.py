"""Enum definitions for admission service models."""

import enum


class AdmissionStatus(str, enum.Enum):
    NOT_FOUND = "not_found"
    ACTIVE = "active"
    # Kept for client compatibility; the waiver-only case always goes through
    # the warning states instead.
    UNPAID = "unpaid"
    NO_WAIVER = "no_waiver"
    INACTIVE = "inactive"
    WARNING_ISSUED = "warning_issued"
    WARNING_ACTIVE = "warning_active"
    WARNING_EXPIRED = "warning_expired"

    @property
    def admits(self) -> bool:
        return self in ADMITTED_STATUSES


ADMITTED_STATUSES = frozenset(
    {
        AdmissionStatus.ACTIVE,
        AdmissionStatus.WARNING_ISSUED,
        AdmissionStatus.WARNING_ACTIVE,
    }
)


class MemberUpsertResult(str, enum.Enum):
    CREATED = "created"
    UPDATED = "updated"
    UNCHANGED = "unchanged"
