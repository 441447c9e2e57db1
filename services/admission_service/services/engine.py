"""Admission decision engine.

Given a member identifier presented at the door, decide whether the person may
enter and record the visit. Each evaluation runs in one store transaction:

1. Look up the member (unknown identifiers are logged and refused)
2. Read the current waiver and current payment
3. Waiver without payment goes through the warning states:
   first unpaid visit issues a warning and admits, later visits admit while the
   warning is younger than the grace window, and refuse once it is older
4. Any other combination admits only with both waiver and payment
5. Write exactly one sign-in row carrying the admitted flag

Store failures roll the whole evaluation back and come back as a
``StoreFailure``; callers retry from scratch.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from libs.common.config import get_settings
from libs.common.datetime_utils import as_utc, hours_between, local_date, utc_now
from libs.common.logging import get_logger
from services.admission_service.models import AdmissionStatus
from services.admission_service.services.store import (
    MembershipStore,
    MembershipTransaction,
    StoreError,
)

logger = get_logger(__name__)

STATUS_MESSAGES: dict[AdmissionStatus, str] = {
    AdmissionStatus.NOT_FOUND: "Member not found. Please sign a waiver.",
    AdmissionStatus.ACTIVE: "Member has a valid waiver and payment.",
    AdmissionStatus.UNPAID: "Member has a valid waiver but needs to pay.",
    AdmissionStatus.NO_WAIVER: "Member has paid but needs to sign a waiver.",
    AdmissionStatus.INACTIVE: "Member needs to sign a waiver and pay.",
    AdmissionStatus.WARNING_ISSUED: (
        "Warning issued. Member allowed entry this time. Please pay soon."
    ),
    AdmissionStatus.WARNING_ACTIVE: "Member admitted. Please pay soon.",
    AdmissionStatus.WARNING_EXPIRED: (
        "Previous warning expired. Entry not allowed. Please pay to regain access."
    ),
}


@dataclass(frozen=True)
class AdmissionOutcome:
    status: AdmissionStatus
    message: str
    name: Optional[str] = None

    @property
    def admitted(self) -> bool:
        return self.status.admits

    @classmethod
    def for_status(
        cls, status: AdmissionStatus, name: Optional[str] = None
    ) -> "AdmissionOutcome":
        return cls(status=status, message=STATUS_MESSAGES[status], name=name)


@dataclass(frozen=True)
class StoreFailure:
    """The evaluation could not complete; nothing was recorded."""

    identifier: str
    reason: str
    message: str = "Could not check membership right now. Please try again."


@dataclass(frozen=True)
class AdmissionResult:
    """Either an outcome or a failure, never both."""

    outcome: Optional[AdmissionOutcome] = None
    failure: Optional[StoreFailure] = None

    @property
    def ok(self) -> bool:
        return self.failure is None


class AdmissionEngine:
    """Stateless decision procedure over an injected membership store."""

    def __init__(
        self,
        store: MembershipStore,
        *,
        clock: Callable[[], datetime] = utc_now,
        grace_hours: Optional[int] = None,
        timezone: Optional[str] = None,
    ):
        settings = get_settings()
        self.store = store
        self.clock = clock
        self.grace_hours = (
            grace_hours if grace_hours is not None else settings.WARNING_GRACE_HOURS
        )
        self.timezone = timezone or settings.TIMEZONE

    async def evaluate(self, identifier: str) -> AdmissionResult:
        """Decide admission for a padded identifier and record the visit."""
        now = as_utc(self.clock())
        try:
            async with self.store.transaction() as txn:
                outcome = await self._decide(txn, identifier, now)
        except StoreError as exc:
            logger.exception("Admission check for %s failed", identifier)
            return AdmissionResult(
                failure=StoreFailure(identifier=identifier, reason=str(exc))
            )

        logger.info(
            "Admission check for %s: %s (admitted=%s)",
            identifier,
            outcome.status.value,
            outcome.admitted,
        )
        return AdmissionResult(outcome=outcome)

    async def _decide(
        self, txn: MembershipTransaction, identifier: str, now: datetime
    ) -> AdmissionOutcome:
        member = await txn.get_member(identifier)
        if member is None:
            await txn.insert_sign_in(identifier, now, admitted=False)
            return AdmissionOutcome.for_status(AdmissionStatus.NOT_FOUND)

        today = local_date(now, self.timezone)
        waiver = await txn.get_current_waiver(identifier, today)
        payment = await txn.get_current_payment(identifier, today)

        if waiver is not None and payment is None:
            status = await self._grace_status(txn, identifier, now)
        elif waiver is not None:
            status = AdmissionStatus.ACTIVE
        elif payment is not None:
            status = AdmissionStatus.NO_WAIVER
        else:
            status = AdmissionStatus.INACTIVE

        await txn.insert_sign_in(identifier, now, admitted=status.admits)
        return AdmissionOutcome.for_status(status, name=member.name)

    async def _grace_status(
        self, txn: MembershipTransaction, identifier: str, now: datetime
    ) -> AdmissionStatus:
        warning = await txn.get_latest_warning(identifier)
        if warning is None:
            await txn.insert_warning(identifier, now)
            return AdmissionStatus.WARNING_ISSUED

        if hours_between(warning.issued_at, now) <= self.grace_hours:
            return AdmissionStatus.WARNING_ACTIVE
        return AdmissionStatus.WARNING_EXPIRED
