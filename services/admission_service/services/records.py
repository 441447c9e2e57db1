"""Member registration and record-keeping around the admission engine."""

from datetime import date, datetime
from typing import Optional

from libs.common.config import get_settings
from libs.common.datetime_utils import local_day_bounds, utc_now
from libs.common.logging import get_logger
from services.admission_service.models import (
    Member,
    MemberUpsertResult,
    PaymentRecord,
    SignInRecord,
    WaiverRecord,
)
from services.admission_service.services.terms import TermLookup
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

# Stored for terms without an end date so validity stays a plain date comparison.
OPEN_ENDED_VALID_UNTIL = date.max


class MemberNotFoundError(LookupError):
    def __init__(self, identifier: str):
        super().__init__(f"Member not found: {identifier}")
        self.identifier = identifier


async def _require_member(db: AsyncSession, identifier: str) -> Member:
    member = await db.get(Member, identifier)
    if member is None:
        raise MemberNotFoundError(identifier)
    return member


# ---------------------------------------------------------------------------
# Members
# ---------------------------------------------------------------------------


async def upsert_member(
    db: AsyncSession,
    *,
    identifier: str,
    name: Optional[str] = None,
    email: Optional[str] = None,
) -> tuple[Member, MemberUpsertResult]:
    """Create the member, or update only the fields that were provided."""
    member = await db.get(Member, identifier)

    if member is None:
        member = Member(identifier=identifier, name=name, email=email)
        db.add(member)
        await db.commit()
        await db.refresh(member)
        logger.info("Created member %s", identifier)
        return member, MemberUpsertResult.CREATED

    changed = False
    if name and name != member.name:
        member.name = name
        changed = True
    if email and email != member.email:
        member.email = email
        changed = True

    if not changed:
        return member, MemberUpsertResult.UNCHANGED

    await db.commit()
    await db.refresh(member)
    logger.info("Updated member %s", identifier)
    return member, MemberUpsertResult.UPDATED


# ---------------------------------------------------------------------------
# Waivers & payments
# ---------------------------------------------------------------------------


async def record_waiver(
    db: AsyncSession,
    *,
    identifier: str,
    term_name: str,
    now: Optional[datetime] = None,
) -> WaiverRecord:
    """Append a waiver whose validity comes from the named term."""
    await _require_member(db, identifier)
    term = await TermLookup(db).waiver_term(term_name)

    waiver = WaiverRecord(
        member_identifier=identifier,
        valid_until=term.valid_until or OPEN_ENDED_VALID_UNTIL,
        signed_on=now or utc_now(),
    )
    db.add(waiver)
    await db.commit()
    await db.refresh(waiver)

    logger.info(
        "Recorded waiver for %s under term %r (valid until %s)",
        identifier,
        term_name,
        waiver.valid_until,
    )
    return waiver


async def record_payment(
    db: AsyncSession,
    *,
    identifier: str,
    term_name: str,
    now: Optional[datetime] = None,
) -> PaymentRecord:
    """Append a payment priced and dated by the named term."""
    await _require_member(db, identifier)
    term = await TermLookup(db).payment_term(term_name)

    payment = PaymentRecord(
        member_identifier=identifier,
        amount=term.amount,
        paid_on=now or utc_now(),
        valid_until=term.valid_until or OPEN_ENDED_VALID_UNTIL,
    )
    db.add(payment)
    await db.commit()
    await db.refresh(payment)

    logger.info(
        "Recorded payment of %s for %s under term %r (valid until %s)",
        payment.amount,
        identifier,
        term_name,
        payment.valid_until,
    )
    return payment


# ---------------------------------------------------------------------------
# Attendance
# ---------------------------------------------------------------------------


async def list_sign_ins_for_date(
    db: AsyncSession,
    day: date,
    tz_name: Optional[str] = None,
) -> list[tuple[SignInRecord, Optional[str]]]:
    """
    Sign-ins recorded on ``day`` in the facility timezone, oldest first.

    Returns:
        ``(sign_in, member_name)`` pairs; the name is None for identifiers
        with no member row.
    """
    start, end = local_day_bounds(day, tz_name or get_settings().TIMEZONE)
    result = await db.execute(
        select(SignInRecord, Member.name)
        .outerjoin(Member, Member.identifier == SignInRecord.member_identifier)
        .where(SignInRecord.timestamp >= start, SignInRecord.timestamp < end)
        .order_by(SignInRecord.timestamp, SignInRecord.id)
    )
    return [(sign_in, name) for sign_in, name in result.all()]
