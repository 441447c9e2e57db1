"""Membership store: transactional access to the admission record tables.

The admission engine talks to the store only through ``transaction()``, an async
context manager that commits on normal exit and rolls back on any error. Reads
inside one transaction see a consistent view; writes become visible together or
not at all.
"""

from contextlib import asynccontextmanager
from datetime import date, datetime
from typing import AsyncContextManager, AsyncIterator, Optional, Protocol

from libs.common.logging import get_logger
from services.admission_service.models import (
    Member,
    PaymentRecord,
    SignInRecord,
    WaiverRecord,
    WarningRecord,
)
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

logger = get_logger(__name__)


class StoreError(Exception):
    """The store could not complete a transaction; nothing was written."""


class MembershipTransaction(Protocol):
    async def get_member(self, identifier: str) -> Optional[Member]: ...

    async def get_current_waiver(
        self, identifier: str, today: date
    ) -> Optional[WaiverRecord]: ...

    async def get_current_payment(
        self, identifier: str, today: date
    ) -> Optional[PaymentRecord]: ...

    async def get_latest_warning(self, identifier: str) -> Optional[WarningRecord]: ...

    async def insert_warning(self, identifier: str, issued_at: datetime) -> None: ...

    async def insert_sign_in(
        self, identifier: str, timestamp: datetime, admitted: bool
    ) -> None: ...


class MembershipStore(Protocol):
    def transaction(self) -> AsyncContextManager[MembershipTransaction]: ...


# ---------------------------------------------------------------------------
# SQLAlchemy implementation
# ---------------------------------------------------------------------------


class SqlAlchemyTransaction:
    """Store operations bound to one session inside an open transaction."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_member(self, identifier: str) -> Optional[Member]:
        # Row lock serializes concurrent evaluations of the same member until
        # this transaction ends.
        result = await self.session.execute(
            select(Member).where(Member.identifier == identifier).with_for_update()
        )
        return result.scalar_one_or_none()

    async def get_current_waiver(
        self, identifier: str, today: date
    ) -> Optional[WaiverRecord]:
        result = await self.session.execute(
            select(WaiverRecord)
            .where(
                WaiverRecord.member_identifier == identifier,
                WaiverRecord.valid_until >= today,
            )
            .order_by(WaiverRecord.signed_on.desc(), WaiverRecord.id.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def get_current_payment(
        self, identifier: str, today: date
    ) -> Optional[PaymentRecord]:
        result = await self.session.execute(
            select(PaymentRecord)
            .where(
                PaymentRecord.member_identifier == identifier,
                PaymentRecord.valid_until >= today,
            )
            .order_by(PaymentRecord.paid_on.desc(), PaymentRecord.id.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def get_latest_warning(self, identifier: str) -> Optional[WarningRecord]:
        result = await self.session.execute(
            select(WarningRecord)
            .where(WarningRecord.member_identifier == identifier)
            .order_by(WarningRecord.issued_at.desc(), WarningRecord.id.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def insert_warning(self, identifier: str, issued_at: datetime) -> None:
        self.session.add(
            WarningRecord(member_identifier=identifier, issued_at=issued_at)
        )
        # Flush now so a duplicate warning fails inside this transaction.
        await self.session.flush()

    async def insert_sign_in(
        self, identifier: str, timestamp: datetime, admitted: bool
    ) -> None:
        self.session.add(
            SignInRecord(
                member_identifier=identifier, timestamp=timestamp, admitted=admitted
            )
        )
        await self.session.flush()


class SqlAlchemyMembershipStore:
    """Membership store backed by an async SQLAlchemy session factory."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[SqlAlchemyTransaction]:
        async with self._session_factory() as session:
            try:
                async with session.begin():
                    yield SqlAlchemyTransaction(session)
            except SQLAlchemyError as exc:
                logger.warning("Membership store transaction rolled back: %s", exc)
                raise StoreError(str(exc)) from exc
