"""Term lookup: resolves named waiver/payment terms to their validity window."""

from datetime import date
from typing import Sequence

from services.admission_service.models import PaymentTerm, WaiverTerm
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession


class TermNotFoundError(LookupError):
    def __init__(self, kind: str, name: str):
        super().__init__(f"{kind.capitalize()} term not found: {name}")
        self.kind = kind
        self.name = name


class TermLookup:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def waiver_term(self, name: str) -> WaiverTerm:
        result = await self.db.execute(
            select(WaiverTerm).where(WaiverTerm.name == name)
        )
        term = result.scalar_one_or_none()
        if term is None:
            raise TermNotFoundError("waiver", name)
        return term

    async def payment_term(self, name: str) -> PaymentTerm:
        result = await self.db.execute(
            select(PaymentTerm).where(PaymentTerm.name == name)
        )
        term = result.scalar_one_or_none()
        if term is None:
            raise TermNotFoundError("payment", name)
        return term

    async def active_waiver_terms(self, today: date) -> Sequence[WaiverTerm]:
        """Terms that are open-ended or still valid on ``today``."""
        result = await self.db.execute(
            select(WaiverTerm)
            .where(
                or_(WaiverTerm.valid_until.is_(None), WaiverTerm.valid_until >= today)
            )
            .order_by(WaiverTerm.name)
        )
        return result.scalars().all()

    async def active_payment_terms(self, today: date) -> Sequence[PaymentTerm]:
        result = await self.db.execute(
            select(PaymentTerm)
            .where(
                or_(PaymentTerm.valid_until.is_(None), PaymentTerm.valid_until >= today)
            )
            .order_by(PaymentTerm.name)
        )
        return result.scalars().all()
