"""Terms, waivers and payments."""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from libs.common.config import get_settings
from libs.common.datetime_utils import local_date, utc_now
from libs.db.session import get_async_db
from services.admission_service.schemas import (
    PaymentResponse,
    PaymentTermResponse,
    TermRecordCreate,
    WaiverResponse,
    WaiverTermResponse,
)
from services.admission_service.services.records import (
    MemberNotFoundError,
    record_payment,
    record_waiver,
)
from services.admission_service.services.terms import TermLookup, TermNotFoundError
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(tags=["records"])
settings = get_settings()


@router.get("/terms/waivers", response_model=List[WaiverTermResponse])
async def list_waiver_terms(db: AsyncSession = Depends(get_async_db)):
    """List waiver terms that can still be signed today."""
    today = local_date(utc_now(), settings.TIMEZONE)
    return await TermLookup(db).active_waiver_terms(today)


@router.get("/terms/payments", response_model=List[PaymentTermResponse])
async def list_payment_terms(db: AsyncSession = Depends(get_async_db)):
    """List payment terms that can still be purchased today."""
    today = local_date(utc_now(), settings.TIMEZONE)
    return await TermLookup(db).active_payment_terms(today)


@router.post("/waivers", response_model=WaiverResponse)
async def create_waiver(
    payload: TermRecordCreate,
    db: AsyncSession = Depends(get_async_db),
):
    try:
        return await record_waiver(
            db, identifier=payload.identifier, term_name=payload.term_name
        )
    except (MemberNotFoundError, TermNotFoundError) as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.post("/payments", response_model=PaymentResponse)
async def create_payment(
    payload: TermRecordCreate,
    db: AsyncSession = Depends(get_async_db),
):
    try:
        return await record_payment(
            db, identifier=payload.identifier, term_name=payload.term_name
        )
    except (MemberNotFoundError, TermNotFoundError) as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
