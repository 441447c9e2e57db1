from datetime import date
from typing import List

from fastapi import APIRouter, Depends, Query
from libs.db.session import get_async_db
from services.admission_service.schemas import AttendanceEntry
from services.admission_service.services.records import list_sign_ins_for_date
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/attendance", tags=["attendance"])


@router.get("", response_model=List[AttendanceEntry])
async def get_attendance(
    day: date = Query(..., description="Calendar day in the facility timezone"),
    db: AsyncSession = Depends(get_async_db),
):
    """
    Door sign-ins for one day, oldest first, including refused entries.
    """
    rows = await list_sign_ins_for_date(db, day)
    return [
        AttendanceEntry(
            identifier=sign_in.member_identifier,
            name=name,
            timestamp=sign_in.timestamp,
            admitted=sign_in.admitted,
        )
        for sign_in, name in rows
    ]
