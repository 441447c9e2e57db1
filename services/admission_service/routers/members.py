from fastapi import APIRouter, Depends
from libs.db.session import get_async_db
from services.admission_service.models import MemberUpsertResult
from services.admission_service.schemas import (
    MemberResponse,
    MemberUpsert,
    MemberUpsertResponse,
)
from services.admission_service.services.records import upsert_member
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/members", tags=["members"])

_UPSERT_MESSAGES = {
    MemberUpsertResult.CREATED: "New member created",
    MemberUpsertResult.UPDATED: "Member updated",
    MemberUpsertResult.UNCHANGED: "No updates required",
}


@router.post("", response_model=MemberUpsertResponse)
async def create_or_update_member(
    payload: MemberUpsert,
    db: AsyncSession = Depends(get_async_db),
):
    """
    Create a member, or update the name/email of an existing one.
    Empty fields leave the stored values untouched.
    """
    member, result = await upsert_member(
        db,
        identifier=payload.identifier,
        name=payload.name,
        email=payload.email,
    )
    return MemberUpsertResponse(
        result=result,
        message=_UPSERT_MESSAGES[result],
        member=MemberResponse.model_validate(member),
    )
