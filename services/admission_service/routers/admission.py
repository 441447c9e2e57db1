"""Door admission endpoint."""

from fastapi import APIRouter, Depends, HTTPException, status
from libs.common.config import get_settings
from libs.db.session import get_session_factory
from services.admission_service.schemas import (
    AdmissionCheckRequest,
    AdmissionCheckResponse,
)
from services.admission_service.services.engine import AdmissionEngine
from services.admission_service.services.store import SqlAlchemyMembershipStore
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

router = APIRouter(prefix="/admission", tags=["admission"])
settings = get_settings()


def get_admission_engine(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> AdmissionEngine:
    return AdmissionEngine(SqlAlchemyMembershipStore(session_factory))


@router.post("/check", response_model=AdmissionCheckResponse)
async def check_member(
    payload: AdmissionCheckRequest,
    engine: AdmissionEngine = Depends(get_admission_engine),
):
    """
    Decide whether the member may enter and record the sign-in.
    Returns 503 when the check could not be recorded; retrying is safe.
    """
    result = await engine.evaluate(payload.identifier)
    if not result.ok:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=result.failure.message,
            headers={"Retry-After": str(settings.ADMISSION_RETRY_AFTER_SECONDS)},
        )

    outcome = result.outcome
    return AdmissionCheckResponse(
        status=outcome.status, message=outcome.message, name=outcome.name
    )
