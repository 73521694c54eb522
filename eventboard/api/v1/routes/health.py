from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from eventboard.api.deps import get_admission
from eventboard.core.db import get_db_session
from eventboard.services.admission import AdmissionPolicies

router = APIRouter()


@router.get("/health")
async def health(
    admission: AdmissionPolicies = Depends(get_admission),
) -> dict[str, str | int]:
    return {
        "status": "ok",
        "tracked_identifiers": len(admission.event_creation) + len(admission.event_join),
    }


@router.get("/health/db")
async def db_health(session: AsyncSession = Depends(get_db_session)) -> dict[str, str]:
    await session.execute(text("SELECT 1"))
    return {"db": "ok"}
