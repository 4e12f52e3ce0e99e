from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from app.database import get_db
from app.core.auth import get_current_user
from app.schemas.profile import ScoreSummaryResponse
from app.services.assignment import score_summary

router = APIRouter(prefix="/employees", tags=["employees"])

@router.get("/{employee_id}/scores", response_model=ScoreSummaryResponse)
async def get_employee_scores(
    employee_id: int,
    db: AsyncSession = Depends(get_db),
    current_user = Depends(get_current_user)
):
    """
    Read-only performance and workload view: managers see anyone, employees only themselves.
    """
    if not current_user.is_manager and current_user.id != employee_id:
        raise HTTPException(403, "Managers only, or your own scores")
    return await score_summary(db, employee_id)
