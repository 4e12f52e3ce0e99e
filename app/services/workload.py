import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from app.models.profile import EmployeeScoreProfile
from app.models.work_item import WorkItem, ACTIVE_STATUSES
from app.services.employees import get_profile

logger = logging.getLogger(__name__)

MAX_ACTIVE_ITEMS = 10  # Maximum active work items per employee
MAX_WORKLOAD = Decimal("100.0")


async def active_count(db: AsyncSession, employee_id: Optional[int]) -> int:
    """Work items assigned to the employee in ToDo, InProgress or Review."""
    if not employee_id:
        logger.warning("Employee id cannot be empty")
        return 0

    result = await db.execute(
        select(func.count(WorkItem.id))
        .where(WorkItem.assigned_to_id == employee_id)
        .where(WorkItem.status.in_([s.value for s in ACTIVE_STATUSES]))
    )
    return result.scalar_one()


async def can_assign(db: AsyncSession, employee_id: Optional[int]) -> bool:
    count = await active_count(db, employee_id)
    allowed = count < MAX_ACTIVE_ITEMS
    logger.info(
        "Employee %s can%s be assigned a new work item. Current active items: %d/%d",
        employee_id, "" if allowed else "not", count, MAX_ACTIVE_ITEMS,
    )
    return allowed


async def calculate_workload_percentage(db: AsyncSession, employee_id: Optional[int]) -> Decimal:
    count = await active_count(db, employee_id)
    percentage = Decimal(count) / MAX_ACTIVE_ITEMS * 100
    # Counts above the cap only appear through data drift
    return min(percentage, MAX_WORKLOAD)


async def recompute(
    db: AsyncSession,
    employee_id: Optional[int],
    profile: Optional[EmployeeScoreProfile] = None,
) -> Optional[EmployeeScoreProfile]:
    """Refresh the cached workload percentage from the live active count.

    Pass a profile loaded earlier in the same unit of work to write against
    the row version seen then.
    """
    if profile is None:
        profile = await get_profile(db, employee_id)
    if profile is None:
        logger.warning("Score profile not found for employee %s; workload not updated", employee_id)
        return None

    workload = await calculate_workload_percentage(db, employee_id)
    profile.current_workload = workload
    # Always touched so the versioned row is rewritten even when the value is unchanged
    profile.updated_at = datetime.now(timezone.utc)
    await db.flush()
    logger.info("Updated workload for employee %s to %s%%", employee_id, workload)
    return profile
