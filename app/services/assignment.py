import logging
from datetime import datetime, timedelta, timezone
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from app.core.errors import (
    Unauthenticated, NotFound, ProjectNotActive, EmployeeNotEligible,
    CapacityExceeded, PerformanceBelowThreshold,
)
from app.models.profile import EmployeeScoreProfile
from app.models.project import Project, PROJECT_ACTIVE
from app.models.user import ROLE_EMPLOYEE
from app.models.work_item import WorkItem, WorkItemStatus, WorkItemPriority
from app.services import performance, workload
from app.services.employees import get_user, get_profile
from app.services.unit_of_work import unit_of_work

logger = logging.getLogger(__name__)

DEFAULT_DEADLINE = timedelta(days=7)


async def authorize_assignment(db: AsyncSession, employee_id: int) -> Optional[EmployeeScoreProfile]:
    """Admission control for a new assignment.

    Raises CapacityExceeded or PerformanceBelowThreshold; capacity is reported
    first when both fail. Assumes employee_id already resolved to an employee.

    Returns the score profile read before counting. Keep it referenced until
    commit; its row version is what turns a racing assignment into a
    ConcurrencyConflict.
    """
    profile = await get_profile(db, employee_id)

    if not await workload.can_assign(db, employee_id):
        logger.warning("Assignment to employee %s denied: capacity exceeded", employee_id)
        raise CapacityExceeded(
            f"Employee {employee_id} has reached the maximum of "
            f"{workload.MAX_ACTIVE_ITEMS} active work items"
        )

    if not await performance.is_eligible_for_assignment(db, employee_id):
        score = await performance.score_of(db, employee_id)
        logger.warning("Assignment to employee %s denied: performance %s%%", employee_id, score)
        raise PerformanceBelowThreshold(
            f"Employee {employee_id} performance {score}% is below the required "
            f"threshold ({performance.MIN_PERFORMANCE}%)"
        )

    return profile


async def create_assignment(
    db: AsyncSession,
    project_id: int,
    employee_id: int,
    name: str,
    priority: str,
    deadline: Optional[datetime],
    creator_id: Optional[int],
    description: Optional[str] = None,
) -> WorkItem:
    async with unit_of_work(db):
        if not creator_id:
            raise Unauthenticated("User not authenticated")

        result = await db.execute(select(Project).where(Project.id == project_id))
        project = result.scalar_one_or_none()
        if project is None:
            raise NotFound(f"Project {project_id} not found")
        if project.status != PROJECT_ACTIVE:
            raise ProjectNotActive(
                f"Cannot add work items to project {project_id} with status {project.status}"
            )

        employee = await get_user(db, employee_id)
        if employee is None:
            raise EmployeeNotEligible(f"Assigned user {employee_id} not found")
        if employee.role != ROLE_EMPLOYEE:
            raise EmployeeNotEligible(
                f"Can only assign work items to employees; user {employee_id} has role {employee.role}",
                role=employee.role,
            )

        # Held until commit so recompute writes against the version read before counting
        pinned_profile = await authorize_assignment(db, employee_id)

        now = datetime.now(timezone.utc)
        work_item = WorkItem(
            project_id=project_id,
            assigned_to_id=employee_id,
            created_by_id=creator_id,
            name=name,
            description=description,
            priority=WorkItemPriority(priority).value,
            status=WorkItemStatus.TODO.value,
            deadline=deadline or now + DEFAULT_DEADLINE,
            created_at=now,
            updated_at=now,
        )
        db.add(work_item)
        await db.flush()

        await workload.recompute(db, employee_id, pinned_profile)

    logger.info("Created work item %s for employee %s in project %s", work_item.id, employee_id, project_id)
    return work_item


async def score_summary(db: AsyncSession, employee_id: int) -> dict:
    """Read-only view of both engines for one employee."""
    profile = await get_profile(db, employee_id)
    if profile is None:
        raise NotFound(f"Score profile for employee {employee_id} not found")

    return {
        "employee_id": employee_id,
        "performance": await performance.score_of(db, employee_id),
        "current_workload": profile.current_workload,
        "accepted_streak": profile.accepted_streak,
        "active_count": await workload.active_count(db, employee_id),
        "can_assign": await workload.can_assign(db, employee_id),
        "is_eligible_for_assignment": await performance.is_eligible_for_assignment(db, employee_id),
    }
