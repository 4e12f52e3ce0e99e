"""Tests for admission control and work item creation.

Covers:
- Capacity cap (ten assignments succeed, the eleventh is refused)
- Performance threshold
- Capacity reported before performance when both fail
- Collaborator checks: project existence/status, assignee role, caller identity
- Workload recomputed in the same commit as the new item
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from sqlalchemy import select, func

from app.core.errors import (
    CapacityExceeded, PerformanceBelowThreshold, AssignmentDenied,
    EmployeeNotEligible, NotFound, ProjectNotActive, Unauthenticated,
)
from app.models.project import Project, PROJECT_CLOSED
from app.models.work_item import WorkItem, WorkItemStatus
from app.services.assignment import authorize_assignment, create_assignment, score_summary
from app.services.employees import get_profile


def _assign(db, project_id, employee_id, manager_id, **overrides):
    kwargs = dict(
        project_id=project_id,
        employee_id=employee_id,
        name="Write release notes",
        priority="Major",
        deadline=None,
        creator_id=manager_id,
    )
    kwargs.update(overrides)
    return create_assignment(db, **kwargs)


async def _count_items(db, employee_id) -> int:
    result = await db.execute(
        select(func.count(WorkItem.id)).where(WorkItem.assigned_to_id == employee_id)
    )
    return result.scalar_one()


async def test_creates_item_in_todo_and_updates_workload(db, project_id, employee_id, manager_id):
    item = await _assign(db, project_id, employee_id, manager_id)

    assert item.id is not None
    assert item.status == WorkItemStatus.TODO.value
    assert item.assigned_to_id == employee_id
    assert item.created_by_id == manager_id
    assert item.priority == "Major"
    assert (await get_profile(db, employee_id)).current_workload == Decimal("10")


async def test_missing_deadline_defaults_to_a_week(db, project_id, employee_id, manager_id):
    before = datetime.now(timezone.utc)
    item = await _assign(db, project_id, employee_id, manager_id)

    assert before + timedelta(days=7) <= item.deadline <= datetime.now(timezone.utc) + timedelta(days=7)


async def test_eleventh_assignment_exceeds_capacity(db, project_id, employee_id, manager_id):
    for _ in range(10):
        await _assign(db, project_id, employee_id, manager_id)

    assert (await get_profile(db, employee_id)).current_workload == Decimal("100")

    with pytest.raises(CapacityExceeded) as exc_info:
        await _assign(db, project_id, employee_id, manager_id)

    assert "maximum of 10 active work items" in str(exc_info.value)
    assert await _count_items(db, employee_id) == 10


async def test_finished_items_free_capacity(db, project_id, employee_id, manager_id, add_work_item):
    for _ in range(9):
        await add_work_item(employee_id, WorkItemStatus.IN_PROGRESS)
    for _ in range(5):
        await add_work_item(employee_id, WorkItemStatus.DONE)

    await _assign(db, project_id, employee_id, manager_id)

    assert await _count_items(db, employee_id) == 15


async def test_low_performance_blocks_assignment(db, project_id, employee_id, manager_id, set_scores):
    await set_scores(employee_id, performance=35)

    with pytest.raises(PerformanceBelowThreshold) as exc_info:
        await _assign(db, project_id, employee_id, manager_id)

    assert "below the required threshold (40.0%)" in str(exc_info.value)
    assert await _count_items(db, employee_id) == 0


async def test_threshold_is_inclusive(db, project_id, employee_id, manager_id, set_scores):
    await set_scores(employee_id, performance=40)

    await _assign(db, project_id, employee_id, manager_id)


async def test_capacity_reported_before_performance(db, employee_id, add_work_item, set_scores):
    await set_scores(employee_id, performance=10)
    for _ in range(10):
        await add_work_item(employee_id)

    with pytest.raises(CapacityExceeded):
        await authorize_assignment(db, employee_id)


async def test_denials_share_a_base(db, employee_id, set_scores):
    await set_scores(employee_id, performance=0)

    with pytest.raises(AssignmentDenied):
        await authorize_assignment(db, employee_id)


async def test_unknown_project(db, employee_id, manager_id):
    with pytest.raises(NotFound):
        await _assign(db, 999, employee_id, manager_id)


async def test_closed_project(db, employee_id, manager_id, project_id):
    project = (await db.execute(select(Project).where(Project.id == project_id))).scalar_one()
    project.status = PROJECT_CLOSED
    await db.commit()

    with pytest.raises(ProjectNotActive):
        await _assign(db, project_id, employee_id, manager_id)


async def test_only_employees_can_be_assigned(db, project_id, manager_id):
    with pytest.raises(EmployeeNotEligible) as exc_info:
        await _assign(db, project_id, manager_id, manager_id)

    assert exc_info.value.role == "manager"
    assert "role manager" in str(exc_info.value)


async def test_unknown_assignee(db, project_id, manager_id):
    with pytest.raises(EmployeeNotEligible):
        await _assign(db, project_id, 4242, manager_id)


async def test_creator_must_be_identified(db, project_id, employee_id):
    with pytest.raises(Unauthenticated):
        await _assign(db, project_id, employee_id, None)


async def test_denied_assignment_leaves_workload_untouched(db, project_id, employee_id, manager_id, add_work_item, set_scores):
    await add_work_item(employee_id)
    await set_scores(employee_id, performance=20, workload=10)

    with pytest.raises(PerformanceBelowThreshold):
        await _assign(db, project_id, employee_id, manager_id)

    assert (await get_profile(db, employee_id)).current_workload == Decimal("10")


async def test_score_summary(db, project_id, employee_id, manager_id):
    await _assign(db, project_id, employee_id, manager_id)
    await _assign(db, project_id, employee_id, manager_id)

    summary = await score_summary(db, employee_id)

    assert summary == {
        "employee_id": employee_id,
        "performance": Decimal("100"),
        "current_workload": Decimal("20"),
        "accepted_streak": 0,
        "active_count": 2,
        "can_assign": True,
        "is_eligible_for_assignment": True,
    }


async def test_score_summary_without_profile(db, manager_id):
    with pytest.raises(NotFound):
        await score_summary(db, manager_id)
