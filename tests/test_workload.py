from decimal import Decimal

import pytest

from app.models.work_item import WorkItemStatus
from app.services import workload
from app.services.employees import get_profile


async def test_active_count_only_counts_active_statuses(db, employee_id, other_employee_id, add_work_item):
    for status in WorkItemStatus:
        await add_work_item(employee_id, status)
    await add_work_item(other_employee_id, WorkItemStatus.TODO)

    # ToDo, InProgress, Review
    assert await workload.active_count(db, employee_id) == 3


async def test_active_count_for_empty_id_is_zero(db):
    assert await workload.active_count(db, None) == 0


@pytest.mark.parametrize("items, allowed", [(0, True), (9, True), (10, False), (12, False)])
async def test_can_assign_respects_cap(db, employee_id, add_work_item, items, allowed):
    for _ in range(items):
        await add_work_item(employee_id, WorkItemStatus.IN_PROGRESS)

    assert await workload.can_assign(db, employee_id) is allowed


@pytest.mark.parametrize("items, expected", [(0, "0"), (1, "10"), (7, "70"), (10, "100"), (13, "100")])
async def test_recompute_tracks_active_count_capped(db, employee_id, add_work_item, items, expected):
    for _ in range(items):
        await add_work_item(employee_id, WorkItemStatus.REVIEW)

    profile = await workload.recompute(db, employee_id)

    assert profile.current_workload == Decimal(expected)
    assert Decimal("0") <= profile.current_workload <= Decimal("100")


async def test_recompute_is_idempotent(db, employee_id, add_work_item):
    for _ in range(4):
        await add_work_item(employee_id)

    first = (await workload.recompute(db, employee_id)).current_workload
    second = (await workload.recompute(db, employee_id)).current_workload

    assert first == second == Decimal("40")


async def test_recompute_corrects_drifted_cache(db, employee_id, add_work_item, set_scores):
    await add_work_item(employee_id)
    await set_scores(employee_id, workload=90)

    await workload.recompute(db, employee_id)

    assert (await get_profile(db, employee_id)).current_workload == Decimal("10")


async def test_recompute_without_profile_is_a_no_op(db, manager_id):
    assert await workload.recompute(db, manager_id) is None


async def test_inactive_items_do_not_add_workload(db, employee_id, add_work_item):
    await add_work_item(employee_id, WorkItemStatus.DONE)
    await add_work_item(employee_id, WorkItemStatus.REJECTED)
    await add_work_item(employee_id, WorkItemStatus.CANCELLED)

    assert await workload.calculate_workload_percentage(db, employee_id) == Decimal("0")
