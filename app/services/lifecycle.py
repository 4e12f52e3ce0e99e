"""Work item status lifecycle.

    ToDo       -> InProgress
    InProgress -> Review
    Review     -> Done | InProgress   (Done by managers only)
    Rejected   -> InProgress
    Done       -> (terminal)

Only the assignee may move an item into InProgress or Review, except that a
manager may send reviewed work back to InProgress. Checks run in a
fixed order: existence, authentication, transition legality, authorization.
A successful transition feeds the performance engine on outcomes and the
workload engine whenever the item enters or leaves the active set, all in the
same commit.
"""
import logging
from datetime import datetime, timezone
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from app.core.errors import (
    NotFound, Unauthenticated, Forbidden, InvalidTransition, ConcurrencyConflict,
)
from app.models.work_item import WorkItem, WorkItemStatus, is_active_status
from app.services import performance, workload
from app.services.unit_of_work import unit_of_work

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS = {
    WorkItemStatus.TODO: frozenset({WorkItemStatus.IN_PROGRESS}),
    WorkItemStatus.IN_PROGRESS: frozenset({WorkItemStatus.REVIEW}),
    WorkItemStatus.REVIEW: frozenset({WorkItemStatus.DONE, WorkItemStatus.IN_PROGRESS}),
    WorkItemStatus.REJECTED: frozenset({WorkItemStatus.IN_PROGRESS}),
    WorkItemStatus.DONE: frozenset(),
    WorkItemStatus.CANCELLED: frozenset(),
}


def _as_status(value) -> WorkItemStatus:
    try:
        return WorkItemStatus(value)
    except ValueError:
        raise InvalidTransition(f"Unknown work item status: {value}") from None


def allowed_next(current) -> frozenset:
    return ALLOWED_TRANSITIONS.get(_as_status(current), frozenset())


def check_transition(current, new, is_manager: bool, is_assignee: bool) -> None:
    """Raise InvalidTransition or Forbidden if the caller may not make this move."""
    current = _as_status(current)
    new = _as_status(new)

    if new not in allowed_next(current):
        raise InvalidTransition(
            f"Invalid status transition from {current.value} to {new.value}"
        )

    if new == WorkItemStatus.DONE and not is_manager:
        raise Forbidden(
            f"Only a manager can move a work item from {current.value} to {new.value}"
        )
    if new == WorkItemStatus.IN_PROGRESS and not is_assignee and not (
        current == WorkItemStatus.REVIEW and is_manager
    ):
        raise Forbidden(
            f"Only the assigned employee can move a work item from {current.value} to {new.value}"
        )
    if new == WorkItemStatus.REVIEW and not is_assignee:
        raise Forbidden(
            f"Only the assigned employee can submit work for review ({current.value} to {new.value})"
        )


def outcome_of(old, new) -> Optional[bool]:
    """Accepted flag for the performance engine, or None when the move is not an outcome."""
    old = WorkItemStatus(old)
    new = WorkItemStatus(new)
    if new == WorkItemStatus.DONE:
        return True
    if new == WorkItemStatus.REJECTED:
        return False
    # Sent back from review without approval
    if new == WorkItemStatus.IN_PROGRESS and old == WorkItemStatus.REVIEW:
        return False
    return None


def changes_activity(old, new) -> bool:
    return is_active_status(old) != is_active_status(new)


async def get_work_item(db: AsyncSession, work_item_id: int) -> Optional[WorkItem]:
    result = await db.execute(select(WorkItem).where(WorkItem.id == work_item_id))
    return result.scalar_one_or_none()


async def request_transition(
    db: AsyncSession,
    work_item_id: int,
    new_status,
    caller_id: Optional[int],
    caller_is_manager: bool,
    comments: Optional[str] = None,
) -> WorkItem:
    try:
        async with unit_of_work(db):
            work_item = await get_work_item(db, work_item_id)
            if work_item is None:
                raise NotFound(f"Work item {work_item_id} not found")

            if not caller_id:
                raise Unauthenticated("User not authenticated")

            is_assignee = work_item.assigned_to_id == caller_id
            old_status = _as_status(work_item.status)
            new_status = _as_status(new_status)
            check_transition(old_status, new_status, caller_is_manager, is_assignee)

            assignee_id = work_item.assigned_to_id
            work_item.status = new_status.value
            work_item.updated_at = datetime.now(timezone.utc)
            if comments:
                work_item.comments = comments
            await db.flush()

            accepted = outcome_of(old_status, new_status)
            if accepted is not None:
                await performance.record_outcome(db, assignee_id, accepted)

            if changes_activity(old_status, new_status):
                await workload.recompute(db, assignee_id)
    except ConcurrencyConflict:
        # A concurrent delete is reported as a missing item, not a conflict
        if await get_work_item(db, work_item_id) is None:
            raise NotFound(f"Work item {work_item_id} not found") from None
        raise

    logger.info(
        "Work item %s moved from %s to %s by user %s",
        work_item_id, old_status.value, new_status.value, caller_id,
    )
    return work_item


async def get_visible_work_item(
    db: AsyncSession, work_item_id: int, caller_id: int, caller_is_manager: bool
) -> WorkItem:
    """Managers see every item; employees only the ones assigned to them."""
    work_item = await get_work_item(db, work_item_id)
    if work_item is None or not (caller_is_manager or work_item.assigned_to_id == caller_id):
        raise NotFound(f"Work item {work_item_id} not found")
    return work_item


async def list_work_items(
    db: AsyncSession,
    caller_id: int,
    caller_is_manager: bool,
    project_id: Optional[int] = None,
    status: Optional[WorkItemStatus] = None,
) -> list:
    query = select(WorkItem)
    if not caller_is_manager:
        query = query.where(WorkItem.assigned_to_id == caller_id)
    if project_id is not None:
        query = query.where(WorkItem.project_id == project_id)
    if status is not None:
        query = query.where(WorkItem.status == WorkItemStatus(status).value)

    result = await db.execute(query.order_by(WorkItem.deadline, WorkItem.id))
    return list(result.scalars().all())
