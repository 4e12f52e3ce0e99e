from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from datetime import datetime, timezone
from typing import List, Optional
from app.database import get_db
from app.core.auth import get_current_user, get_current_manager, get_optional_user
from app.models.work_item import WorkItemStatus
from app.schemas.work_item import WorkItemCreate, WorkItemStatusUpdate, WorkItemResponse
from app.services import assignment, lifecycle

router = APIRouter(prefix="/work-items", tags=["work-items"])

@router.post("", response_model=WorkItemResponse, status_code=status.HTTP_201_CREATED)
async def create_work_item(
    item_in: WorkItemCreate,
    db: AsyncSession = Depends(get_db),
    manager = Depends(get_current_manager)
):
    # ✅ Validate deadline is in the future
    deadline = item_in.deadline
    if deadline is not None:
        if deadline.tzinfo is None:
            deadline = deadline.replace(tzinfo=timezone.utc)
        if deadline <= datetime.now(timezone.utc):
            raise HTTPException(400, "Deadline must be in the future")

    return await assignment.create_assignment(
        db,
        project_id=item_in.project_id,
        employee_id=item_in.assigned_to_id,
        name=item_in.name,
        priority=item_in.priority,
        deadline=deadline,
        creator_id=manager.id,
        description=item_in.description,
    )


@router.patch("/{work_item_id}/status", response_model=WorkItemResponse)
async def update_work_item_status(
    work_item_id: int,
    status_in: WorkItemStatusUpdate,
    db: AsyncSession = Depends(get_db),
    current_user = Depends(get_optional_user)
):
    return await lifecycle.request_transition(
        db,
        work_item_id,
        status_in.status,
        caller_id=current_user.id if current_user else None,
        caller_is_manager=bool(current_user and current_user.is_manager),
        comments=status_in.comments,
    )


@router.get("", response_model=List[WorkItemResponse])
async def list_work_items(
    project_id: Optional[int] = None,
    status: Optional[WorkItemStatus] = None,
    db: AsyncSession = Depends(get_db),
    current_user = Depends(get_current_user)
):
    # Employees only ever see their own work items
    return await lifecycle.list_work_items(
        db,
        caller_id=current_user.id,
        caller_is_manager=current_user.is_manager,
        project_id=project_id,
        status=status,
    )


@router.get("/{work_item_id}", response_model=WorkItemResponse)
async def get_work_item(
    work_item_id: int,
    db: AsyncSession = Depends(get_db),
    current_user = Depends(get_current_user)
):
    return await lifecycle.get_visible_work_item(
        db, work_item_id, current_user.id, current_user.is_manager
    )
