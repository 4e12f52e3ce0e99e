from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional
from app.models.work_item import WorkItemStatus, WorkItemPriority

class WorkItemCreate(BaseModel):
    project_id: int
    assigned_to_id: int
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    priority: WorkItemPriority = WorkItemPriority.MEDIUM
    deadline: Optional[datetime] = None  # defaults to seven days from creation

class WorkItemStatusUpdate(BaseModel):
    status: WorkItemStatus
    comments: Optional[str] = None

class WorkItemResponse(BaseModel):
    id: int
    project_id: int
    assigned_to_id: int
    created_by_id: int
    name: str
    description: Optional[str]
    priority: str
    status: str
    deadline: datetime
    comments: Optional[str]
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
