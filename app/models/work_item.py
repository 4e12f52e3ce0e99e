import enum
from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey
from app.database import Base


class WorkItemStatus(str, enum.Enum):
    TODO = "ToDo"
    IN_PROGRESS = "InProgress"
    REVIEW = "Review"
    DONE = "Done"
    REJECTED = "Rejected"
    # Recognised but never entered or left through a transition.
    CANCELLED = "Cancelled"


class WorkItemPriority(str, enum.Enum):
    CRITICAL = "Critical"
    MAJOR = "Major"
    MEDIUM = "Medium"
    MINOR = "Minor"
    LOW = "Low"


ACTIVE_STATUSES = frozenset({
    WorkItemStatus.TODO,
    WorkItemStatus.IN_PROGRESS,
    WorkItemStatus.REVIEW,
})


def is_active_status(status) -> bool:
    return WorkItemStatus(status) in ACTIVE_STATUSES


class WorkItem(Base):
    __tablename__ = "work_items"

    id = Column(Integer, primary_key=True, index=True)
    project_id = Column(Integer, ForeignKey("projects.id"), nullable=False)
    assigned_to_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)  # Who does it
    created_by_id = Column(Integer, ForeignKey("users.id"), nullable=False)               # Who created it
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    priority = Column(String(20), nullable=False, default=WorkItemPriority.MEDIUM.value)
    status = Column(String(20), nullable=False, default=WorkItemStatus.TODO.value, index=True)
    deadline = Column(DateTime(timezone=True), nullable=False)
    comments = Column(Text, nullable=True)  # overwritten, never appended
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    version = Column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}
