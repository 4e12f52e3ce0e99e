import pytest
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession

from app.database import Base
from app.models.project import Project, PROJECT_ACTIVE
from app.models.user import ROLE_MANAGER, ROLE_EMPLOYEE
from app.models.work_item import WorkItem, WorkItemStatus
from app.services.employees import create_employee, get_profile
import app.main  # noqa: F401  registers every table on Base.metadata


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------

@pytest.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, expire_on_commit=False, class_=AsyncSession)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


# ---------------------------------------------------------------------------
# Seed data (plain ids, so nothing expired by a rollback is touched later)
# ---------------------------------------------------------------------------

@pytest.fixture
async def manager_id(db) -> int:
    user = await create_employee(db, "manager@example.com", "Maria Manager", role=ROLE_MANAGER)
    await db.commit()
    return user.id


@pytest.fixture
async def employee_id(db) -> int:
    user = await create_employee(db, "employee@example.com", "Eli Employee", role=ROLE_EMPLOYEE)
    await db.commit()
    return user.id


@pytest.fixture
async def other_employee_id(db) -> int:
    user = await create_employee(db, "other@example.com", "Olu Other", role=ROLE_EMPLOYEE)
    await db.commit()
    return user.id


@pytest.fixture
async def project_id(db, manager_id) -> int:
    project = Project(name="Apollo", status=PROJECT_ACTIVE, created_by_id=manager_id)
    db.add(project)
    await db.commit()
    return project.id


@pytest.fixture
def add_work_item(db, project_id, manager_id):
    """Insert a work item in any status directly, bypassing admission control."""
    async def _add(assignee_id: int, status: WorkItemStatus = WorkItemStatus.TODO) -> int:
        now = datetime.now(timezone.utc)
        item = WorkItem(
            project_id=project_id,
            assigned_to_id=assignee_id,
            created_by_id=manager_id,
            name=f"Item in {status.value}",
            priority="Medium",
            status=status.value,
            deadline=now + timedelta(days=3),
            created_at=now,
            updated_at=now,
        )
        db.add(item)
        await db.commit()
        return item.id
    return _add


@pytest.fixture
def set_scores(db):
    async def _set(employee_id: int, performance=None, streak=None, workload=None):
        profile = await get_profile(db, employee_id)
        if performance is not None:
            profile.performance = Decimal(str(performance))
        if streak is not None:
            profile.accepted_streak = streak
        if workload is not None:
            profile.current_workload = Decimal(str(workload))
        await db.commit()
    return _set
