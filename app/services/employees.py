import logging
from decimal import Decimal
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from app.models.user import User, ROLE_EMPLOYEE, ROLE_MANAGER
from app.models.profile import EmployeeScoreProfile

logger = logging.getLogger(__name__)


async def get_user(db: AsyncSession, user_id: Optional[int]) -> Optional[User]:
    if not user_id:
        return None
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def get_profile(db: AsyncSession, employee_id: Optional[int]) -> Optional[EmployeeScoreProfile]:
    if not employee_id:
        return None
    result = await db.execute(
        select(EmployeeScoreProfile).where(EmployeeScoreProfile.user_id == employee_id)
    )
    return result.scalar_one_or_none()


async def create_employee(
    db: AsyncSession, email: str, name: Optional[str] = None, role: str = ROLE_EMPLOYEE
) -> User:
    """Create a user; employees get a score profile with default scores in the same flush."""
    if role not in (ROLE_EMPLOYEE, ROLE_MANAGER):
        raise ValueError(f"Unknown role: {role}")

    user = User(email=email, name=name, role=role)
    db.add(user)
    await db.flush()

    if role == ROLE_EMPLOYEE:
        db.add(EmployeeScoreProfile(
            user_id=user.id,
            performance=Decimal("100.00"),
            current_workload=Decimal("0.00"),
            accepted_streak=0,
        ))
        await db.flush()
        logger.info("Created score profile for employee %s", user.id)
    return user
