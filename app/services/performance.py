"""Performance reputation accounting.

Every accepted outcome advances a two-step streak; completing the streak adds
REWARD points. Every rejection (including a send-back from Review) resets the
streak and subtracts PENALTY points. The score never leaves [0, 100].
"""
import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from app.models.profile import EmployeeScoreProfile
from app.services.employees import get_profile

logger = logging.getLogger(__name__)

MAX_PERFORMANCE = Decimal("100.0")
MIN_ALLOWED_PERFORMANCE = Decimal("0.0")
MIN_PERFORMANCE = Decimal("40.0")  # Minimum score to receive new assignments
PENALTY = Decimal("5.0")
REWARD = Decimal("5.0")
REWARD_STREAK = 2  # Accepted outcomes per reward


def clamp_performance(value: Decimal) -> Decimal:
    return max(MIN_ALLOWED_PERFORMANCE, min(MAX_PERFORMANCE, value))


async def record_outcome(
    db: AsyncSession, employee_id: Optional[int], accepted: bool
) -> Optional[EmployeeScoreProfile]:
    if not employee_id:
        logger.warning("Employee id cannot be empty; outcome not recorded")
        return None

    profile = await get_profile(db, employee_id)
    if profile is None:
        logger.warning("Score profile not found for employee %s; outcome not recorded", employee_id)
        return None

    performance = Decimal(profile.performance)
    if accepted:
        streak = ((profile.accepted_streak or 0) + 1) % REWARD_STREAK
        if streak == 0:
            performance = clamp_performance(performance + REWARD)
            logger.info("Increased performance for employee %s to %s%%", employee_id, performance)
        else:
            logger.info(
                "Employee %s has %d accepted item(s) toward the next reward",
                employee_id, streak,
            )
        profile.accepted_streak = streak
    else:
        profile.accepted_streak = 0
        performance = clamp_performance(performance - PENALTY)
        logger.info("Decreased performance for employee %s to %s%% due to rejection", employee_id, performance)

    profile.performance = performance
    profile.updated_at = datetime.now(timezone.utc)
    await db.flush()
    return profile


async def is_eligible_for_assignment(db: AsyncSession, employee_id: Optional[int]) -> bool:
    profile = await get_profile(db, employee_id)
    if profile is None:
        logger.warning("Score profile not found for employee %s", employee_id)
        return False

    eligible = Decimal(profile.performance) >= MIN_PERFORMANCE
    logger.info(
        "Employee %s is %seligible for new assignments. Current performance: %s%% (Min: %s%%)",
        employee_id, "" if eligible else "not ", profile.performance, MIN_PERFORMANCE,
    )
    return eligible


async def score_of(db: AsyncSession, employee_id: Optional[int]) -> Decimal:
    profile = await get_profile(db, employee_id)
    if profile is None:
        return MIN_ALLOWED_PERFORMANCE
    return Decimal(profile.performance)
