import logging
from contextlib import asynccontextmanager
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError
from app.core.errors import ConcurrencyConflict

logger = logging.getLogger(__name__)


@asynccontextmanager
async def unit_of_work(db: AsyncSession):
    """Commit everything done inside the block, or nothing.

    A versioned row changed by another transaction surfaces as ConcurrencyConflict;
    the caller retries with a fresh read.
    """
    try:
        yield db
        await db.commit()
    except StaleDataError as e:
        await db.rollback()
        logger.warning("Concurrent update detected, rolled back: %s", e)
        raise ConcurrencyConflict(
            "The record was modified by another request; reload and retry"
        ) from e
    except BaseException:
        await db.rollback()
        raise
