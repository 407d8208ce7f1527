import logging
from typing import Awaitable, Callable, TypeVar

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.errors import ConflictError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# SQLSTATE for unique_violation (Postgres)
UNIQUE_VIOLATION = "23505"


class ConcurrentUpdateError(Exception):
    """A compare-and-set write matched no row: another request got there first."""


def is_unique_violation(exc: IntegrityError) -> bool:
    orig = exc.orig
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if code:
        return code == UNIQUE_VIOLATION
    # sqlite3 only reports a message, e.g. "UNIQUE constraint failed: votes.user_id, ..."
    return "unique" in str(orig).lower()


async def run_in_transaction(
    session: AsyncSession,
    operation: Callable[[AsyncSession], Awaitable[T]],
    *,
    attempts: int = 3,
    label: str = "transaction",
) -> T:
    """Run ``operation`` and commit, re-running it after a lost race.

    ``operation`` must do all of its reads inside the call so a re-run
    starts from fresh state. Unique violations and compare-and-set
    misses roll back and retry; anything else, including foreign-key and
    check violations, rolls back and propagates.
    """
    for attempt in range(1, attempts + 1):
        try:
            result = await operation(session)
            await session.commit()
            return result
        except (IntegrityError, ConcurrentUpdateError) as exc:
            await session.rollback()
            if isinstance(exc, IntegrityError) and not is_unique_violation(exc):
                raise
            if attempt >= attempts:
                logger.warning("%s gave up after %d attempts: %r", label, attempt, exc)
                raise ConflictError("Concurrent update conflict, please retry")
            logger.warning("%s conflicted (attempt %d/%d), retrying", label, attempt, attempts)
        except Exception:
            await session.rollback()
            raise
    raise ConflictError("Concurrent update conflict, please retry")
