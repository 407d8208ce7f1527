"""Per-user project votes and the project vote counters.

Every mutation keeps ``Project.votes_for`` / ``Project.votes_against``
equal to the number of UP / DOWN vote rows on the project. The counter
change and the vote row change always commit in the same transaction.

Concurrency is handled at three levels:

* counters move through single ``UPDATE ... SET votes_for = votes_for + 1``
  statements, so two requests never overwrite each other's increment;
* the vote row is written with a compare-and-set on the direction we read,
  and the (user, project) pair is unique in the store; losing either race
  aborts the transaction and ``run_in_transaction`` re-runs it from scratch;
* inside one process, requests for the same (user, project) pair queue on
  an ``asyncio.Lock`` so they rarely reach the database-level conflict.
"""
import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Dict, List, Optional, Tuple

from sqlalchemy import case, delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app import config
from app.errors import NotFoundError
from app.models.project_model import Project
from app.models.vote_model import Vote, VoteDirection
from app.utils.transactions import ConcurrentUpdateError, run_in_transaction

logger = logging.getLogger(__name__)

PairKey = Tuple[str, str]


class _PairLocks:
    """asyncio locks keyed by (user_id, project_id), dropped once idle."""

    def __init__(self):
        self._locks: Dict[PairKey, asyncio.Lock] = {}
        self._holders: Dict[PairKey, int] = {}

    @asynccontextmanager
    async def hold(self, key: PairKey):
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        self._holders[key] = self._holders.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._holders[key] -= 1
            if self._holders[key] == 0:
                del self._holders[key]
                del self._locks[key]

    def __len__(self) -> int:
        return len(self._locks)


_pair_locks = _PairLocks()


# ------------------------------
# helpers
# ------------------------------
async def _load_project(db: AsyncSession, project_id: str) -> Optional[Project]:
    stmt = select(Project).where(Project.id == project_id).execution_options(populate_existing=True)
    return (await db.execute(stmt)).scalar_one_or_none()


async def _load_vote(db: AsyncSession, user_id: str, project_id: str) -> Optional[Vote]:
    stmt = (
        select(Vote)
        .where(Vote.user_id == user_id, Vote.project_id == project_id)
        .execution_options(populate_existing=True)
    )
    return (await db.execute(stmt)).scalar_one_or_none()


def _shift(column, delta: int):
    if delta >= 0:
        return column + delta
    # Never below zero, even if the counter was already wrong
    return case((column + delta >= 0, column + delta), else_=0)


def _counter_column(direction: VoteDirection):
    return Project.votes_for if direction == VoteDirection.UP else Project.votes_against


async def _adjust_counters(
    db: AsyncSession,
    project_id: str,
    *,
    increment: Optional[VoteDirection] = None,
    decrement: Optional[VoteDirection] = None,
) -> None:
    deltas = {"votes_for": 0, "votes_against": 0}
    if increment is not None:
        deltas[_counter_column(increment).key] += 1
    if decrement is not None:
        deltas[_counter_column(decrement).key] -= 1

    values = {
        name: _shift(getattr(Project, name), delta)
        for name, delta in deltas.items()
        if delta != 0
    }
    if not values:
        return

    # Both counters in one statement: a flip never shows a half-applied state
    stmt = (
        update(Project)
        .where(Project.id == project_id)
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    result = await db.execute(stmt)
    if result.rowcount != 1:
        raise ConcurrentUpdateError(f"project {project_id} vanished during vote update")


async def _compare_and_set_vote(db: AsyncSession, vote: Vote, expected: VoteDirection, **values) -> None:
    stmt = (
        update(Vote)
        .where(Vote.id == vote.id, Vote.direction == expected)
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    result = await db.execute(stmt)
    if result.rowcount != 1:
        raise ConcurrentUpdateError(f"vote {vote.id} changed concurrently")


# ------------------------------
# mutations
# ------------------------------
async def _apply_cast(
    db: AsyncSession,
    user_id: str,
    project_id: str,
    direction: VoteDirection,
    comment: Optional[str],
) -> Vote:
    project = await _load_project(db, project_id)
    if not project:
        raise NotFoundError("Project not found")

    existing = await _load_vote(db, user_id, project_id)

    if existing is None:
        vote = Vote(
            user_id=user_id,
            project_id=project_id,
            direction=direction,
            comment=comment or None,
        )
        db.add(vote)
        await db.flush()  # unique (user, project) violation surfaces here
        await _adjust_counters(db, project_id, increment=direction)
        logger.info("User %s voted %s on project %s", user_id, direction.value, project_id)
        return vote

    previous = existing.direction
    if previous != direction:
        values = {"direction": direction}
        if comment:
            values["comment"] = comment
        await _compare_and_set_vote(db, existing, previous, **values)
        await _adjust_counters(db, project_id, increment=direction, decrement=previous)
        logger.info(
            "User %s flipped vote on project %s: %s -> %s",
            user_id, project_id, previous.value, direction.value,
        )
        return existing

    if comment:
        await _compare_and_set_vote(db, existing, previous, comment=comment)
    return existing


async def cast_vote(
    db: AsyncSession,
    user_id: str,
    project_id: str,
    direction: VoteDirection,
    comment: Optional[str] = None,
) -> Vote:
    """Record ``user_id``'s vote on ``project_id``.

    New vote: row created and matching counter incremented. Different
    direction: counters moved from the old direction to the new one and the
    row updated. Same direction: only a supplied comment is written; without
    one this is a no-op returning the stored vote.

    Raises ``NotFoundError`` (with nothing written) if the project does not
    exist, ``ConflictError`` if the transaction keeps losing races.
    """
    direction = VoteDirection(direction)
    async with _pair_locks.hold((user_id, project_id)):
        vote = await run_in_transaction(
            db,
            lambda s: _apply_cast(s, user_id, project_id, direction, comment),
            attempts=config.VOTE_TRANSACTION_ATTEMPTS,
            label="cast_vote",
        )
    await db.refresh(vote)
    return vote


async def _apply_remove(db: AsyncSession, user_id: str, project_id: str) -> Vote:
    vote = await _load_vote(db, user_id, project_id)
    if not vote:
        raise NotFoundError("Vote not found")

    project = await _load_project(db, project_id)
    if project is not None:
        await _adjust_counters(db, project_id, decrement=vote.direction)

    # Project may have been deleted on its own; the vote row goes regardless
    stmt = (
        delete(Vote)
        .where(Vote.id == vote.id, Vote.direction == vote.direction)
        .execution_options(synchronize_session=False)
    )
    result = await db.execute(stmt)
    if result.rowcount != 1:
        raise ConcurrentUpdateError(f"vote {vote.id} changed concurrently")
    return vote


async def remove_vote(db: AsyncSession, user_id: str, project_id: str) -> None:
    """Delete ``user_id``'s vote on ``project_id`` and take it off the counters.

    Raises ``NotFoundError`` if there is no such vote; counters are untouched.
    """
    async with _pair_locks.hold((user_id, project_id)):
        vote = await run_in_transaction(
            db,
            lambda s: _apply_remove(s, user_id, project_id),
            attempts=config.VOTE_TRANSACTION_ATTEMPTS,
            label="remove_vote",
        )
    db.expunge(vote)
    logger.info("User %s removed vote on project %s", user_id, project_id)


# ------------------------------
# reads
# ------------------------------
async def get_user_vote(db: AsyncSession, user_id: str, project_id: str) -> Optional[Vote]:
    return await _load_vote(db, user_id, project_id)


async def get_votes_for_target(db: AsyncSession, project_id: str, include_user: bool = False) -> List[Vote]:
    stmt = (
        select(Vote)
        .where(Vote.project_id == project_id)
        .order_by(Vote.created_at.desc())
        .execution_options(populate_existing=True)
    )
    if include_user:
        stmt = stmt.options(selectinload(Vote.user))
    return list((await db.execute(stmt)).scalars().all())


async def get_votes_by_user(db: AsyncSession, user_id: str, include_project: bool = False) -> List[Vote]:
    stmt = (
        select(Vote)
        .where(Vote.user_id == user_id)
        .order_by(Vote.created_at.desc())
        .execution_options(populate_existing=True)
    )
    if include_project:
        stmt = stmt.options(selectinload(Vote.project))
    return list((await db.execute(stmt)).scalars().all())
