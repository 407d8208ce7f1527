import logging
from typing import Optional, List

from fastapi.concurrency import run_in_threadpool
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from app.models.user_model import User, UserRole
from app.models.vote_model import Vote
from app.schemas.user_schemas import UserCreate, UserUpdate
from app.services import vote_ledger
from app.utils.password_utils import hash_password, verify_password_hash
from app.utils.token_utils import TokenClaims

logger = logging.getLogger(__name__)


async def find_by_cpf(db: AsyncSession, cpf: str) -> Optional[User]:
    return (await db.execute(select(User).where(User.cpf == cpf))).scalar_one_or_none()


async def find_by_email(db: AsyncSession, email: str) -> Optional[User]:
    email_norm = email.strip().lower()
    return (await db.execute(select(User).where(User.email == email_norm))).scalar_one_or_none()


async def find_by_id(db: AsyncSession, user_id: str) -> Optional[User]:
    return await db.get(User, user_id)


async def find_all(db: AsyncSession) -> List[User]:
    result = await db.execute(select(User).order_by(User.created_at))
    return list(result.scalars().all())


async def get_user(db: AsyncSession, user_id: str) -> User:
    user = await find_by_id(db, user_id)
    if not user:
        raise NotFoundError("User not found")
    return user


async def verify_password(db: AsyncSession, cpf: str, plaintext: str) -> bool:
    """Fail-closed password check for the account identified by ``cpf``."""
    user = await find_by_cpf(db, cpf)
    if not user:
        return False
    return await run_in_threadpool(verify_password_hash, plaintext, user.password)


async def _ensure_unique(db: AsyncSession, *, email: Optional[str], cpf: Optional[str],
                         exclude_id: Optional[str] = None) -> None:
    if email is not None:
        existing = await find_by_email(db, email)
        if existing and existing.id != exclude_id:
            raise ConflictError("Email already registered")
    if cpf is not None:
        existing = await find_by_cpf(db, cpf)
        if existing and existing.id != exclude_id:
            raise ConflictError("CPF already registered")


async def create_user(db: AsyncSession, data: UserCreate) -> User:
    email_norm = str(data.email).strip().lower()

    # Pre-check gives a precise message; the unique constraints catch the race
    await _ensure_unique(db, email=email_norm, cpf=data.cpf)

    new_user = User(
        email=email_norm,
        name=data.name.strip(),
        cpf=data.cpf,
        password=await run_in_threadpool(hash_password, data.password),
        role=UserRole.CITIZEN,
        is_active=True,
    )
    db.add(new_user)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError("Email or CPF already registered")
    await db.refresh(new_user)

    logger.info("Registered user %s", new_user.id)
    return new_user


def _ensure_self_or_admin(user_id: str, actor: TokenClaims, action: str) -> None:
    if actor.sub != user_id and actor.role != UserRole.ADMIN:
        logger.warning("User %s tried to %s user %s", actor.sub, action, user_id)
        raise ForbiddenError(f"You do not have permission to {action} this user")


async def update_user(db: AsyncSession, user_id: str, data: UserUpdate, actor: TokenClaims) -> User:
    _ensure_self_or_admin(user_id, actor, "update")
    user = await get_user(db, user_id)

    payload = {field: value for field, value in data.model_dump(exclude_unset=True).items() if value is not None}
    if not payload:
        raise ValidationError("No user fields to update")
    if ("role" in payload or "is_active" in payload) and actor.role != UserRole.ADMIN:
        raise ForbiddenError("Only administrators can change role or account status")

    if "email" in payload:
        payload["email"] = str(payload["email"]).strip().lower()
    await _ensure_unique(db, email=payload.get("email"), cpf=payload.get("cpf"), exclude_id=user.id)

    if payload.get("password"):
        payload["password"] = await run_in_threadpool(hash_password, payload["password"])

    for field, value in payload.items():
        setattr(user, field, value)

    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError("Email or CPF already registered")
    await db.refresh(user)

    logger.info("Updated user %s", user.id)
    return user


async def delete_user(db: AsyncSession, user_id: str, actor: TokenClaims) -> None:
    _ensure_self_or_admin(user_id, actor, "delete")
    await get_user(db, user_id)

    # Retract the user's votes through the ledger so project counters follow
    project_ids = (
        await db.execute(select(Vote.project_id).where(Vote.user_id == user_id))
    ).scalars().all()
    for project_id in project_ids:
        try:
            await vote_ledger.remove_vote(db, user_id, project_id)
        except NotFoundError:
            # Retracted by a concurrent request
            continue

    user = await get_user(db, user_id)
    await db.delete(user)
    await db.commit()
    logger.info("Deleted user %s", user_id)
