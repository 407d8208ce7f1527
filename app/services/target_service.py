import logging
from typing import Any, Generic, List, Type, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.errors import ForbiddenError, NotFoundError, ValidationError
from app.models.user_model import UserRole
from app.utils.token_utils import TokenClaims

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT")


class TargetService(Generic[ModelT]):
    """CRUD over an author-owned record (project, report, proposal).

    Only the author may update or delete a record; admins may touch any.
    The author row is loaded only when a caller asks for it.
    """

    def __init__(self, model: Type[ModelT], label: str):
        self.model = model
        self.label = label

    def _select(self, include_author: bool = False):
        stmt = select(self.model).execution_options(populate_existing=True)
        if include_author:
            stmt = stmt.options(selectinload(self.model.author))
        return stmt

    async def create(self, db: AsyncSession, data: dict, author_id: str) -> ModelT:
        record = self.model(**data, author_id=author_id)
        db.add(record)
        await db.commit()
        await db.refresh(record)
        logger.info("Created %s %s by %s", self.label, record.id, author_id)
        return record

    async def list_all(self, db: AsyncSession, include_author: bool = False) -> List[ModelT]:
        stmt = self._select(include_author).order_by(self.model.created_at.desc())
        return list((await db.execute(stmt)).scalars().all())

    async def list_by_author(self, db: AsyncSession, author_id: str, include_author: bool = False) -> List[ModelT]:
        stmt = (
            self._select(include_author)
            .where(self.model.author_id == author_id)
            .order_by(self.model.created_at.desc())
        )
        return list((await db.execute(stmt)).scalars().all())

    async def get(self, db: AsyncSession, record_id: Any, include_author: bool = False) -> ModelT:
        stmt = self._select(include_author).where(self.model.id == record_id)
        record = (await db.execute(stmt)).scalar_one_or_none()
        if record is None:
            raise NotFoundError(f"{self.label.capitalize()} not found")
        return record

    def ensure_can_mutate(self, record: ModelT, actor: TokenClaims, action: str) -> None:
        if actor.role == UserRole.ADMIN:
            return
        if record.author_id != actor.sub:
            logger.warning("User %s tried to %s %s %s", actor.sub, action, self.label, record.id)
            raise ForbiddenError(f"You do not have permission to {action} this {self.label}")

    async def update(self, db: AsyncSession, record_id: Any, data: dict, actor: TokenClaims) -> ModelT:
        record = await self.get(db, record_id)
        self.ensure_can_mutate(record, actor, "update")

        changes = {field: value for field, value in data.items() if value is not None}
        if not changes:
            raise ValidationError(f"No {self.label} fields to update")
        for field, value in changes.items():
            setattr(record, field, value)

        await db.commit()
        await db.refresh(record)
        return record

    async def delete(self, db: AsyncSession, record_id: Any, actor: TokenClaims) -> None:
        record = await self.get(db, record_id)
        self.ensure_can_mutate(record, actor, "delete")

        await db.delete(record)
        await db.commit()
        logger.info("Deleted %s %s by %s", self.label, record_id, actor.sub)
