import logging
from typing import Any

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.project_model import Project
from app.models.vote_model import Vote
from app.services.target_service import TargetService
from app.utils.token_utils import TokenClaims

logger = logging.getLogger(__name__)


class ProjectService(TargetService[Project]):

    async def delete(self, db: AsyncSession, record_id: Any, actor: TokenClaims) -> None:
        project = await self.get(db, record_id)
        self.ensure_can_mutate(project, actor, "delete")

        # Votes go with their project, in the same transaction
        await db.execute(delete(Vote).where(Vote.project_id == project.id))
        await db.delete(project)
        await db.commit()
        logger.info("Deleted project %s by %s", record_id, actor.sub)


projects = ProjectService(Project, "project")
