import calendar
from typing import List

from sqlalchemy import case, extract, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.community_proposal_model import CommunityProposal
from app.models.target_enums import TargetStatus
from app.services.target_service import TargetService


class CommunityProposalService(TargetService[CommunityProposal]):

    async def create(self, db: AsyncSession, data: dict, author_id: str) -> CommunityProposal:
        # New proposals always start as drafts
        return await super().create(db, {**data, "status": TargetStatus.DRAFT}, author_id)

    async def stats_by_category(self, db: AsyncSession) -> List[dict]:
        stmt = (
            select(CommunityProposal.category, func.count(CommunityProposal.id))
            .group_by(CommunityProposal.category)
        )
        rows = (await db.execute(stmt)).all()
        return [{"category": category.value, "count": int(count)} for category, count in rows]

    async def stats_monthly(self, db: AsyncSession) -> List[dict]:
        """Proposals created and approved per calendar month, January first."""
        month = extract("month", CommunityProposal.created_at)
        approved = func.sum(case((CommunityProposal.status == TargetStatus.APPROVED, 1), else_=0))
        stmt = (
            select(month.label("month_num"), func.count(CommunityProposal.id), approved)
            .group_by(month)
            .order_by(month)
        )
        rows = (await db.execute(stmt)).all()
        return [
            {
                "month": calendar.month_abbr[int(month_num)],
                "propostas": int(total),
                "aprovadas": int(approved_count or 0),
            }
            for month_num, total, approved_count in rows
        ]


community_proposals = CommunityProposalService(CommunityProposal, "proposal")
