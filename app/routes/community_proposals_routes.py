from typing import List

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_async_session
from app.deps.auth import get_current_user, require_auth
from app.models.community_proposal_model import CommunityProposal
from app.models.user_model import User
from app.schemas.community_proposal_schemas import (
    CommunityProposalCreate, CommunityProposalOut, CommunityProposalUpdate,
    CommunityProposalWithAuthorOut, CategoryStatOut, MonthlyStatOut
)
from app.services.community_proposal_service import community_proposals
from app.utils.token_utils import TokenClaims

router = APIRouter(prefix="/community-proposals", tags=["community-proposals"])


def _proposal_out(proposal: CommunityProposal, include_author: bool) -> CommunityProposalOut:
    if include_author:
        return CommunityProposalWithAuthorOut.model_validate(proposal)
    return CommunityProposalOut.model_validate(proposal)


@router.post("", response_model=CommunityProposalOut, status_code=status.HTTP_201_CREATED)
async def create_proposal(
    payload: CommunityProposalCreate,
    db: AsyncSession = Depends(get_async_session),
    author: User = Depends(get_current_user),
):
    return await community_proposals.create(db, payload.model_dump(), author_id=author.id)


@router.get("", response_model=List[CommunityProposalWithAuthorOut])
async def list_proposals(
    include_author: bool = Query(False),
    db: AsyncSession = Depends(get_async_session),
):
    rows = await community_proposals.list_all(db, include_author=include_author)
    return [_proposal_out(p, include_author) for p in rows]


# ---- Stats (declared before /{proposal_id})
@router.get("/stats/category", response_model=List[CategoryStatOut])
async def stats_by_category(db: AsyncSession = Depends(get_async_session)):
    return await community_proposals.stats_by_category(db)


@router.get("/stats/monthly", response_model=List[MonthlyStatOut])
async def stats_monthly(db: AsyncSession = Depends(get_async_session)):
    return await community_proposals.stats_monthly(db)


@router.get("/{proposal_id}", response_model=CommunityProposalWithAuthorOut)
async def get_proposal(
    proposal_id: int,
    include_author: bool = Query(False),
    db: AsyncSession = Depends(get_async_session),
):
    proposal = await community_proposals.get(db, proposal_id, include_author=include_author)
    return _proposal_out(proposal, include_author)


@router.patch("/{proposal_id}", response_model=CommunityProposalOut)
async def update_proposal(
    proposal_id: int,
    payload: CommunityProposalUpdate,
    db: AsyncSession = Depends(get_async_session),
    claims: TokenClaims = Depends(require_auth),
):
    return await community_proposals.update(db, proposal_id, payload.model_dump(exclude_unset=True), claims)


@router.delete("/{proposal_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_proposal(
    proposal_id: int,
    db: AsyncSession = Depends(get_async_session),
    claims: TokenClaims = Depends(require_auth),
):
    await community_proposals.delete(db, proposal_id, claims)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
