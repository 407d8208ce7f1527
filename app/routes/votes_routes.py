from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_async_session
from app.deps.auth import get_current_user, require_auth
from app.models.user_model import User
from app.schemas.common_schemas import MessageOut
from app.schemas.vote_schemas import VoteIn, VoteOut, VoteWithProjectOut, VoteWithUserOut
from app.services import vote_ledger
from app.utils.token_utils import TokenClaims

router = APIRouter(prefix="/votes", tags=["votes"])


# Mutations need a live account, not just an unexpired token
@router.post("/project/{project_id}", response_model=VoteOut)
async def vote(
    project_id: str,
    payload: VoteIn,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    return await vote_ledger.cast_vote(db, user.id, project_id, payload.type, payload.comment)


@router.delete("/project/{project_id}", response_model=MessageOut)
async def remove_vote(
    project_id: str,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    await vote_ledger.remove_vote(db, user.id, project_id)
    return MessageOut(message="Vote removed successfully")


@router.get("/project/{project_id}/my-vote", response_model=Optional[VoteOut])
async def get_my_vote(
    project_id: str,
    db: AsyncSession = Depends(get_async_session),
    claims: TokenClaims = Depends(require_auth),
):
    return await vote_ledger.get_user_vote(db, claims.sub, project_id)


# Public
@router.get("/project/{project_id}", response_model=List[VoteWithUserOut])
async def get_project_votes(
    project_id: str,
    include_user: bool = Query(False, description="Embed the voter record in each vote"),
    db: AsyncSession = Depends(get_async_session),
):
    votes = await vote_ledger.get_votes_for_target(db, project_id, include_user=include_user)
    schema = VoteWithUserOut if include_user else VoteOut
    return [schema.model_validate(v) for v in votes]


@router.get("/my-votes", response_model=List[VoteWithProjectOut])
async def get_my_votes(
    include_project: bool = Query(False, description="Embed the project record in each vote"),
    db: AsyncSession = Depends(get_async_session),
    claims: TokenClaims = Depends(require_auth),
):
    votes = await vote_ledger.get_votes_by_user(db, claims.sub, include_project=include_project)
    schema = VoteWithProjectOut if include_project else VoteOut
    return [schema.model_validate(v) for v in votes]
