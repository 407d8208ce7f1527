from typing import List

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import SIGNUP_RATE_LIMIT
from app.database import get_async_session
from app.deps.auth import get_current_user, require_auth
from app.errors import NotFoundError
from app.limiter import limiter
from app.models.user_model import User
from app.schemas.user_schemas import UserCreate, UserOut, UserUpdate, normalize_cpf
from app.services import user_service
from app.utils.token_utils import TokenClaims

router = APIRouter(prefix="/users", tags=["users"])


# Registration is the only public route here
@router.post("", response_model=UserOut, status_code=status.HTTP_201_CREATED)
@limiter.limit(SIGNUP_RATE_LIMIT)
async def create_user(request: Request, user: UserCreate, db: AsyncSession = Depends(get_async_session)):
    return await user_service.create_user(db, user)


@router.get("", response_model=List[UserOut])
async def list_users(
    db: AsyncSession = Depends(get_async_session),
    _claims: TokenClaims = Depends(require_auth),
):
    return await user_service.find_all(db)


# Must be declared before /{user_id}
@router.get("/me", response_model=UserOut)
async def get_me(user: User = Depends(get_current_user)):
    return user


@router.get("/cpf/{cpf}", response_model=UserOut)
async def get_user_by_cpf(
    cpf: str,
    db: AsyncSession = Depends(get_async_session),
    _claims: TokenClaims = Depends(require_auth),
):
    try:
        cpf = normalize_cpf(cpf)
    except ValueError:
        raise NotFoundError("User not found")
    user = await user_service.find_by_cpf(db, cpf)
    if not user:
        raise NotFoundError("User not found")
    return user


@router.get("/{user_id}", response_model=UserOut)
async def get_user(
    user_id: str,
    db: AsyncSession = Depends(get_async_session),
    _claims: TokenClaims = Depends(require_auth),
):
    return await user_service.get_user(db, user_id)


@router.patch("/{user_id}", response_model=UserOut)
async def update_user(
    user_id: str,
    payload: UserUpdate,
    db: AsyncSession = Depends(get_async_session),
    claims: TokenClaims = Depends(require_auth),
):
    return await user_service.update_user(db, user_id, payload, claims)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: str,
    db: AsyncSession = Depends(get_async_session),
    claims: TokenClaims = Depends(require_auth),
):
    await user_service.delete_user(db, user_id, claims)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
