import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import LOGIN_RATE_LIMIT
from app.database import get_async_session
from app.limiter import limiter
from app.schemas.user_schemas import UserLogin, TokenOut
from app.services import auth_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


@router.post("/login", response_model=TokenOut)
@limiter.limit(LOGIN_RATE_LIMIT)
async def login(request: Request, user: UserLogin, db: AsyncSession = Depends(get_async_session)):
    return await auth_service.login(db, user.cpf, user.password)
