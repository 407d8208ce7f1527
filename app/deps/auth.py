# app/deps/auth.py
from typing import Optional

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_async_session
from app.errors import ForbiddenError, UnauthorizedError
from app.models.user_model import User, UserRole
from app.utils.token_utils import TokenClaims, decode_access_token

BEARER_PREFIX = "Bearer "


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """
    Returns the token from an ``Authorization: Bearer <token>`` value, or
    None when the value is missing or not in exactly that shape. The scheme
    is case-sensitive and separated from the token by a single space.
    """
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        return None
    token = authorization[len(BEARER_PREFIX):]
    if not token or " " in token:
        return None
    return token


async def require_auth(request: Request) -> TokenClaims:
    """
    Access guard: validates the bearer token and attaches its claims to
    ``request.state.user``. Raises 401 for a missing, malformed, invalid or
    expired token; the validator is not called when no token was sent.
    """
    token = extract_bearer_token(request.headers.get("Authorization"))
    if token is None:
        raise UnauthorizedError("Missing or malformed bearer token")

    claims = decode_access_token(token)
    request.state.user = claims
    return claims


def require_roles(*roles: UserRole):
    """
    Role guard: runs after the access guard and lets through only the
    listed roles. Raises 403 otherwise.
    """
    allowed = frozenset(roles)

    async def _role_guard(claims: TokenClaims = Depends(require_auth)) -> TokenClaims:
        if claims.role not in allowed:
            raise ForbiddenError("Insufficient role for this operation")
        return claims

    return _role_guard


async def get_current_user(
    claims: TokenClaims = Depends(require_auth),
    session: AsyncSession = Depends(get_async_session),
) -> User:
    user = await session.get(User, claims.sub)
    if not user:
        raise UnauthorizedError("Could not validate credentials")
    return user


require_council = require_roles(UserRole.COUNCILOR, UserRole.ADMIN)
