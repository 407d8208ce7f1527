from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from app import config
from app.errors import UnauthorizedError
from app.models.user_model import User, UserRole


@dataclass(frozen=True)
class TokenClaims:
    sub: str
    role: UserRole


def _get_secret_key() -> str:
    secret = config.SECRET_KEY
    if not secret:
        # Fail fast with a clear message instead of a generic 500
        raise RuntimeError("SECRET_KEY is not configured in the backend environment")
    if len(secret) < 32:
        raise RuntimeError("SECRET_KEY is too short; use at least 32 characters")
    return secret


def create_access_token(user: User) -> str:
    now = datetime.now(timezone.utc)
    to_encode = {
        "sub": str(user.id),
        "role": UserRole(user.role).value,
        "iat": now,
        "exp": now + timedelta(minutes=config.ACCESS_TOKEN_EXPIRE_MINUTES),
    }
    return jwt.encode(to_encode, _get_secret_key(), algorithm=config.ALGORITHM)


def decode_access_token(token: str) -> TokenClaims:
    """Verify signature and expiry and return the claims.

    Any failure, including a payload without a subject or with a role we
    do not know, is reported as ``UnauthorizedError``.
    """
    try:
        payload = jwt.decode(token, _get_secret_key(), algorithms=[config.ALGORITHM])
    except JWTError:
        raise UnauthorizedError("Invalid or expired token")

    sub = payload.get("sub")
    if not sub:
        raise UnauthorizedError("Invalid or expired token")
    try:
        role = UserRole(payload.get("role"))
    except ValueError:
        raise UnauthorizedError("Invalid or expired token")

    return TokenClaims(sub=sub, role=role)
