import logging

from fastapi.concurrency import run_in_threadpool
from sqlalchemy.ext.asyncio import AsyncSession

from app.errors import UnauthorizedError
from app.services import user_service
from app.utils.password_utils import DUMMY_HASH, verify_password_hash
from app.utils.token_utils import create_access_token

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"


async def login(db: AsyncSession, cpf: str, password: str) -> dict:
    """Exchange cpf + password for a bearer token.

    Unknown cpf, inactive account and wrong password all fail with the same
    ``UnauthorizedError`` message, and all of them pay for one bcrypt verify.
    """
    user = await user_service.find_by_cpf(db, cpf)

    if user is None:
        await run_in_threadpool(verify_password_hash, password, DUMMY_HASH)
        password_ok = False
    else:
        password_ok = await run_in_threadpool(verify_password_hash, password, user.password)

    if not password_ok or not user.is_active:
        logger.warning("Failed login attempt")
        raise UnauthorizedError(INVALID_CREDENTIALS)

    access_token = create_access_token(user)
    logger.info("User %s logged in", user.id)
    return {"access_token": access_token, "role": user.role.value}
