

import os
from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


DATABASE_URL = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./civic.db")
SQL_ECHO = _env_bool("SQL_ECHO", "false")

SECRET_KEY = os.getenv("SECRET_KEY")
ALGORITHM = os.getenv("ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))  # 1 hour

BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "12"))

RATE_LIMIT_ENABLED = _env_bool("RATE_LIMIT_ENABLED", "true")
LOGIN_RATE_LIMIT = os.getenv("LOGIN_RATE_LIMIT", "5/minute")
SIGNUP_RATE_LIMIT = os.getenv("SIGNUP_RATE_LIMIT", "5/minute")

CORS_ALLOW_ORIGINS = [
    o.strip()
    for o in os.getenv("CORS_ALLOW_ORIGINS", "*").split(",")
    if o.strip()
]

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# How many times a vote transaction is re-run after losing a race
VOTE_TRANSACTION_ATTEMPTS = int(os.getenv("VOTE_TRANSACTION_ATTEMPTS", "3"))
