from passlib.hash import bcrypt

from app.config import BCRYPT_ROUNDS

_hasher = bcrypt.using(rounds=BCRYPT_ROUNDS)

# Verified when the account does not exist so both login failure paths
# spend the same bcrypt work.
DUMMY_HASH = _hasher.hash("civic-participation-dummy-password")


def hash_password(plaintext: str) -> str:
    return _hasher.hash(plaintext)


def verify_password_hash(plaintext: str, hashed: str) -> bool:
    try:
        return _hasher.verify(plaintext, hashed)
    except (ValueError, TypeError):
        # Malformed or empty stored hash
        return False
