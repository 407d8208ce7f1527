from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest
from jose import jwt

from app import config
from app.errors import UnauthorizedError
from app.models.user_model import UserRole
from app.utils.token_utils import create_access_token, decode_access_token


def _user(role=UserRole.CITIZEN):
    return SimpleNamespace(id="3f1c2b9e-0000-4000-8000-000000000001", role=role)


def test_token_round_trip_carries_subject_and_role():
    token = create_access_token(_user(UserRole.COUNCILOR))
    claims = decode_access_token(token)
    assert claims.sub == "3f1c2b9e-0000-4000-8000-000000000001"
    assert claims.role == UserRole.COUNCILOR


def test_token_expires_after_configured_ttl():
    token = create_access_token(_user())
    payload = jwt.get_unverified_claims(token)
    assert payload["exp"] - payload["iat"] == config.ACCESS_TOKEN_EXPIRE_MINUTES * 60
    assert config.ACCESS_TOKEN_EXPIRE_MINUTES == 60


def test_expired_token_is_rejected(monkeypatch):
    monkeypatch.setattr(config, "ACCESS_TOKEN_EXPIRE_MINUTES", -1)
    token = create_access_token(_user())
    with pytest.raises(UnauthorizedError):
        decode_access_token(token)


def test_token_signed_with_another_secret_is_rejected():
    token = jwt.encode(
        {"sub": "someone", "role": "admin", "exp": datetime.now(timezone.utc) + timedelta(minutes=5)},
        "another-secret-another-secret-another-secret",
        algorithm="HS256",
    )
    with pytest.raises(UnauthorizedError):
        decode_access_token(token)


def test_garbage_token_is_rejected():
    with pytest.raises(UnauthorizedError):
        decode_access_token("not.a.jwt")


@pytest.mark.parametrize("payload", [
    {"role": "citizen"},
    {"sub": "abc", "role": "mayor"},
    {"sub": "abc"},
])
def test_token_with_bad_claims_is_rejected(payload):
    payload = {**payload, "exp": datetime.now(timezone.utc) + timedelta(minutes=5)}
    token = jwt.encode(payload, config.SECRET_KEY, algorithm=config.ALGORITHM)
    with pytest.raises(UnauthorizedError):
        decode_access_token(token)


@pytest.mark.parametrize("secret", [None, "", "too-short"])
def test_missing_or_weak_secret_fails_fast(monkeypatch, secret):
    monkeypatch.setattr(config, "SECRET_KEY", secret)
    with pytest.raises(RuntimeError):
        create_access_token(_user())
