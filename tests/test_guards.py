from unittest.mock import Mock

import pytest
from starlette.requests import Request

from app.deps import auth as auth_deps
from app.deps.auth import extract_bearer_token, require_auth, require_roles
from app.errors import ForbiddenError, UnauthorizedError
from app.models.user_model import UserRole
from app.utils.token_utils import TokenClaims


def _request(authorization=None):
    headers = []
    if authorization is not None:
        headers.append((b"authorization", authorization.encode()))
    return Request({"type": "http", "method": "GET", "path": "/", "headers": headers})


@pytest.mark.parametrize("value, expected", [
    ("Bearer abc.def.ghi", "abc.def.ghi"),
    (None, None),
    ("", None),
    ("Bearer", None),
    ("Bearer ", None),
    ("bearer abc", None),
    ("BEARER abc", None),
    ("Bearer  abc", None),
    ("Bearer abc def", None),
    ("Basic dXNlcjpwYXNz", None),
    ("InvalidFormat token", None),
])
def test_extract_bearer_token(value, expected):
    assert extract_bearer_token(value) == expected


async def test_missing_header_never_calls_validator(monkeypatch):
    validator = Mock()
    monkeypatch.setattr(auth_deps, "decode_access_token", validator)

    with pytest.raises(UnauthorizedError):
        await require_auth(_request())
    with pytest.raises(UnauthorizedError):
        await require_auth(_request(""))
    validator.assert_not_called()


async def test_valid_token_attaches_claims(monkeypatch):
    claims = TokenClaims(sub="user-1", role=UserRole.CITIZEN)
    validator = Mock(return_value=claims)
    monkeypatch.setattr(auth_deps, "decode_access_token", validator)

    request = _request("Bearer valid.jwt.token")
    result = await require_auth(request)

    assert result == claims
    assert request.state.user == claims
    validator.assert_called_once_with("valid.jwt.token")


async def test_invalid_token_is_unauthorized(monkeypatch):
    validator = Mock(side_effect=UnauthorizedError("Invalid or expired token"))
    monkeypatch.setattr(auth_deps, "decode_access_token", validator)

    with pytest.raises(UnauthorizedError):
        await require_auth(_request("Bearer invalid.token"))


async def test_role_guard_fails_closed():
    guard = require_roles(UserRole.COUNCILOR, UserRole.ADMIN)

    with pytest.raises(ForbiddenError):
        await guard(claims=TokenClaims(sub="u", role=UserRole.CITIZEN))

    ok = TokenClaims(sub="u", role=UserRole.COUNCILOR)
    assert await guard(claims=ok) == ok


@pytest.mark.parametrize("headers", [
    {},
    {"Authorization": ""},
    {"Authorization": "Bearer invalid.token.here"},
    {"Authorization": "Token abc"},
    {"Authorization": "bearer abc"},
])
async def test_protected_route_rejects_bad_credentials(client, headers):
    response = await client.get("/users", headers=headers)
    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"


async def test_protected_route_accepts_valid_token(client, make_user, auth_headers):
    user = await make_user()
    response = await client.get("/users", headers=auth_headers(user))
    assert response.status_code == 200
    assert [u["id"] for u in response.json()] == [user.id]


async def test_citizen_cannot_create_project_even_with_valid_token(client, make_user, auth_headers):
    citizen = await make_user(role=UserRole.CITIZEN)
    response = await client.post(
        "/projects",
        json={"title": "Park", "description": "New park", "category": "environment", "neighborhood": "Vila Nova"},
        headers=auth_headers(citizen),
    )
    assert response.status_code == 403
