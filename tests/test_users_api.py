import asyncio

import pytest

from app.errors import ConflictError
from app.models.user_model import UserRole
from app.models.vote_model import VoteDirection
from app.schemas.user_schemas import UserCreate, UserUpdate
from app.services import user_service, vote_ledger
from app.utils.token_utils import TokenClaims

NEW_USER = {
    "email": "Maria.Silva@Example.com",
    "name": "Maria Silva",
    "cpf": "123.456.789-09",
    "password": "secret123",
}


async def test_register_returns_projection_without_password(client):
    response = await client.post("/users", json=NEW_USER)

    assert response.status_code == 201
    body = response.json()
    assert body["email"] == "maria.silva@example.com"
    assert body["cpf"] == "12345678909"
    assert body["role"] == "citizen"
    assert body["isActive"] is True
    assert "createdAt" in body
    assert "password" not in body


async def test_register_ignores_requested_role(client):
    response = await client.post("/users", json={**NEW_USER, "role": "admin"})
    assert response.status_code == 201
    assert response.json()["role"] == "citizen"


@pytest.mark.parametrize("override", [
    {"cpf": "987.654.321-00"},
    {"email": "someone.else@example.com"},
])
async def test_register_duplicate_email_or_cpf_conflicts(client, override):
    assert (await client.post("/users", json=NEW_USER)).status_code == 201

    response = await client.post("/users", json={**NEW_USER, **override})

    assert response.status_code == 409


@pytest.mark.parametrize("override", [
    {"cpf": "123"},
    {"email": "not-an-email"},
    {"password": "123"},
    {"name": " "},
])
async def test_register_rejects_invalid_payload(client, override):
    response = await client.post("/users", json={**NEW_USER, **override})
    assert response.status_code == 400
    assert "detail" in response.json()


async def test_registered_user_can_log_in(client):
    await client.post("/users", json=NEW_USER)

    response = await client.post("/auth/login", json={"cpf": "12345678909", "password": "secret123"})

    assert response.status_code == 200
    assert response.json()["role"] == "citizen"


async def test_me_and_lookups(client, make_user, auth_headers):
    user = await make_user(cpf="12345678909")
    headers = auth_headers(user)

    me = await client.get("/users/me", headers=headers)
    assert me.status_code == 200
    assert me.json()["id"] == user.id

    by_id = await client.get(f"/users/{user.id}", headers=headers)
    assert by_id.json()["cpf"] == "12345678909"

    by_cpf = await client.get("/users/cpf/123.456.789-09", headers=headers)
    assert by_cpf.json()["id"] == user.id

    assert (await client.get("/users/cpf/abc", headers=headers)).status_code == 404
    assert (await client.get("/users/does-not-exist", headers=headers)).status_code == 404


async def test_user_updates_own_profile(client, make_user, auth_headers):
    user = await make_user()

    response = await client.patch(f"/users/{user.id}", json={"name": "New Name"}, headers=auth_headers(user))

    assert response.status_code == 200
    assert response.json()["name"] == "New Name"


async def test_user_cannot_update_someone_else(client, make_user, auth_headers):
    user = await make_user()
    other = await make_user()

    response = await client.patch(f"/users/{other.id}", json={"name": "Hijacked"}, headers=auth_headers(user))

    assert response.status_code == 403


async def test_only_admin_changes_role(client, make_user, auth_headers):
    citizen = await make_user()
    admin = await make_user(role=UserRole.ADMIN)

    own = await client.patch(f"/users/{citizen.id}", json={"role": "admin"}, headers=auth_headers(citizen))
    assert own.status_code == 403

    promoted = await client.patch(f"/users/{citizen.id}", json={"role": "councilor"}, headers=auth_headers(admin))
    assert promoted.status_code == 200
    assert promoted.json()["role"] == "councilor"


async def test_update_to_taken_email_conflicts(client, make_user, auth_headers):
    user = await make_user()
    other = await make_user(email="taken@example.com")

    response = await client.patch(f"/users/{user.id}", json={"email": other.email}, headers=auth_headers(user))

    assert response.status_code == 409


async def test_password_change_is_rehashed(client, make_user, auth_headers):
    user = await make_user(cpf="12345678909")

    response = await client.patch(f"/users/{user.id}", json={"password": "brand-new-pass"}, headers=auth_headers(user))
    assert response.status_code == 200

    old = await client.post("/auth/login", json={"cpf": "12345678909", "password": "secret123"})
    new = await client.post("/auth/login", json={"cpf": "12345678909", "password": "brand-new-pass"})
    assert old.status_code == 401
    assert new.status_code == 200


async def test_delete_user_retracts_votes(client, db, reload, make_user, make_project, auth_headers):
    councilor = await make_user(role=UserRole.COUNCILOR)
    project = await make_project(councilor)
    voter = await make_user()
    await vote_ledger.cast_vote(db, voter.id, project.id, VoteDirection.UP)

    response = await client.delete(f"/users/{voter.id}", headers=auth_headers(voter))

    assert response.status_code == 204
    fresh = await reload(type(project), project.id)
    assert (fresh.votes_for, fresh.votes_against) == (0, 0)
    assert await vote_ledger.get_votes_for_target(db, project.id) == []
    assert (await client.get(f"/users/{voter.id}", headers=auth_headers(councilor))).status_code == 404


async def test_user_cannot_delete_someone_else(client, make_user, auth_headers):
    user = await make_user()
    other = await make_user()

    response = await client.delete(f"/users/{other.id}", headers=auth_headers(user))

    assert response.status_code == 403


def _signup(**overrides):
    return UserCreate(**{**NEW_USER, **overrides})


async def test_concurrent_registrations_with_same_cpf(session_factory):
    async def register(email):
        async with session_factory() as session:
            return await user_service.create_user(session, _signup(email=email))

    results = await asyncio.gather(
        register("first@example.com"),
        register("second@example.com"),
        return_exceptions=True,
    )

    assert sorted(type(r).__name__ for r in results) == ["ConflictError", "User"]
    async with session_factory() as session:
        assert len(await user_service.find_all(session)) == 1


async def test_store_constraint_decides_when_precheck_is_raced(db, monkeypatch):
    async def precheck_passes(*args, **kwargs):
        return None

    first_cpf = (await user_service.create_user(db, _signup())).cpf
    monkeypatch.setattr(user_service, "_ensure_unique", precheck_passes)

    with pytest.raises(ConflictError):
        await user_service.create_user(db, _signup(email="other@example.com"))

    second = await user_service.create_user(db, _signup(email="other@example.com", cpf="98765432100"))
    claims = TokenClaims(sub=second.id, role=UserRole.CITIZEN)
    with pytest.raises(ConflictError):
        await user_service.update_user(db, second.id, UserUpdate(cpf=first_cpf), claims)

    assert len(await user_service.find_all(db)) == 2


async def test_empty_user_update_is_a_bad_request(client, make_user, auth_headers):
    user = await make_user()

    response = await client.patch(f"/users/{user.id}", json={}, headers=auth_headers(user))

    assert response.status_code == 400
    assert response.json() == {"detail": "No user fields to update"}
