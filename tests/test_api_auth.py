"""
Integration tests for register / login / logout and the auth gate.
"""
import pytest

from chatroom.config import settings
from chatroom.errors import AuthError, ValidationError
from chatroom.security import create_access_token, decode_access_token
from chatroom.services import auth_service

REGISTER = {
    "name": "Alice",
    "email": "Alice@Example.com",
    "password": "secret123",
    "password_confirmation": "secret123",
}


async def test_register_sets_session(client):
    resp = await client.post("/api/auth/register", json=REGISTER)

    assert resp.status_code == 201
    data = resp.json()
    assert data["token_type"] == "bearer"
    assert data["user"]["name"] == "Alice"
    assert data["user"]["email"] == "alice@example.com"
    assert settings.SESSION_COOKIE_NAME in resp.cookies

    me = await client.get("/api/auth/me")
    assert me.status_code == 200
    assert me.json()["id"] == data["user"]["id"]


@pytest.mark.parametrize("override, field", [
    ({"name": "  "}, "name"),
    ({"email": "not-an-email"}, "email"),
    ({"password": "123", "password_confirmation": "123"}, "password"),
    ({"password_confirmation": "different"}, "password"),
])
async def test_register_validation(client, override, field):
    resp = await client.post("/api/auth/register", json={**REGISTER, **override})

    assert resp.status_code == 422
    assert resp.json()["field"] == field


async def test_register_duplicate_email(client):
    await client.post("/api/auth/register", json=REGISTER)
    resp = await client.post("/api/auth/register", json={**REGISTER, "email": "alice@example.com"})

    assert resp.status_code == 422
    assert resp.json() == {"detail": "email already registered", "field": "email"}


async def test_login(client, make_user):
    await make_user("Bob", password="hunter22")

    resp = await client.post("/api/auth/login", json={"email": "BOB@example.com", "password": "hunter22"})

    assert resp.status_code == 200
    token = resp.json()["access_token"]
    assert decode_access_token(token) == resp.json()["user"]["id"]


async def test_login_errors_do_not_leak_field(client, make_user):
    await make_user("Bob", password="hunter22")

    wrong_password = await client.post("/api/auth/login", json={"email": "bob@example.com", "password": "nope"})
    unknown_email = await client.post("/api/auth/login", json={"email": "eve@example.com", "password": "hunter22"})

    assert wrong_password.status_code == unknown_email.status_code == 401
    assert wrong_password.json() == unknown_email.json() == {"detail": "invalid credentials"}


async def test_logout_clears_session(client):
    await client.post("/api/auth/register", json=REGISTER)

    resp = await client.post("/api/auth/logout")
    assert resp.status_code == 200
    assert resp.json() == {"success": True}

    me = await client.get("/api/auth/me")
    assert me.status_code == 401


async def test_token_for_deleted_user(client):
    resp = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {create_access_token(999)}"})
    assert resp.status_code == 401


async def test_expired_token():
    token = create_access_token(1, expires_minutes=-1)
    assert decode_access_token(token) is None


async def test_password_is_hashed(db_session, make_user):
    user = await make_user(password="secret123")
    assert user.password_hash != "secret123"
    assert auth_service.verify_password("secret123", user.password_hash)


async def test_authenticate_service(db_session, make_user):
    user = await make_user("Dana", password="secret123")

    assert (await auth_service.authenticate(db_session, email="dana@example.com", password="secret123")).id == user.id
    with pytest.raises(AuthError):
        await auth_service.authenticate(db_session, email="dana@example.com", password="wrong")


async def test_register_service_rejects_duplicate(db_session, make_user):
    await make_user("Erin")
    with pytest.raises(ValidationError):
        await auth_service.register(db_session, name="Erin", email="erin@example.com", password="secret123")


@pytest.mark.parametrize("payload, field", [
    ({"email": "", "password": ""}, "email"),
    ({"email": "not-an-email", "password": "hunter22"}, "email"),
    ({"email": "bob@example.com", "password": ""}, "password"),
])
async def test_login_malformed_input(client, make_user, payload, field):
    await make_user("Bob", password="hunter22")

    resp = await client.post("/api/auth/login", json=payload)

    assert resp.status_code == 422
    assert resp.json()["field"] == field


async def test_authenticate_service_validates_input(db_session):
    with pytest.raises(ValidationError) as excinfo:
        await auth_service.authenticate(db_session, email="  ", password="secret123")
    assert excinfo.value.field == "email"
