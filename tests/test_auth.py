from datetime import datetime, timedelta, timezone

import jwt

from price_alerts.core.config import settings
from price_alerts.modules.auth.repository import AuthRepository
from price_alerts.modules.auth.schemas import RefreshTokenAdd


async def test_root_is_public(client):
    response = await client.get("/")
    assert response.status_code == 200
    assert "message" in response.json()


async def test_register_login_and_me(client):
    response = await client.post("/auth/register", json={"email": "ann@example.com", "password": "password123"})
    assert response.status_code == 201
    user_id = response.json()["user_id"]

    response = await client.post("/auth/login", json={"email": "ann@example.com", "password": "password123"})
    assert response.status_code == 200
    tokens = response.json()

    response = await client.get("/auth/me", headers={"Authorization": f"Bearer {tokens['access_token']}"})
    assert response.status_code == 200
    assert response.json() == {"id": user_id, "email": "ann@example.com"}


async def test_register_duplicate_email(client):
    payload = {"email": "dup@example.com", "password": "password123"}
    assert (await client.post("/auth/register", json=payload)).status_code == 201
    response = await client.post("/auth/register", json=payload)
    assert response.status_code == 409


async def test_register_short_password_is_bad_request(client):
    response = await client.post("/auth/register", json={"email": "x@example.com", "password": "short"})
    assert response.status_code == 400


async def test_login_wrong_password(client, make_user):
    await make_user("bob@example.com")
    response = await client.post("/auth/login", json={"email": "bob@example.com", "password": "wrong-password"})
    assert response.status_code == 401


async def test_refresh_rotates_token(client, make_user):
    await make_user("carl@example.com")
    tokens = (await client.post(
        "/auth/login", json={"email": "carl@example.com", "password": "password123"}
    )).json()

    response = await client.post("/auth/refresh", json={"token": tokens["refresh_token"]})
    assert response.status_code == 200
    assert response.json()["refresh_token"] != tokens["refresh_token"]

    # the old refresh token is revoked
    response = await client.post("/auth/refresh", json={"token": tokens["refresh_token"]})
    assert response.status_code == 401


async def test_missing_authorization_header(client):
    response = await client.get("/alerts")
    assert response.status_code == 401
    assert response.json()["detail"] == "Unauthorized: No token provided"


async def test_non_bearer_scheme(client):
    response = await client.get("/alerts", headers={"Authorization": "Basic abc"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Unauthorized: No token provided"


async def test_garbage_token(client):
    response = await client.get("/alerts", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Unauthorized: Invalid token"


async def test_expired_token_does_not_leak_cause(client):
    token = jwt.encode(
        {"user_id": 1, "exp": datetime.now(timezone.utc) - timedelta(minutes=1)},
        settings.JWT_SECRET_KEY,
        algorithm=settings.JWT_ALGORITHM,
    )
    response = await client.get("/alerts", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Unauthorized: Invalid token"


async def test_token_signed_with_other_key(client):
    token = jwt.encode({"user_id": 1}, "some-other-secret-of-sufficient-length", algorithm="HS256")
    response = await client.get("/alerts", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401


async def test_new_login_revokes_previous_refresh_token(client, make_user, session):
    user, _ = await make_user("dora@example.com")
    credentials = {"email": "dora@example.com", "password": "password123"}

    first = (await client.post("/auth/login", json=credentials)).json()
    second = (await client.post("/auth/login", json=credentials)).json()

    response = await client.post("/auth/refresh", json={"token": first["refresh_token"]})
    assert response.status_code == 401
    assert (await client.post("/auth/refresh", json={"token": second["refresh_token"]})).status_code == 200

    stored = await AuthRepository(session).get_all_by(user_id=user.uid)
    assert len(stored) == 1


async def test_refresh_token_store_leaves_commit_to_caller(session, make_user):
    user, _ = await make_user("eve@example.com")
    repo = AuthRepository(session)
    expires_at = datetime.now(timezone.utc) + timedelta(days=1)

    await repo.replace_for_user(RefreshTokenAdd(user_id=user.uid, token="t1", expires_at=expires_at))
    await session.rollback()
    assert await repo.find("t1") is None

    await repo.replace_for_user(RefreshTokenAdd(user_id=user.uid, token="t2", expires_at=expires_at))
    await session.commit()
    assert await repo.revoke("t2") is True
    assert await repo.revoke("t2") is False
    await session.rollback()
    assert (await repo.find("t2")).user_id == user.uid
