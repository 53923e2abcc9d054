from datetime import timedelta

from skillwise.core.security import create_access_token, create_refresh_token

PASSWORD = "Password123"


async def test_register_returns_user_and_tokens(client):
    resp = await client.post("/api/auth/register", json={
        "email": "New.Student@Example.com",
        "password": PASSWORD,
        "first_name": "New",
        "last_name": "Student",
    })
    assert resp.status_code == 201
    body = resp.json()
    assert body["success"] is True
    assert body["data"]["user"]["email"] == "new.student@example.com"
    assert body["data"]["user"]["role"] == "student"
    assert body["data"]["access_token"]
    assert body["data"]["refresh_token"]


async def test_register_duplicate_email_conflicts(client, register):
    await register(email="dup@example.com")
    resp = await client.post("/api/auth/register", json={
        "email": "DUP@example.com", "password": PASSWORD, "first_name": "A", "last_name": "B",
    })
    assert resp.status_code == 409
    assert resp.json() == {"success": False, "error": "conflict", "message": "User already exists with this email"}


async def test_register_weak_password(client):
    resp = await client.post("/api/auth/register", json={
        "email": "weak@example.com", "password": "password", "first_name": "A", "last_name": "B",
    })
    assert resp.status_code == 400
    assert resp.json()["error"] == "validation_error"


async def test_register_missing_fields_is_400(client):
    resp = await client.post("/api/auth/register", json={"email": "x@example.com"})
    assert resp.status_code == 400
    assert resp.json()["success"] is False


async def test_login_and_me(client, register):
    await register(email="login@example.com")
    resp = await client.post("/api/auth/login", json={"email": "login@example.com", "password": PASSWORD})
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["user"]["last_login"] is not None

    me = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {data['access_token']}"})
    assert me.status_code == 200
    assert me.json()["data"]["email"] == "login@example.com"


async def test_login_wrong_password(client, register):
    await register(email="wrong@example.com")
    resp = await client.post("/api/auth/login", json={"email": "wrong@example.com", "password": "Nope12345"})
    assert resp.status_code == 401
    assert resp.json()["error"] == "auth_error"


async def test_login_inactive_account(client, make_user):
    await make_user(email="gone@example.com", is_active=False)
    resp = await client.post("/api/auth/login", json={"email": "gone@example.com", "password": PASSWORD})
    assert resp.status_code == 401


async def test_protected_route_requires_token(client):
    resp = await client.get("/api/goals")
    assert resp.status_code == 401
    assert resp.headers["www-authenticate"] == "Bearer"


async def test_invalid_and_expired_tokens(client, make_user):
    user = await make_user()
    bad = await client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert bad.status_code == 401

    expired = create_access_token({"sub": str(user.id)}, expires_delta=timedelta(minutes=-1))
    resp = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {expired}"})
    assert resp.status_code == 401
    assert "expired" in resp.json()["message"]


async def test_refresh_token_is_not_an_access_token(client, make_user):
    user = await make_user()
    refresh = create_refresh_token({"sub": str(user.id)})
    resp = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {refresh}"})
    assert resp.status_code == 401

    resp = await client.post("/api/auth/refresh", json={"refresh_token": refresh})
    assert resp.status_code == 200
    access = resp.json()["data"]["access_token"]
    me = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {access}"})
    assert me.json()["data"]["id"] == user.id


async def test_profile_update(client, register):
    headers, _ = await register()
    resp = await client.put("/api/users/profile", json={"first_name": "Grace"}, headers=headers)
    assert resp.status_code == 200
    assert resp.json()["data"]["first_name"] == "Grace"
    assert resp.json()["data"]["last_name"] == "Lovelace"

    profile = await client.get("/api/users/profile", headers=headers)
    assert profile.json()["data"]["first_name"] == "Grace"


async def test_logout_revokes_refresh_token(client, register):
    await register(email="leaving@example.com")
    login = await client.post("/api/auth/login", json={"email": "leaving@example.com", "password": PASSWORD})
    tokens = login.json()["data"]
    headers = {"Authorization": f"Bearer {tokens['access_token']}"}

    resp = await client.post("/api/auth/logout", json={"refresh_token": tokens["refresh_token"]}, headers=headers)
    assert resp.status_code == 200
    assert resp.json() == {"success": True, "data": None, "message": "Logout successful"}

    refreshed = await client.post("/api/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
    assert refreshed.status_code == 401

    # logging out twice with the same token is harmless
    again = await client.post("/api/auth/logout", json={"refresh_token": tokens["refresh_token"]}, headers=headers)
    assert again.status_code == 200


async def test_logout_without_body_and_other_users_token(client, register, make_user):
    headers, _ = await register()
    resp = await client.post("/api/auth/logout", headers=headers)
    assert resp.status_code == 200
    assert resp.json()["message"] == "Logout successful"

    other = await make_user()
    foreign = create_refresh_token({"sub": str(other.id)})
    resp = await client.post("/api/auth/logout", json={"refresh_token": foreign}, headers=headers)
    assert resp.status_code == 401

    # the foreign token was not revoked
    refreshed = await client.post("/api/auth/refresh", json={"refresh_token": foreign})
    assert refreshed.status_code == 200


async def test_logout_requires_authentication(client):
    resp = await client.post("/api/auth/logout")
    assert resp.status_code == 401
