from __future__ import annotations

from core.security import create_refresh_token


def test_register_login_and_me(client, register):
    registered = register(email="Admin@School.test", role="School Admin")
    assert registered["user"]["email"] == "admin@school.test"
    assert registered["user"]["roles"] == ["School Admin"]
    assert registered["user"]["is_super_admin"] is False

    login = client.post("/api/auth/login", json={"email": "admin@school.test", "password": "s3cret-pass"})
    assert login.status_code == 200
    token = login.json()["access_token"]

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["roles"] == ["School Admin"]


def test_register_defaults_to_super_admin(client):
    resp = client.post(
        "/api/auth/register",
        json={"name": "Root", "email": "root@school.test", "password": "long-enough"},
    )
    assert resp.status_code == 201
    assert resp.json()["user"]["is_super_admin"] is True


def test_register_rejects_duplicate_email_and_unknown_role(client, register):
    register(email="dup@school.test", role="Teacher")

    dup = client.post(
        "/api/auth/register",
        json={"name": "Dup", "email": "DUP@school.test", "password": "long-enough", "role": "Teacher"},
    )
    assert dup.status_code == 409
    assert dup.json()["detail"] == "EMAIL_TAKEN"

    bad_role = client.post(
        "/api/auth/register",
        json={"name": "X", "email": "x@school.test", "password": "long-enough", "role": "Janitor"},
    )
    assert bad_role.status_code == 422


def test_login_with_wrong_password_is_unauthorized(client, register):
    register(email="user@school.test", role="Teacher")

    resp = client.post("/api/auth/login", json={"email": "user@school.test", "password": "not-the-one"})
    assert resp.status_code == 401
    assert resp.json()["detail"] == "INVALID_CREDENTIALS"


def test_refresh_issues_a_working_access_token(client, register):
    body = register(email="officer@school.test", role="Academic Officer")

    refreshed = client.post("/api/auth/refresh", json={"refresh_token": body["refresh_token"]})
    assert refreshed.status_code == 200
    access = refreshed.json()["access_token"]

    resp = client.get("/api/classes/", headers={"Authorization": f"Bearer {access}"})
    assert resp.status_code == 200


def test_refresh_token_is_not_an_access_token(client, register):
    body = register(email="officer@school.test", role="Academic Officer")

    resp = client.get("/api/classes/", headers={"Authorization": f"Bearer {body['refresh_token']}"})
    assert resp.status_code == 401


def test_access_token_is_not_a_refresh_token(client, register):
    body = register(email="officer@school.test", role="Academic Officer")

    resp = client.post("/api/auth/refresh", json={"refresh_token": body["access_token"]})
    assert resp.status_code == 401
    assert resp.json()["detail"] == "INVALID_REFRESH_TOKEN"


def test_refresh_for_unknown_user_is_rejected(client):
    token = create_refresh_token(user_id="00000000-0000-0000-0000-000000000000", email="ghost@x.test", roles=[])

    resp = client.post("/api/auth/refresh", json={"refresh_token": token})
    assert resp.status_code == 401


def test_garbage_token_is_rejected(client):
    resp = client.get("/api/auth/me", headers={"Authorization": "Bearer not.a.jwt"})
    assert resp.status_code == 401
    assert resp.json()["detail"] == "INVALID_TOKEN"


def test_login_is_rate_limited(client, register):
    register(email="victim@school.test", role="Teacher")

    statuses = [
        client.post("/api/auth/login", json={"email": "victim@school.test", "password": "wrong-pass"}).status_code
        for _ in range(11)
    ]
    assert set(statuses) == {401}
    # Registration counted as one attempt for the same key.
    blocked = client.post("/api/auth/login", json={"email": "victim@school.test", "password": "wrong-pass"})
    assert blocked.status_code == 429
