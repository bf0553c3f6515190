# composition_service/test/routes/test_auth_routes.py

# Para rodar o arquivo
# pytest composition_service/test/routes/test_auth_routes.py -v

import pytest

from composition_service.test.conftest import TEST_PASSWORD, auth_headers, register_and_login


@pytest.mark.asyncio
async def test_register_and_login(async_client):
    """
    Registro retorna o usuário sem senha; login retorna o par de tokens.
    """
    response = await async_client.post(
        "/api/v1/users/register",
        json={"login": "new-composer", "password": TEST_PASSWORD},
    )
    assert response.status_code == 201
    body = response.json()
    assert body["login"] == "new-composer"
    assert body["is_moderator"] is False
    assert "password" not in body

    response = await async_client.post(
        "/api/v1/users/login",
        json={"login": "new-composer", "password": TEST_PASSWORD},
    )
    assert response.status_code == 200
    tokens = response.json()
    assert tokens["token_type"] == "Bearer"
    assert tokens["access_token"] and tokens["refresh_token"]
    assert tokens["user_id"] == body["id"]


@pytest.mark.asyncio
async def test_register_duplicate_login(async_client):
    await register_and_login(async_client, login="dup-user")

    response = await async_client.post(
        "/api/v1/users/register",
        json={"login": "dup-user", "password": TEST_PASSWORD},
    )
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_register_invalid_payload(async_client):
    response = await async_client.post(
        "/api/v1/users/register",
        json={"login": "x", "password": "123"},
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_login_wrong_password(async_client):
    await register_and_login(async_client, login="careful-user")

    response = await async_client.post(
        "/api/v1/users/login",
        json={"login": "careful-user", "password": "not-the-password"},
    )
    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"


@pytest.mark.asyncio
@pytest.mark.parametrize("headers, detail", [
    ({}, "Authorization header required"),
    ({"Authorization": "Basic abc"}, "Bearer token required"),
    ({"Authorization": "Bearer not-a-token"}, "Invalid token"),
])
async def test_protected_route_rejects_bad_credentials(async_client, headers, detail):
    response = await async_client.get("/api/v1/users/profile", headers=headers)

    assert response.status_code == 401
    assert response.json()["detail"] == detail
    assert response.headers["www-authenticate"] == "Bearer"


@pytest.mark.asyncio
async def test_profile_and_update(async_client, user_tokens):
    response = await async_client.get("/api/v1/users/profile", headers=auth_headers(user_tokens))
    assert response.status_code == 200
    assert response.json()["id"] == user_tokens["user_id"]

    response = await async_client.put(
        "/api/v1/users/profile",
        json={"login": "renamed-user"},
        headers=auth_headers(user_tokens),
    )
    assert response.status_code == 200
    assert response.json()["login"] == "renamed-user"
    assert response.json()["updated_at"] is not None


@pytest.mark.asyncio
async def test_logout_revokes_access_token(async_client, user_tokens, session_store):
    """
    Depois do logout o mesmo access token é recusado, mesmo com assinatura válida.
    """
    headers = auth_headers(user_tokens)

    response = await async_client.post("/api/v1/users/logout", headers=headers)
    assert response.status_code == 200
    assert response.json() == {"message": "Successfully logged out"}
    assert user_tokens["access_token"] in session_store.blacklist

    response = await async_client.get("/api/v1/users/profile", headers=headers)
    assert response.status_code == 401
    assert response.json()["detail"] == "Token is invalidated"


@pytest.mark.asyncio
async def test_logout_with_unavailable_store(async_client, user_tokens, session_store):
    session_store.unavailable = True

    response = await async_client.post("/api/v1/users/logout", headers=auth_headers(user_tokens))

    assert response.status_code == 503
    assert response.json()["detail"] == "Failed to logout"


@pytest.mark.asyncio
async def test_refresh_rotation(async_client, user_tokens):
    """
    O refresh devolve um novo par; o refresh token antigo deixa de valer.
    """
    response = await async_client.post(
        "/api/v1/users/refresh", json={"refresh_token": user_tokens["refresh_token"]}
    )
    assert response.status_code == 200
    new_tokens = response.json()
    assert new_tokens["refresh_token"] != user_tokens["refresh_token"]

    response = await async_client.get("/api/v1/users/profile", headers=auth_headers(new_tokens))
    assert response.status_code == 200

    response = await async_client.post(
        "/api/v1/users/refresh", json={"refresh_token": user_tokens["refresh_token"]}
    )
    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid refresh token"


@pytest.mark.asyncio
async def test_refresh_rejects_access_token(async_client, user_tokens):
    response = await async_client.post(
        "/api/v1/users/refresh", json={"refresh_token": user_tokens["access_token"]}
    )
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_session_record(async_client, user_tokens):
    response = await async_client.get("/api/v1/users/session", headers=auth_headers(user_tokens))

    assert response.status_code == 200
    body = response.json()
    assert body["user_id"] == user_tokens["user_id"]
    assert body["session"]["user_id"] == str(user_tokens["user_id"])
    assert body["session"]["is_moderator"] == "false"


@pytest.mark.asyncio
async def test_health(async_client, app):
    response = await async_client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "session_store": "enabled"}
    assert "x-process-time" in response.headers
