import httpx
import pytest
import pytest_asyncio
from fastapi import status

from tests.factories import fake_registration

API = "/api/v1/auth"


@pytest_asyncio.fixture
async def registered(async_client: httpx.AsyncClient, sink):
    payload = fake_registration()
    response = await async_client.post(f"{API}/register", json=payload)
    assert response.status_code == status.HTTP_201_CREATED
    return {**payload, "verification_token": sink.last.one_time_token, "id": response.json()["user"]["id"]}


@pytest_asyncio.fixture
async def logged_in(async_client: httpx.AsyncClient, registered):
    response = await async_client.post(
        f"{API}/login", json={"username": registered["username"], "password": registered["password"]}
    )
    assert response.status_code == status.HTTP_200_OK
    return response.json()["tokens"]


def _bearer(tokens):
    return {"Authorization": f"Bearer {tokens['access_token']}"}


# ---------------------------------------------------------------------------
# Register
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_register_returns_unverified_user_without_credentials(async_client, sink):
    payload = fake_registration()

    response = await async_client.post(f"{API}/register", json=payload)

    assert response.status_code == status.HTTP_201_CREATED
    body = response.json()
    assert body["user"]["state"] == "unverified"
    assert body["user"]["is_email_verified"] is False
    assert body["notification_delivered"] is True
    assert "hashed_password" not in body["user"]
    assert "email_verification_token" not in body["user"]
    assert sink.last.recipient == payload["email"]


@pytest.mark.asyncio
async def test_register_duplicate_returns_conflict(async_client, registered):
    response = await async_client.post(
        f"{API}/register",
        json={"username": registered["username"], "email": "other@example.com", "password": "Passw0rd!"},
    )

    assert response.status_code == status.HTTP_409_CONFLICT


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [
        {"username": "ab", "email": "a@example.com", "password": "Passw0rd!"},
        {"username": "alice", "email": "not-an-email", "password": "Passw0rd!"},
        {"username": "alice", "email": "a@example.com", "password": "short"},
        {"username": "bad name!", "email": "a@example.com", "password": "Passw0rd!"},
    ],
)
async def test_register_validates_payload(async_client, payload):
    response = await async_client.post(f"{API}/register", json=payload)

    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


# ---------------------------------------------------------------------------
# Verify
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_verify_email(async_client, registered):
    response = await async_client.get(f"{API}/verify-email/{registered['verification_token']}")

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["state"] == "verified"

    replay = await async_client.get(f"{API}/verify-email/{registered['verification_token']}")
    assert replay.status_code == status.HTTP_409_CONFLICT


@pytest.mark.asyncio
async def test_verify_email_with_unknown_token(async_client, registered):
    response = await async_client.get(f"{API}/verify-email/not-a-real-token")

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json() == {"detail": "Token is invalid or expired", "code": "token_invalid_or_expired"}


@pytest.mark.asyncio
async def test_resend_verification(async_client, registered, logged_in, sink):
    response = await async_client.post(f"{API}/resend-email-verification", headers=_bearer(logged_in))

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["notification_delivered"] is True
    assert sink.last.one_time_token != registered["verification_token"]


@pytest.mark.asyncio
async def test_resend_verification_requires_authentication(async_client):
    response = await async_client.post(f"{API}/resend-email-verification")

    assert response.status_code == status.HTTP_401_UNAUTHORIZED


# ---------------------------------------------------------------------------
# Login, current user, logout
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_login_before_verification_succeeds(async_client, registered):
    response = await async_client.post(
        f"{API}/login", json={"email": registered["email"], "password": registered["password"]}
    )

    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["user"]["state"] == "unverified"
    assert body["tokens"]["token_type"] == "bearer"
    assert body["tokens"]["expires_in"] == 900


@pytest.mark.asyncio
async def test_login_with_wrong_password(async_client, registered):
    response = await async_client.post(
        f"{API}/login", json={"username": registered["username"], "password": "wrong-password"}
    )

    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json() == {"detail": "Invalid user credentials", "code": "invalid_credentials"}
    assert response.headers["www-authenticate"] == "Bearer"


@pytest.mark.asyncio
async def test_login_requires_an_identity(async_client):
    response = await async_client.post(f"{API}/login", json={"password": "Passw0rd!"})

    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


@pytest.mark.asyncio
async def test_current_user(async_client, registered, logged_in):
    response = await async_client.get(f"{API}/current-user", headers=_bearer(logged_in))

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["id"] == registered["id"]


@pytest.mark.asyncio
@pytest.mark.parametrize("headers", [{}, {"Authorization": "Bearer garbage"}, {"Authorization": "Basic abc"}])
async def test_current_user_rejects_missing_or_invalid_tokens(async_client, headers):
    response = await async_client.get(f"{API}/current-user", headers=headers)

    assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.asyncio
async def test_refresh_token_is_not_an_access_token(async_client, logged_in):
    response = await async_client.get(
        f"{API}/current-user", headers={"Authorization": f"Bearer {logged_in['refresh_token']}"}
    )

    assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.asyncio
async def test_logout_ends_refresh_chain(async_client, logged_in):
    response = await async_client.post(f"{API}/logout", headers=_bearer(logged_in))
    assert response.status_code == status.HTTP_200_OK

    refresh = await async_client.post(
        f"{API}/refresh-access-token", json={"refresh_token": logged_in["refresh_token"]}
    )
    assert refresh.status_code == status.HTTP_401_UNAUTHORIZED


# ---------------------------------------------------------------------------
# Refresh
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_refresh_rotates_tokens_and_rejects_replay(async_client, logged_in):
    first = await async_client.post(
        f"{API}/refresh-access-token", json={"refresh_token": logged_in["refresh_token"]}
    )
    assert first.status_code == status.HTTP_200_OK
    rotated = first.json()
    assert rotated["refresh_token"] != logged_in["refresh_token"]

    replay = await async_client.post(
        f"{API}/refresh-access-token", json={"refresh_token": logged_in["refresh_token"]}
    )
    assert replay.status_code == status.HTTP_401_UNAUTHORIZED
    assert replay.json() == {"detail": "Invalid or expired session token", "code": "invalid_token"}

    second = await async_client.post(f"{API}/refresh-access-token", json={"refresh_token": rotated["refresh_token"]})
    assert second.status_code == status.HTTP_200_OK


@pytest.mark.asyncio
async def test_refresh_with_garbage(async_client):
    response = await async_client.post(f"{API}/refresh-access-token", json={"refresh_token": "garbage"})

    assert response.status_code == status.HTTP_401_UNAUTHORIZED


# ---------------------------------------------------------------------------
# Passwords
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_change_password(async_client, registered, logged_in):
    response = await async_client.post(
        f"{API}/change-password",
        json={"old_password": registered["password"], "new_password": "N3wPassword!"},
        headers=_bearer(logged_in),
    )
    assert response.status_code == status.HTTP_200_OK

    login = await async_client.post(
        f"{API}/login", json={"username": registered["username"], "password": "N3wPassword!"}
    )
    assert login.status_code == status.HTTP_200_OK


@pytest.mark.asyncio
async def test_change_password_with_wrong_old_password(async_client, logged_in):
    response = await async_client.post(
        f"{API}/change-password",
        json={"old_password": "wrong-password", "new_password": "N3wPassword!"},
        headers=_bearer(logged_in),
    )

    assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.asyncio
async def test_forgot_and_reset_password(async_client, registered, sink):
    response = await async_client.post(f"{API}/forgot-password", json={"email": registered["email"]})
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["notification_delivered"] is True
    token = sink.last.one_time_token

    reset = await async_client.post(f"{API}/reset-password/{token}", json={"new_password": "N3wPassword!"})
    assert reset.status_code == status.HTTP_200_OK

    replay = await async_client.post(f"{API}/reset-password/{token}", json={"new_password": "An0therPass!"})
    assert replay.status_code == status.HTTP_400_BAD_REQUEST


@pytest.mark.asyncio
async def test_forgot_password_for_unknown_email(async_client):
    response = await async_client.post(f"{API}/forgot-password", json={"email": "nobody@example.com"})

    assert response.status_code == status.HTTP_404_NOT_FOUND
