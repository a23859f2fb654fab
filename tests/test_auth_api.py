"""Integration tests for registration, login, logout and token refresh."""

from sqlalchemy import func, select

from app.models import AccessToken, User
from tests.conftest import DEFAULT_PASSWORD

REGISTER_URL = "/api/v1/auth/register"
LOGIN_URL = "/api/v1/auth/login"


def registration(email="new@example.com", password="Password1", confirmation=None):
    return {
        "name": "New User",
        "email": email,
        "password": password,
        "password_confirmation": password if confirmation is None else confirmation,
    }


async def count_rows(session_factory, model) -> int:
    async with session_factory() as session:
        return (await session.execute(select(func.count(model.id)))).scalar()


class TestRegister:
    async def test_requires_verification_by_default(self, client, notifier, session_factory):
        resp = await client.post(REGISTER_URL, json=registration())

        assert resp.status_code == 201, resp.text
        body = resp.json()
        assert body["status"] == "success"
        assert body["data"]["verification_required"] is True
        assert body["data"]["user"]["email_verified_at"] is None
        assert "password_hash" not in body["data"]["user"]
        assert "two_factor_secret" not in body["data"]["user"]
        assert notifier.last("verify_email")["email"] == "new@example.com"
        assert await count_rows(session_factory, AccessToken) == 0

    async def test_without_verification_issues_token(self, client, update_settings, notifier):
        await update_settings(email_verification=False)

        resp = await client.post(REGISTER_URL, json=registration())

        assert resp.status_code == 201, resp.text
        data = resp.json()["data"]
        assert data["token"]
        assert data["token_type"] == "Bearer"
        assert data["user"]["email_verified_at"] is not None
        assert notifier.sent == []

        client.cookies.clear()
        me = await client.get("/api/v1/user", headers={"Authorization": f"Bearer {data['token']}"})
        assert me.status_code == 200
        assert me.json()["data"]["email"] == "new@example.com"

    async def test_disabled_registration_creates_nothing(self, client, update_settings, session_factory):
        await update_settings(registration_enabled=False)

        # Invalid password too: the disabled check comes before validation
        resp = await client.post(REGISTER_URL, json=registration(password="x"))

        assert resp.status_code == 403
        assert resp.json() == {
            "status": "error",
            "message": "User registration is currently disabled.",
        }
        assert await count_rows(session_factory, User) == 0

    async def test_disabled_registration_wins_over_malformed_body(self, client, update_settings, session_factory):
        await update_settings(registration_enabled=False)

        resp = await client.post(REGISTER_URL, json={"name": "x", "email": "not-an-email"})

        assert resp.status_code == 403
        assert resp.json()["message"] == "User registration is currently disabled."
        assert await count_rows(session_factory, User) == 0

    async def test_duplicate_email(self, client, create_user, session_factory):
        await create_user(email="taken@example.com")

        resp = await client.post(REGISTER_URL, json=registration(email="Taken@Example.com"))

        assert resp.status_code == 422
        assert resp.json()["errors"] == [
            {"field": "email", "message": "The email has already been taken."}
        ]
        assert await count_rows(session_factory, User) == 1

    async def test_password_policy_errors_per_rule(self, client, update_settings):
        await update_settings(require_symbols=True)

        resp = await client.post(REGISTER_URL, json=registration(password="Abcdefg1"))

        assert resp.status_code == 422
        assert resp.json()["errors"] == [
            {"field": "password", "message": "The password must contain at least one symbol."}
        ]

        resp = await client.post(REGISTER_URL, json=registration(password="Abcdefg1!"))
        assert resp.status_code == 201, resp.text

    async def test_confirmation_mismatch(self, client):
        resp = await client.post(REGISTER_URL, json=registration(confirmation="Password2"))

        assert resp.status_code == 422
        assert resp.json()["errors"][0]["field"] == "password"

    async def test_malformed_body_uses_error_envelope(self, client):
        resp = await client.post(REGISTER_URL, json={"name": "x", "email": "not-an-email"})

        assert resp.status_code == 422
        body = resp.json()
        assert body["status"] == "error"
        assert body["message"] == "Validation failed"
        assert any(error["field"] == "email" for error in body["errors"])


class TestLogin:
    async def test_success(self, client, create_user):
        await create_user(email="jane@example.com", name="Jane")

        resp = await client.post(LOGIN_URL, json={"email": "jane@example.com", "password": DEFAULT_PASSWORD})

        assert resp.status_code == 200
        body = resp.json()
        assert body["message"] == "Welcome back, Jane!"
        assert body["data"]["expires_in"] == 120 * 60
        assert body["data"]["user"]["profile_image_url"].endswith("/images/default-avatar.svg")
        assert "access_token" in resp.cookies

    async def test_wrong_password_and_unknown_email_look_the_same(self, client, create_user):
        await create_user(email="jane@example.com")

        wrong = await client.post(LOGIN_URL, json={"email": "jane@example.com", "password": "Wrong1234"})
        unknown = await client.post(LOGIN_URL, json={"email": "nobody@example.com", "password": "Wrong1234"})

        assert wrong.status_code == unknown.status_code == 401
        assert wrong.json() == unknown.json() == {"status": "error", "message": "Invalid credentials"}

    async def test_unverified_email_refused(self, client, create_user):
        await create_user(email="jane@example.com", verified=False)

        resp = await client.post(LOGIN_URL, json={"email": "jane@example.com", "password": DEFAULT_PASSWORD})

        assert resp.status_code == 403
        assert resp.json()["message"] == "Please verify your email address before logging in."

    async def test_unverified_allowed_when_verification_off(self, client, create_user, update_settings):
        await create_user(email="jane@example.com", verified=False)
        await update_settings(email_verification=False)

        resp = await client.post(LOGIN_URL, json={"email": "jane@example.com", "password": DEFAULT_PASSWORD})

        assert resp.status_code == 200

    async def test_session_timeout_setting_controls_lifetime(self, client, create_user, update_settings):
        await create_user(email="jane@example.com")
        await update_settings(session_timeout=15)

        resp = await client.post(LOGIN_URL, json={"email": "jane@example.com", "password": DEFAULT_PASSWORD})

        assert resp.json()["data"]["expires_in"] == 15 * 60


class TestSessions:
    async def test_requires_token(self, client):
        resp = await client.get("/api/v1/user")
        assert resp.status_code == 401
        assert resp.json()["status"] == "error"

    async def test_logout_revokes_only_current_token(self, client, create_user, login):
        await create_user(email="jane@example.com")
        first = await login("jane@example.com")
        second = await login("jane@example.com")

        resp = await client.post("/api/v1/auth/logout", headers=first)
        assert resp.status_code == 200

        assert (await client.get("/api/v1/user", headers=first)).status_code == 401
        assert (await client.get("/api/v1/user", headers=second)).status_code == 200

    async def test_refresh_keeps_a_single_token(self, client, create_user, login, session_factory):
        await create_user(email="jane@example.com")
        first = await login("jane@example.com")
        second = await login("jane@example.com")

        resp = await client.post("/api/v1/auth/refresh", headers=first)
        assert resp.status_code == 200
        client.cookies.clear()
        fresh = {"Authorization": f"Bearer {resp.json()['data']['token']}"}

        assert (await client.get("/api/v1/user", headers=first)).status_code == 401
        assert (await client.get("/api/v1/user", headers=second)).status_code == 401
        assert (await client.get("/api/v1/user", headers=fresh)).status_code == 200
        assert await count_rows(session_factory, AccessToken) == 1

    async def test_cookie_token_is_accepted(self, client, create_user):
        await create_user(email="jane@example.com")
        await client.post(LOGIN_URL, json={"email": "jane@example.com", "password": DEFAULT_PASSWORD})

        resp = await client.get("/api/v1/user")

        assert resp.status_code == 200
        assert resp.json()["data"]["email"] == "jane@example.com"

    async def test_activity_feed_records_login(self, client, create_user, login):
        await create_user(email="jane@example.com")
        headers = await login("jane@example.com")

        resp = await client.get("/api/v1/user/activity", params={"limit": 500}, headers=headers)

        assert resp.status_code == 200
        actions = [item["action"] for item in resp.json()["data"]]
        assert actions[0] == "login"
        assert "register" not in actions  # created directly, not via the endpoint
