"""Integration tests for the settings endpoints."""

from app.services import setting_service
from app.utils.default_settings import get_default_settings

BASE = "/api/v1/admin/settings"

PUBLIC_KEYS = {"app_name", "app_url", "maintenance_mode", "registration_enabled"}


async def test_admin_routes_require_super_admin(client, create_user, login):
    await create_user(email="jane@example.com")
    headers = await login("jane@example.com")

    assert (await client.get(BASE, headers=headers)).status_code == 403
    assert (await client.post(f"{BASE}/reset", headers=headers)).status_code == 403


async def test_all_settings_grouped(client, admin_headers):
    _, headers = admin_headers

    resp = await client.get(BASE, headers=headers)

    assert resp.status_code == 200
    data = resp.json()["data"]
    assert set(data) == {"general", "security", "email", "notifications", "advanced"}
    registration = next(item for item in data["general"] if item["key"] == "registration_enabled")
    assert registration["value"] is True
    assert registration["type"] == "boolean"


async def test_settings_by_group(client, admin_headers):
    _, headers = admin_headers

    resp = await client.get(f"{BASE}/security", headers=headers)

    assert resp.status_code == 200
    items = resp.json()["data"]
    keys = [item["key"] for item in items]
    assert keys == sorted(keys)
    assert len(items) == 9
    timeout = next(item for item in items if item["key"] == "session_timeout")
    assert timeout["value"] == 120


async def test_unknown_group_is_empty(client, admin_headers):
    _, headers = admin_headers

    resp = await client.get(f"{BASE}/nope", headers=headers)

    assert resp.status_code == 200
    assert resp.json()["status"] == "success"
    assert resp.json()["data"] == []


async def test_update_settings(client, admin_headers):
    _, headers = admin_headers

    resp = await client.put(
        BASE,
        json={"settings": [{"key": "app_name", "value": "Acme"}, {"key": "min_password_length", "value": "12"}]},
        headers=headers,
    )

    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["status"] == "success"
    assert [item["key"] for item in body["data"]] == ["app_name", "min_password_length"]
    assert body["data"][1]["value"] == 12

    public = await client.get("/api/v1/settings/public")
    assert public.json()["data"]["app_name"] == "Acme"


async def test_update_settings_partial_failure(client, admin_headers):
    _, headers = admin_headers

    resp = await client.put(
        BASE,
        json={"settings": [{"key": "app_name", "value": "Acme"}, {"key": "no_such_key", "value": "x"}]},
        headers=headers,
    )

    assert resp.status_code == 422
    body = resp.json()
    assert body["status"] == "error"
    assert [item["key"] for item in body["data"]] == ["app_name"]
    assert body["errors"] == ["Setting 'no_such_key' not found"]

    general = await client.get(f"{BASE}/general", headers=headers)
    app_name = next(item for item in general.json()["data"] if item["key"] == "app_name")
    assert app_name["value"] == "Acme"


async def test_reset_settings(client, admin_headers):
    _, headers = admin_headers
    await client.put(BASE, json={"settings": [{"key": "app_name", "value": "Acme"}]}, headers=headers)

    resp = await client.post(f"{BASE}/reset", headers=headers)

    assert resp.status_code == 200
    assert resp.json()["data"] == {"count": 35}
    public = await client.get("/api/v1/settings/public")
    assert public.json()["data"]["app_name"] == "Boilerplate"


async def test_public_and_theme_settings_are_anonymous(client):
    public = await client.get("/api/v1/settings/public")
    theme = await client.get("/api/v1/settings/theme")

    assert public.status_code == theme.status_code == 200
    assert set(public.json()["data"]) == PUBLIC_KEYS
    assert public.json()["data"] == theme.json()["data"]
    assert public.json()["data"]["registration_enabled"] is True
    assert "smtp_password" not in public.json()["data"]


async def test_failed_reset_returns_500_and_keeps_settings(client, admin_headers, monkeypatch):
    _, headers = admin_headers
    await client.put(BASE, json={"settings": [{"key": "app_name", "value": "Acme"}]}, headers=headers)
    defaults = get_default_settings()
    monkeypatch.setattr(setting_service, "get_default_settings", lambda: [*defaults, dict(defaults[0])])

    resp = await client.post(f"{BASE}/reset", headers=headers)

    assert resp.status_code == 500
    assert resp.json()["status"] == "error"
    assert resp.json()["message"].startswith("Failed to reset settings")
    public = await client.get("/api/v1/settings/public")
    assert public.json()["data"]["app_name"] == "Acme"
