"""Integration tests for two-factor setup."""

import time

import pyotp

from tests.conftest import DEFAULT_PASSWORD

BASE = "/api/v1/2fa"


async def status(client, headers) -> dict:
    resp = await client.get(f"{BASE}/status", headers=headers)
    assert resp.status_code == 200
    return resp.json()["data"]


async def test_enable_and_confirm(client, create_user, login):
    await create_user(email="jane@example.com")
    headers = await login("jane@example.com")

    assert await status(client, headers) == {"enabled": False, "confirmed": False, "pending_confirmation": False}

    resp = await client.post(f"{BASE}/enable", headers=headers)
    assert resp.status_code == 200
    setup = resp.json()["data"]
    assert setup["provisioning_uri"].startswith("otpauth://totp/")
    assert "jane" in setup["provisioning_uri"]

    # Started but not confirmed does not count as enabled
    assert await status(client, headers) == {"enabled": False, "confirmed": False, "pending_confirmation": True}

    qr = await client.get(f"{BASE}/qr-code", headers=headers)
    assert qr.json()["data"]["secret"] == setup["secret"]

    code = pyotp.TOTP(setup["secret"]).now()
    resp = await client.post(f"{BASE}/confirm", json={"code": code}, headers=headers)
    assert resp.status_code == 200
    assert resp.json()["data"] == {"enabled": True, "confirmed": True, "pending_confirmation": False}

    profile = await client.get("/api/v1/profile", headers=headers)
    assert "two_factor_secret" not in profile.json()["data"]


async def test_wrong_code_is_rejected(client, create_user, login):
    await create_user(email="jane@example.com")
    headers = await login("jane@example.com")
    setup = (await client.post(f"{BASE}/enable", headers=headers)).json()["data"]

    totp = pyotp.TOTP(setup["secret"])
    now = time.time()
    accepted = {totp.at(now + offset * totp.interval) for offset in (-1, 0, 1)}
    wrong = next(code for code in ("000000", "111111", "222222", "333333") if code not in accepted)
    resp = await client.post(f"{BASE}/confirm", json={"code": wrong}, headers=headers)

    assert resp.status_code == 422
    assert (await status(client, headers))["enabled"] is False


async def test_confirm_without_setup(client, create_user, login):
    await create_user(email="jane@example.com")
    headers = await login("jane@example.com")

    resp = await client.post(f"{BASE}/confirm", json={"code": "123456"}, headers=headers)

    assert resp.status_code == 422
    assert (await client.get(f"{BASE}/qr-code", headers=headers)).status_code == 422


async def test_cancel_pending_setup(client, create_user, login):
    await create_user(email="jane@example.com")
    headers = await login("jane@example.com")
    await client.post(f"{BASE}/enable", headers=headers)

    resp = await client.delete(f"{BASE}/enable", headers=headers)

    assert resp.status_code == 200
    assert resp.json()["data"]["pending_confirmation"] is False


async def test_disable_requires_password(client, create_user, login):
    await create_user(email="jane@example.com")
    headers = await login("jane@example.com")
    setup = (await client.post(f"{BASE}/enable", headers=headers)).json()["data"]
    await client.post(f"{BASE}/confirm", json={"code": pyotp.TOTP(setup["secret"]).now()}, headers=headers)

    wrong = await client.request("DELETE", f"{BASE}/disable", json={"password": "Wrong1234"}, headers=headers)
    assert wrong.status_code == 400
    assert (await status(client, headers))["enabled"] is True

    resp = await client.request("DELETE", f"{BASE}/disable", json={"password": DEFAULT_PASSWORD}, headers=headers)
    assert resp.status_code == 200
    assert resp.json()["data"] == {"enabled": False, "confirmed": False, "pending_confirmation": False}
