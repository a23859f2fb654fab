"""Tests for broadcast channel authorization."""

import uuid

from app.models import User
from app.utils.channels import authorize_channel

AUTH_URL = "/api/v1/broadcasting/auth"


def make_user() -> User:
    return User(id=uuid.uuid4(), name="Jane", email="jane@example.com", password_hash="x")


def test_owner_channel_only_for_owner():
    user = make_user()
    other = make_user()

    assert authorize_channel(user, f"private-user.{user.id}")
    assert authorize_channel(user, f"App.Models.User.{user.id}")
    assert authorize_channel(user, f"presence-user.{str(user.id).upper()}")
    assert not authorize_channel(user, f"private-user.{other.id}")


def test_notifications_channel_open_to_everyone():
    assert authorize_channel(make_user(), "private-notifications")
    assert authorize_channel(make_user(), "notifications")


def test_unknown_channel_denied():
    assert not authorize_channel(make_user(), "private-admin")
    assert not authorize_channel(make_user(), "user.")


async def test_channel_auth_endpoint(client, create_user, login):
    jane = await create_user(email="jane@example.com")
    john = await create_user(email="john@example.com")
    headers = await login("jane@example.com")

    own = await client.post(AUTH_URL, json={"channel_name": f"private-user.{jane.id}"}, headers=headers)
    other = await client.post(AUTH_URL, json={"channel_name": f"private-user.{john.id}"}, headers=headers)
    shared = await client.post(AUTH_URL, json={"channel_name": "private-notifications"}, headers=headers)

    assert own.status_code == 200
    assert own.json()["data"]["authorized"] is True
    assert other.status_code == 403
    assert shared.status_code == 200


async def test_channel_auth_requires_login(client):
    resp = await client.post(AUTH_URL, json={"channel_name": "private-notifications"})
    assert resp.status_code == 401
