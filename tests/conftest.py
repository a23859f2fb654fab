"""Shared test fixtures.

Every test gets a fresh in-memory SQLite database seeded with the default
settings catalog. Routes run against it through ``get_db`` overrides, and
the notifier and storage collaborators are replaced with recording fakes.

Environment variables must be set before any ``app`` import because the
settings object is built at import time.
"""

import os

os.environ.setdefault("APP_SECRET_KEY", "test-secret-key-with-enough-length-for-hs256")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("APP_ENV", "development")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from app.api.deps import get_notifier_dep, get_storage_dep
from app.database import create_engine, create_session_factory, get_db
from app.main import app
from app.models import Base, Role, User
from app.models.base import utcnow
from app.services.account_service import get_account_service
from app.services.notification_service import Notifier
from app.schemas.setting import SettingEntry
from app.services.setting_service import get_setting_service

TEST_DB_URL = "sqlite+aiosqlite:///:memory:"
DEFAULT_PASSWORD = "Password1"


class FakeNotifier(Notifier):
    """Records notifications instead of sending them."""

    def __init__(self):
        self.sent: list[dict] = []

    async def notify(self, db, user, template, context=None):
        self.sent.append({"email": user.email, "template": template, "context": context or {}})

    def last(self, template: str) -> dict | None:
        for item in reversed(self.sent):
            if item["template"] == template:
                return item
        return None


class FakeStorage:
    """Records deleted object paths."""

    def __init__(self):
        self.deleted: list[str] = []

    async def delete(self, path):
        if not path:
            return False
        self.deleted.append(path)
        return True


@pytest_asyncio.fixture
async def session_factory():
    """Fresh schema and default settings for each test."""
    engine = create_engine(TEST_DB_URL)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = create_session_factory(engine)
    async with factory() as session:
        await get_setting_service().reset_to_defaults(session)

    yield factory
    await engine.dispose()


@pytest_asyncio.fixture
async def db(session_factory):
    """A session for calling services directly."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def storage():
    return FakeStorage()


@pytest_asyncio.fixture
async def client(session_factory, notifier, storage):
    """HTTPX client bound to the app with database and collaborators overridden."""

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notifier_dep] = lambda: notifier
    app.dependency_overrides[get_storage_dep] = lambda: storage

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as async_client:
        yield async_client

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def update_settings(session_factory):
    """Change settings directly, e.g. ``await update_settings(registration_enabled=False)``."""

    async def _update(**values):
        async with session_factory() as session:
            result = await get_setting_service().set_many(
                session, [SettingEntry(key=key, value=value) for key, value in values.items()]
            )
            assert not result.errors, result.errors

    return _update


@pytest_asyncio.fixture
async def create_user(session_factory):
    """Factory creating accounts directly through the account registry."""

    async def _create_user(
        email: str = "user@example.com",
        password: str = DEFAULT_PASSWORD,
        name: str = "Test User",
        role: Role = Role.USER,
        verified: bool = True,
        **fields,
    ) -> User:
        async with session_factory() as session:
            user = await get_account_service().register(
                session, name=name, email=email, password=password, role=role
            )
            if verified:
                user.email_verified_at = utcnow()
            for key, value in fields.items():
                setattr(user, key, value)
            await session.commit()
            return user

    return _create_user


@pytest_asyncio.fixture
async def login(client):
    """Log in through the API and return Authorization headers."""

    async def _login(email: str, password: str = DEFAULT_PASSWORD) -> dict[str, str]:
        resp = await client.post("/api/v1/auth/login", json={"email": email, "password": password})
        assert resp.status_code == 200, resp.text
        client.cookies.clear()
        token = resp.json()["data"]["token"]
        return {"Authorization": f"Bearer {token}"}

    return _login


@pytest_asyncio.fixture
async def admin_headers(create_user, login):
    admin = await create_user(email="admin@example.com", name="Admin", role=Role.SUPER_ADMIN)
    headers = await login(admin.email)
    return admin, headers
