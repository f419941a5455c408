import asyncio
import os
import tempfile

# Settings are read at import time; required values must exist first
_DB_DIR = tempfile.mkdtemp(prefix="marketplace-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_DB_DIR}/test.db"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["ADMIN_COLD_WALLET_EVM"] = "0x" + "c" * 40
os.environ["ADMIN_COLD_WALLET_TRON"] = "TLa2f6VPqDgRE67v1736s7bJ8Ray5wYjU7"
os.environ["PAYOUT_LOCK_BACKEND"] = "memory"

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from app.api.deps import get_chain_adapters
from app.core.security import get_password_hash
from app.db.database import AsyncSessionLocal, Base, engine
from app.main import app
from app.models import AdminUser
from tests.fakes import FakeChain

ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "admin-password"

_password_hash = get_password_hash(ADMIN_PASSWORD)


async def reset_database():
    from app.models import wallet, payout, trader, ad, ticket, platform_settings, admin, counter  # noqa: F401
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    async with AsyncSessionLocal() as db:
        db.add(AdminUser(username=ADMIN_USERNAME, password_hash=_password_hash))
        await db.commit()


@pytest.fixture
def chain():
    return FakeChain()


@pytest_asyncio.fixture
async def db():
    await reset_database()
    async with AsyncSessionLocal() as session:
        yield session


@pytest.fixture
def client(chain):
    asyncio.run(reset_database())
    app.dependency_overrides[get_chain_adapters] = lambda: chain.adapters
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers(client):
    response = client.post(
        "/api/admin/login", json={"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD}
    )
    assert response.status_code == 200
    token = response.json()["data"]["access_token"]
    return {"Authorization": f"Bearer {token}"}
