"""Service test fixtures — async DB + FastAPI test client + seeded owners.

Invariants:
    - Every test gets a fresh in-memory SQLite database with foreign keys enforced
    - get_db is overridden with the real DatabaseSessionManager.session(), so
      error mapping (IntegrityError → 422) behaves as in production
    - db_manager patched so the health probe sees the test database

Design Decisions:
    - StaticPool: one shared connection, so every session sees the same :memory: DB
    - Owners are inserted directly through the ORM; the API never grants admin
"""

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.pool import StaticPool

import taskvault.infrastructure.database as db_module
from taskvault.db.base import Base
from taskvault.db.session import create_engine, create_session_factory
from taskvault.infrastructure.database import DatabaseSessionManager, get_db
from taskvault.infrastructure.passwords import hash_password
from taskvault.main import app
from taskvault.models import User


@pytest.fixture
async def test_engine():
    engine = create_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return create_session_factory(test_engine)


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
async def test_manager(test_engine, test_session_factory):
    manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    manager.engine = test_engine
    manager._session_factory = test_session_factory
    return manager


@pytest.fixture
async def client(test_manager):
    """FastAPI test client with DB dependency overridden."""
    async def override_get_db():
        async with test_manager.session() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    original_manager = db_module.db_manager
    db_module.db_manager = test_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager


async def _make_user(db, email: str, name: str, admin: bool = False) -> User:
    user = User(
        email=email, name=name,
        password_digest=hash_password("secret123"), admin=admin,
    )
    db.add(user)
    await db.commit()
    return user


@pytest.fixture
async def owner_a(test_db):
    return await _make_user(test_db, "alice@example.com", "Alice")


@pytest.fixture
async def owner_b(test_db):
    return await _make_user(test_db, "bob@example.com", "Bob")


@pytest.fixture
async def admin_user(test_db):
    return await _make_user(test_db, "root@example.com", "Root", admin=True)
