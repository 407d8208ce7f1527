import itertools
import os

# Must be set before any app module reads its configuration
os.environ["SECRET_KEY"] = "test-secret-key-0123456789abcdef0123456789"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.database import Base, enable_sqlite_foreign_keys, get_async_session
from app.main import app
from app.models.project_model import Project
from app.models.target_enums import TargetCategory
from app.models.user_model import User, UserRole
from app.utils.password_utils import hash_password
from app.utils.token_utils import create_access_token

DEFAULT_PASSWORD = "secret123"


@pytest.fixture
async def engine(tmp_path):
    """A fresh SQLite database file per test."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    enable_sqlite_foreign_keys(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory):
    async def _override_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_async_session] = _override_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    counter = itertools.count(1)

    async def _make(role=UserRole.CITIZEN, password=DEFAULT_PASSWORD, is_active=True, cpf=None, email=None):
        n = next(counter)
        user = User(
            email=email or f"user{n}@example.com",
            name=f"User {n}",
            cpf=cpf or f"{n:011d}",
            password=hash_password(password),
            role=role,
            is_active=is_active,
        )
        db.add(user)
        await db.commit()
        await db.refresh(user)
        return user

    return _make


@pytest.fixture
def make_project(db):
    async def _make(author, title="New bike lane", category=TargetCategory.TRANSPORTATION):
        project = Project(
            title=title,
            description="Protected bike lane along the main avenue",
            category=category,
            neighborhood="Centro",
            author_id=author.id,
        )
        db.add(project)
        await db.commit()
        await db.refresh(project)
        return project

    return _make


@pytest.fixture
def auth_headers():
    def _headers(user):
        return {"Authorization": f"Bearer {create_access_token(user)}"}

    return _headers


@pytest.fixture
def reload(db):
    """Fetch a row again, bypassing whatever the session already holds."""
    async def _reload(model, pk):
        stmt = select(model).where(model.id == pk).execution_options(populate_existing=True)
        return (await db.execute(stmt)).scalar_one_or_none()

    return _reload
