import os
from typing import AsyncGenerator, Awaitable, Callable
from uuid import UUID

# Settings are read at import time; point them at a throwaway database first
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test_reports.db")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from app.core.security import create_access_token
from app.database import Base, get_db
from app.main import app
from app.models.resource import Resource
from app.models.user import User
from app.workers.runner import worker

TEST_DATABASE_URL = os.environ.get("TEST_DATABASE_URL", os.environ["DATABASE_URL"])

test_engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=NullPool)
test_async_session_maker = async_sessionmaker(
    test_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with test_async_session_maker() as session:
        yield session

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def clear_worker_queue():
    """Jobs enqueued by one test must not leak into the next."""
    yield
    while not worker.queue.empty():
        worker.queue.get_nowait()
        worker.queue.task_done()


@pytest.fixture
def session_factory(db_session: AsyncSession) -> async_sessionmaker:
    """Session factory bound to the test database, for worker-owned sessions."""
    return test_async_session_maker


@pytest_asyncio.fixture
async def run_jobs(monkeypatch) -> Callable[[], Awaitable[int]]:
    """Run queued background jobs against the test database."""
    monkeypatch.setattr(worker, "session_factory", test_async_session_maker)

    async def _run() -> int:
        return await worker.drain()

    return _run


@pytest_asyncio.fixture
async def make_user(db_session: AsyncSession) -> Callable[..., Awaitable[User]]:
    counter = {"n": 0}

    async def _make(
        name: str | None = None,
        email: str | None = None,
        is_admin: bool = False,
        status: str = "active",
    ) -> User:
        counter["n"] += 1
        n = counter["n"]
        user = User(
            email=email or f"user{n}@example.com",
            name=name or f"User {n}",
            is_admin=is_admin,
            status=status,
        )
        db_session.add(user)
        await db_session.commit()
        await db_session.refresh(user)
        return user

    return _make


@pytest_asyncio.fixture
async def make_resource(db_session: AsyncSession) -> Callable[..., Awaitable[Resource]]:
    async def _make(
        author_id: UUID,
        title: str = "Linear Algebra Lecture Notes",
        description: str | None = "Week 1 to 12, with solved exercises",
        format: str = "pdf",
    ) -> Resource:
        resource = Resource(
            title=title,
            description=description,
            format=format,
            author_id=author_id,
        )
        db_session.add(resource)
        await db_session.commit()
        await db_session.refresh(resource)
        return resource

    return _make


def _bearer(user_id: UUID) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(str(user_id))}"}


@pytest.fixture
def auth_headers() -> Callable[[UUID], dict[str, str]]:
    """Build an Authorization header for a user id."""
    return _bearer


@pytest_asyncio.fixture
async def reporter(make_user) -> User:
    return await make_user(name="Alice Reporter", email="alice@example.com")


@pytest_asyncio.fixture
async def author(make_user) -> User:
    return await make_user(name="Bob Author", email="bob@example.com")


@pytest_asyncio.fixture
async def admin(make_user) -> User:
    return await make_user(name="Mona Moderator", email="mona@example.com", is_admin=True)


@pytest_asyncio.fixture
async def resource(make_resource, author: User) -> Resource:
    return await make_resource(author.id)
