"""Pytest fixtures for testing."""

import os
from collections.abc import AsyncGenerator
from datetime import date

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./siteops_test.db")
os.environ.setdefault("JWT_SECRET", "test-secret-key-for-siteops-tests")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from src.core.config import get_settings
from src.core.database import get_db
from src.core.security import create_access_token
from src.main import app
from src.models import Attendance, Issue, Project, Task, User
from src.models.base import Base
from src.models.enums import UserRole


@pytest.fixture()
def database_url(tmp_path) -> str:
    """Fresh SQLite file per test unless TEST_DATABASE_URL points elsewhere."""
    return os.environ.get("TEST_DATABASE_URL") or f"sqlite+aiosqlite:///{tmp_path / 'test.db'}"


@pytest_asyncio.fixture(scope="function")
async def db(database_url: str) -> AsyncGenerator[AsyncSession, None]:
    """Create test database session.

    Creates all tables before each test and drops them after.
    """
    engine = create_async_engine(database_url, echo=False, poolclass=NullPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    async with session_factory() as session:
        try:
            yield session
        finally:
            await session.rollback()
            await session.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def client(db: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create test client with database dependency override.

    Args:
        db: Test database session

    Yields:
        AsyncClient configured for testing
    """

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture()
def settings(monkeypatch):
    """Cached settings instance; attribute changes are undone after the test."""
    current = get_settings()

    class _Patcher:
        def set(self, name: str, value) -> None:
            monkeypatch.setattr(current, name, value)

    return _Patcher()


def auth_headers(user: User) -> dict[str, str]:
    token = create_access_token({"sub": str(user.id)})
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def test_admin_user(db: AsyncSession) -> User:
    user = User(name="Ada Admin", email="admin@siteops.test", role=UserRole.ADMIN, is_active=True)
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


@pytest_asyncio.fixture
async def test_employee_user(db: AsyncSession) -> User:
    user = User(name="Eli Employee", email="employee@siteops.test", role=UserRole.EMPLOYEE, is_active=True)
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


@pytest_asyncio.fixture
async def test_other_employee(db: AsyncSession) -> User:
    user = User(name="Olu Other", email="other@siteops.test", role=UserRole.EMPLOYEE, is_active=True)
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


@pytest_asyncio.fixture
async def test_project(db: AsyncSession) -> Project:
    project = Project(name="Riverside Block C", location="Plot 14, Riverside")
    db.add(project)
    await db.commit()
    await db.refresh(project)
    return project


@pytest_asyncio.fixture
async def test_task(db: AsyncSession, test_project: Project) -> Task:
    task = Task(project_id=test_project.id, title="Pour slab level 2", description="Formwork check first")
    db.add(task)
    await db.commit()
    await db.refresh(task)
    return task


@pytest_asyncio.fixture
async def test_issue(db: AsyncSession, test_project: Project) -> Issue:
    issue = Issue(project_id=test_project.id, title="Crack in east wall", description="Hairline, 40cm")
    db.add(issue)
    await db.commit()
    await db.refresh(issue)
    return issue


@pytest_asyncio.fixture
async def test_attendance(db: AsyncSession, test_project: Project) -> Attendance:
    attendance = Attendance(
        project_id=test_project.id,
        employee_name="Eli Employee",
        date=date(2026, 10, 19),
        time_in="08:00",
    )
    db.add(attendance)
    await db.commit()
    await db.refresh(attendance)
    return attendance
