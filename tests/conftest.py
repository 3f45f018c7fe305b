"""
Shared test fixtures and configuration for entire test suite.

Provides: In-memory SQLite database, session factory, project/file seeding helpers
Dependencies: pytest, pytest-asyncio, sqlalchemy, aiosqlite
System role: Test infrastructure and fixture management
"""

from pathlib import Path

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from takeoff.boundary.db.base import Base
from takeoff.boundary.db.models import (
    FileStatus,
    FileType,
    ProjectFileModel,
    ProjectModel,
)


@pytest.fixture
async def session_factory():
    """
    Create in-memory SQLite database and a session factory bound to it.

    StaticPool keeps the single in-memory connection alive across sessions
    so every session sees the same database.

    Yields:
        async_sessionmaker: Factory with expire_on_commit=False, as in production
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(
        engine,
        class_=AsyncSession,
        autoflush=False,
        expire_on_commit=False,
    )

    yield factory

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_async_db(session_factory):
    """
    Provide one session on the test database.

    Yields:
        AsyncSession: Test database session with cleanup
    """
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def create_project(session_factory):
    """
    Factory fixture inserting a committed project.

    Returns:
        async callable(name="Tower A") -> ProjectModel
    """

    async def _create(name: str = "Tower A") -> ProjectModel:
        async with session_factory() as session:
            project = ProjectModel(name=name)
            session.add(project)
            await session.commit()
            return project

    return _create


@pytest.fixture
def create_file(session_factory, tmp_path: Path):
    """
    Factory fixture inserting a committed project file.

    The stored path points into tmp_path; document adapters in tests never
    read it, so no file is written unless content is given.

    Returns:
        async callable(project, file_type, name=None, status=PENDING, content=None, sheet_status=None)
    """

    async def _create(
        project: ProjectModel,
        file_type: FileType,
        name: str | None = None,
        status: FileStatus = FileStatus.PENDING,
        content: bytes | None = None,
        sheet_status: list[dict] | None = None,
    ) -> ProjectFileModel:
        name = name or f"{file_type.value}.pdf"
        stored_path = tmp_path / name
        if content is not None:
            stored_path.write_bytes(content)

        async with session_factory() as session:
            file = ProjectFileModel(
                project_id=project.id,
                original_name=name,
                stored_path=str(stored_path),
                file_type=file_type,
                status=status,
                sheet_status=sheet_status,
            )
            session.add(file)
            await session.commit()
            return file

    return _create
