"""
Pytest fixtures for LearnPulse tests.
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from learnpulse.engines.gamification import seed_badges
from learnpulse.kernel.content import CourseInfo, InMemoryContentDirectory, MaterialInfo
from learnpulse.kernel.identity import JWTManager, LearnerRef
from learnpulse.kernel.models.base import Base


class FrozenClock:
    """Settable clock for day-boundary tests."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest_asyncio.fixture(scope="function")
async def db_engine(tmp_path):
    """File-backed SQLite engine so concurrent sessions share one database."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'learnpulse_test.db'}",
        echo=False,
        connect_args={"check_same_thread": False},
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.execute("PRAGMA busy_timeout=5000")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_maker(db_engine) -> async_sessionmaker:
    return async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture(scope="function")
async def db_session(session_maker) -> AsyncGenerator[AsyncSession, None]:
    """Session with the default badge catalog already seeded."""
    async with session_maker() as session:
        await seed_badges(session)
        await session.commit()
        yield session
        await session.rollback()


@pytest.fixture
def learner() -> LearnerRef:
    return LearnerRef(id=uuid.uuid4())


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc))


@pytest.fixture
def content_directory() -> InMemoryContentDirectory:
    """Two courses: a short mixed course and a quiz-only course."""
    directory = InMemoryContentDirectory(
        courses=[
            CourseInfo(course_id="course-intro", title="Intro to Algebra"),
            CourseInfo(course_id="course-quizzes", title="Algebra Drills"),
        ],
    )
    directory.add_material(MaterialInfo(material_id="m-video", course_id="course-intro", category="Video"))
    directory.add_material(MaterialInfo(material_id="m-reading", course_id="course-intro", category="Reading", format="Verbal"))
    for i in range(1, 6):
        directory.add_material(MaterialInfo(material_id=f"m-quiz-{i}", course_id="course-quizzes", category="Quiz"))
    return directory


@pytest.fixture
def jwt_manager() -> JWTManager:
    """Create a JWT manager for tests."""
    return JWTManager(
        secret_key="test-secret-key-for-testing-only",
        algorithm="HS256",
        access_token_expire_minutes=30,
    )
