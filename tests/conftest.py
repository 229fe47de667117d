from typing import AsyncGenerator, Dict, List, Optional
from uuid import UUID

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from school_admin.auth.security import create_access_token
from school_admin.core.models import ClassCourseAssignment, Course, SchoolClass, Student, User
from school_admin.db.session import Base, get_db
from school_admin.main import app


TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture()
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Fresh in-memory database per test; overrides the FastAPI session dependency."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        future=True,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:

        async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
            yield session

        app.dependency_overrides[get_db] = override_get_db
        yield session

    app.dependency_overrides.pop(get_db, None)
    await engine.dispose()


@pytest.fixture()
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to the FastAPI app."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture()
def make_teacher(db_session: AsyncSession):
    counter = {"n": 0}

    async def _make(first_name: str = "Ada", last_name: str = "Lovelace", role: str = "TEACHER") -> User:
        counter["n"] += 1
        user = User(
            first_name=first_name,
            last_name=last_name,
            email=f"{first_name.lower()}.{counter['n']}@greenfield-school.org",
            role=role,
            is_active=True,
        )
        db_session.add(user)
        await db_session.commit()
        await db_session.refresh(user)
        return user

    return _make


@pytest.fixture()
def make_class(db_session: AsyncSession):
    counter = {"n": 0}

    async def _make(name: Optional[str] = None, year_level: int = 1) -> SchoolClass:
        counter["n"] += 1
        obj = SchoolClass(name=name or f"Year {year_level} {chr(64 + counter['n'])}", year_level=year_level)
        db_session.add(obj)
        await db_session.commit()
        await db_session.refresh(obj)
        return obj

    return _make


@pytest.fixture()
def make_course(db_session: AsyncSession):
    async def _make(name: str = "Mathematics", year_level: int = 1) -> Course:
        obj = Course(name=name, year_level=year_level)
        db_session.add(obj)
        await db_session.commit()
        await db_session.refresh(obj)
        return obj

    return _make


@pytest.fixture()
def make_students(db_session: AsyncSession):
    async def _make(class_id: UUID, count: int, is_active: bool = True) -> List[Student]:
        students = [
            Student(first_name=f"Student{i}", last_name="Test", class_id=class_id, is_active=is_active)
            for i in range(count)
        ]
        db_session.add_all(students)
        await db_session.commit()
        for s in students:
            await db_session.refresh(s)
        return students

    return _make


@pytest.fixture()
def make_assignment(db_session: AsyncSession):
    async def _make(class_id: UUID, course_id: UUID, teacher_id: Optional[UUID] = None) -> ClassCourseAssignment:
        obj = ClassCourseAssignment(
            class_id=class_id,
            course_id=course_id,
            teacher_id=teacher_id,
            academic_year=2025,
            is_active=True,
        )
        db_session.add(obj)
        await db_session.commit()
        await db_session.refresh(obj)
        return obj

    return _make


@pytest.fixture()
async def admin(make_teacher) -> User:
    return await make_teacher("Grace", "Hopper", role="ADMIN")


@pytest.fixture()
def auth_headers(admin: User) -> Dict[str, str]:
    token = create_access_token(subject={"sub": str(admin.id), "role": admin.role})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def headers_for():
    """Build bearer headers for an arbitrary user."""

    def _headers(user: User) -> Dict[str, str]:
        token = create_access_token(subject={"sub": str(user.id), "role": user.role})
        return {"Authorization": f"Bearer {token}"}

    return _headers
