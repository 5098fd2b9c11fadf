"""
lecture_reporting/tests/conftest.py
Shared fixtures: an in-memory database per test, a seeded catalog and users
for every role, and an HTTP client bound to the same database.
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["SEED_DEMO_DATA"] = "false"

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from lecture_reporting.database import enable_sqlite_foreign_keys, get_db
from lecture_reporting.main import app
from lecture_reporting.orm import Base, Faculty, Module, Program, User, UserRole
from lecture_reporting.rbac import Identity, create_access_token, hash_password

TEST_DATABASE_URL = "sqlite+aiosqlite://"
TEST_PASSWORD = "secret123"


@pytest_asyncio.fixture
async def session_factory():
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


# ================= CATALOG =================

@pytest_asyncio.fixture
async def catalog(db_session: AsyncSession) -> dict:
    """Computer faculty with SE101 and BIT102, and a Database Systems module in SE101."""
    computer = Faculty(name="Computer")
    business = Faculty(name="Business")
    db_session.add_all([computer, business])
    await db_session.flush()

    se101 = Program(code="SE101", name="Software Engineering", faculty_id=computer.id)
    bit102 = Program(code="BIT102", name="BSc in IT", faculty_id=computer.id)
    db_session.add_all([se101, bit102])
    await db_session.flush()

    db_systems = Module(
        name="Database Systems",
        program_id=se101.id,
        faculty_id=computer.id,
        total_registered_students=40,
    )
    networking = Module(
        name="Networking",
        program_id=bit102.id,
        faculty_id=computer.id,
        total_registered_students=25,
    )
    db_session.add_all([db_systems, networking])
    await db_session.commit()

    return {
        "computer": computer,
        "business": business,
        "se101": se101,
        "bit102": bit102,
        "db_systems": db_systems,
        "networking": networking,
    }


# ================= USERS =================

async def make_user(
    db: AsyncSession,
    email: str,
    role: UserRole,
    program_id=None,
    faculty_id=None,
    name=None,
) -> User:
    user = User(
        name=name or email.split("@")[0].replace(".", " ").title(),
        email=email,
        password_hash=hash_password(TEST_PASSWORD),
        role=role,
        program_id=program_id,
        faculty_id=faculty_id,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


@pytest_asyncio.fixture
async def users(db_session: AsyncSession, catalog: dict) -> dict:
    computer_id = catalog["computer"].id
    return {
        "lecturer": await make_user(db_session, "lecturer@luct.com", UserRole.lecturer, faculty_id=computer_id),
        "other_lecturer": await make_user(db_session, "lecturer2@luct.com", UserRole.lecturer, faculty_id=computer_id),
        "program_leader": await make_user(db_session, "pl@luct.com", UserRole.program_leader, faculty_id=computer_id),
        "principal": await make_user(db_session, "prl@luct.com", UserRole.principal_lecturer, faculty_id=computer_id),
        "student": await make_user(
            db_session, "student@luct.com", UserRole.student,
            program_id=catalog["se101"].id, faculty_id=computer_id,
        ),
        "other_student": await make_user(
            db_session, "student2@luct.com", UserRole.student,
            program_id=catalog["bit102"].id, faculty_id=computer_id,
        ),
    }


def identity_of(user: User) -> Identity:
    return Identity(user_id=user.id, role=user.role)


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user.id, user.role)}"}


@pytest.fixture
def headers(users: dict) -> dict:
    """Bearer headers keyed like the users fixture."""
    return {key: auth_headers(user) for key, user in users.items()}


def report_payload(catalog: dict, **overrides) -> dict:
    payload = {
        "faculty_id": catalog["computer"].id,
        "module_id": catalog["db_systems"].id,
        "program_id": catalog["se101"].id,
        "week_of_reporting": "Week 6",
        "date_of_lecture": "2024-03-12",
        "actual_students_present": 30,
        "total_registered_students": 40,
        "venue": "Hall 3",
        "scheduled_time": "10:00",
        "topic_taught": "Normalization",
        "learning_outcomes": "Students can normalize to 3NF",
        "recommendations": "More practice exercises",
    }
    payload.update(overrides)
    return payload
