"""
lecture_reporting/database.py
Database configuration, session dependency and demo seeding.

The store handle is never used as an ambient global by services: routes get
an AsyncSession through `get_db` and pass it down explicitly.
"""
import logging
from typing import Optional

from sqlalchemy import event, select, func, text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

from lecture_reporting.config.settings import settings
from lecture_reporting.errors import ConflictError, ErrorCode
from lecture_reporting.orm import (
    Base,
    Faculty,
    Program,
    Module,
    User,
    UserRole,
)

logger = logging.getLogger(__name__)

DATABASE_URL = settings.DATABASE_URL

if not DATABASE_URL:
    raise ValueError("DATABASE_URL environment variable is not set")

# SQLite has different pool needs than PostgreSQL
if "sqlite" in DATABASE_URL.lower():
    engine = create_async_engine(
        DATABASE_URL,
        echo=False,
        future=True,
        connect_args={
            "timeout": 30.0,   # SQLite busy timeout in seconds
        }
    )
else:
    engine = create_async_engine(
        DATABASE_URL,
        echo=False,
        future=True,
        pool_pre_ping=True,
        pool_size=10,
        max_overflow=20,
        pool_timeout=30,
        pool_recycle=3600,
    )


def enable_sqlite_foreign_keys(async_engine) -> None:
    """SQLite leaves foreign key enforcement off unless each connection turns it on."""
    if async_engine.url.get_backend_name() != "sqlite":
        return

    @event.listens_for(async_engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


enable_sqlite_foreign_keys(engine)

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def get_db():
    """Dependency for getting async database session"""
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()


async def commit_or_conflict(db: AsyncSession, message: str, code: str = ErrorCode.DUPLICATE_ENTRY) -> None:
    """
    Commit the session, mapping a unique-constraint violation to Conflict.

    Services pre-check uniqueness for a friendlier message; this is the
    authority when two requests interleave between check and insert.
    """
    try:
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        logger.warning(f"Constraint violation on commit: {e.orig}")
        raise ConflictError(message, code=code)


async def init_db():
    """Create all tables that do not exist yet."""
    logger.info("Initializing database...")
    logger.info(f"Database dialect: {engine.url.get_backend_name()}")

    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("✓ Database initialization complete")
    except Exception as e:
        logger.error(f"Database initialization failed: {str(e)}")
        raise


async def close_db():
    """Close database connection"""
    await engine.dispose()
    logger.info("Database connection closed")


async def check_db_health(db: AsyncSession) -> bool:
    try:
        await db.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.error(f"Database health check failed: {str(e)}")
        return False


# ================= DEMO DATA =================

DEMO_FACULTIES = ["Business", "Computer", "Design", "Tourism"]

DEMO_PROGRAMS = [
    ("SE101", "Software Engineering", "Computer"),
    ("BIT102", "BSc in IT", "Computer"),
    ("IT103", "IT", "Computer"),
    ("GD201", "Graphics Design", "Design"),
    ("ARCH202", "Architecture", "Design"),
    ("IB301", "International Business", "Business"),
    ("BM302", "Business Management", "Business"),
    ("HM401", "Hotel Management", "Tourism"),
    ("TM402", "Tourism Management", "Tourism"),
]

DEMO_USERS = [
    ("John Lecturer", "lecturer@luct.com", UserRole.lecturer),
    ("Alice Program Leader", "programleader@luct.com", UserRole.program_leader),
    ("Bob Principal Lecturer", "principal@luct.com", UserRole.principal_lecturer),
    ("Student One", "student@luct.com", UserRole.student),
]

DEMO_MODULES = [
    ("Introduction to Programming", 45),
    ("Database Systems", 40),
    ("Web Development", 35),
    ("Software Engineering Principles", 30),
]

DEMO_PASSWORD = "password"


async def seed_demo_data(db: AsyncSession, password: Optional[str] = None) -> bool:
    """
    Seed faculties, programs, one user per role and a few SE101 modules.

    Skipped when any faculty already exists. Returns True if data was written.
    """
    from lecture_reporting.rbac import hash_password

    result = await db.execute(select(func.count()).select_from(Faculty))
    if result.scalar():
        logger.info("✓ Catalog already populated - skipping seed")
        return False

    logger.info("No catalog found - seeding demo data")

    try:
        faculties = {name: Faculty(name=name) for name in DEMO_FACULTIES}
        db.add_all(faculties.values())
        await db.flush()

        programs = {}
        for code, name, faculty_name in DEMO_PROGRAMS:
            programs[code] = Program(code=code, name=name, faculty_id=faculties[faculty_name].id)
        db.add_all(programs.values())
        await db.flush()

        computer = faculties["Computer"]
        software = programs["SE101"]
        password_hash = hash_password(password or DEMO_PASSWORD)
        users = [
            User(
                name=name,
                email=email,
                password_hash=password_hash,
                role=role,
                faculty_id=computer.id,
                program_id=software.id,
            )
            for name, email, role in DEMO_USERS
        ]
        db.add_all(users)
        await db.flush()

        lecturer = users[0]
        db.add_all([
            Module(
                name=name,
                program_id=software.id,
                faculty_id=computer.id,
                total_registered_students=total,
                created_by=lecturer.id,
            )
            for name, total in DEMO_MODULES
        ])
        await db.commit()
    except Exception as e:
        logger.error(f"Failed to seed demo data: {str(e)}")
        await db.rollback()
        raise

    logger.info(
        "✓ Seeded %d faculties, %d programs, %d users, %d modules",
        len(DEMO_FACULTIES), len(DEMO_PROGRAMS), len(DEMO_USERS), len(DEMO_MODULES),
    )
    return True
