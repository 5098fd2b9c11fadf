"""
lecture_reporting/services/account_service.py
Signup, login and user directory listings.
"""
import logging
from typing import Any, Dict, List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from lecture_reporting.database import commit_or_conflict
from lecture_reporting.errors import (
    ConflictError,
    ErrorCode,
    NotFoundError,
    UnauthorizedError,
    require_fields,
    validate_choice,
)
from lecture_reporting.orm import Faculty, Program, User, UserRole
from lecture_reporting.rbac import create_access_token, hash_password, verify_password
from lecture_reporting.schemas.auth import LoginRequest, SignupRequest
from lecture_reporting.services.catalog_service import (
    get_faculty_or_reference_error,
    get_program_or_reference_error,
)

logger = logging.getLogger(__name__)


async def signup(db: AsyncSession, payload: SignupRequest) -> User:
    data = payload.model_dump()
    require_fields(data, ["name", "email", "password", "role"])
    validate_choice(payload.role, list(UserRole), "role")
    role = UserRole(payload.role)

    if role == UserRole.student:
        require_fields(data, ["faculty_id", "program_id"])

    if payload.faculty_id is not None:
        await get_faculty_or_reference_error(db, payload.faculty_id)
    if payload.program_id is not None:
        await get_program_or_reference_error(db, payload.program_id)

    email = str(payload.email).lower()
    existing = await db.execute(select(User.id).where(User.email == email))
    if existing.first():
        raise ConflictError("Email already registered", code=ErrorCode.DUPLICATE_ENTRY)

    user = User(
        name=payload.name.strip(),
        email=email,
        password_hash=hash_password(payload.password),
        role=role,
        faculty_id=payload.faculty_id,
        program_id=payload.program_id,
    )
    db.add(user)
    await commit_or_conflict(db, "Email already registered")
    await db.refresh(user)

    logger.info(f"✓ User registered: {user.email} ({role.value})")
    return user


async def login(db: AsyncSession, payload: LoginRequest) -> Dict[str, Any]:
    """Verify credentials and issue an access token carrying the user's role."""
    require_fields(payload.model_dump(), ["email", "password"])

    result = await db.execute(select(User).where(User.email == payload.email.strip().lower()))
    user = result.scalar_one_or_none()
    if not user or not verify_password(payload.password, user.password_hash):
        logger.warning(f"Failed login attempt for {payload.email}")
        raise UnauthorizedError("Invalid email or password", code=ErrorCode.AUTH_INVALID)

    token = create_access_token(user.id, user.role)
    logger.info(f"✓ User logged in: {user.email}")
    return {"access_token": token, "token_type": "bearer", "user": user.to_dict()}


async def get_user(db: AsyncSession, user_id: int) -> User:
    user = await db.get(User, user_id)
    if not user:
        raise NotFoundError("User", user_id)
    return user


async def _list_by_role(db: AsyncSession, role: UserRole) -> List[Dict[str, Any]]:
    result = await db.execute(
        select(
            User,
            Faculty.name.label("faculty_name"),
            Program.code.label("program_code"),
            Program.name.label("program_name"),
        )
        .outerjoin(Faculty, Faculty.id == User.faculty_id)
        .outerjoin(Program, Program.id == User.program_id)
        .where(User.role == role)
        .order_by(User.name)
    )
    users = []
    for row in result.all():
        data = row.User.to_dict()
        data.update(
            faculty_name=row.faculty_name,
            program_code=row.program_code,
            program_name=row.program_name,
        )
        users.append(data)
    return users


async def list_lecturers(db: AsyncSession) -> List[Dict[str, Any]]:
    return await _list_by_role(db, UserRole.lecturer)


async def list_students(db: AsyncSession) -> List[Dict[str, Any]]:
    return await _list_by_role(db, UserRole.student)
