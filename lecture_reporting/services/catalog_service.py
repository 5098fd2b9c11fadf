"""
lecture_reporting/services/catalog_service.py
Faculties, programs and modules.

Deletes are guarded by dependency counts computed in the same session as the
delete itself, so the check and the write land in one transaction. Every
table holding a foreign key to the row is counted; nothing cascades. A row
inserted between the count and the delete is caught by the store's foreign
key and surfaces as the same Conflict.
"""
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from lecture_reporting.database import commit_or_conflict
from lecture_reporting.errors import (
    AccessDeniedError,
    ConflictError,
    ErrorCode,
    NotFoundError,
    ReferentialError,
    ValidationError,
    is_missing,
    require_fields,
)
from lecture_reporting.orm import (
    Challenge,
    Faculty,
    LectureAssignment,
    LectureReport,
    Module,
    ModuleRating,
    Program,
    StudentChallenge,
    User,
)
from lecture_reporting.schemas.catalog import ModuleCreate, ModuleUpdate, ProgramCreate, ProgramUpdate

logger = logging.getLogger(__name__)


# ================= LOOKUPS =================

async def get_faculty_or_reference_error(db: AsyncSession, faculty_id: int, field: str = "faculty_id") -> Faculty:
    faculty = await db.get(Faculty, faculty_id)
    if not faculty:
        raise ReferentialError("Faculty", faculty_id, field=field)
    return faculty


async def get_program_or_reference_error(db: AsyncSession, program_id: int, field: str = "program_id") -> Program:
    program = await db.get(Program, program_id)
    if not program:
        raise ReferentialError("Program", program_id, field=field)
    return program


async def get_module_or_reference_error(db: AsyncSession, module_id: int, field: str = "module_id") -> Module:
    module = await db.get(Module, module_id)
    if not module:
        raise ReferentialError("Module", module_id, field=field)
    return module


async def ensure_student_module_access(db: AsyncSession, student_id: int, module_id: int) -> Module:
    """
    Return the module if it belongs to the student's program.

    Access is granted through program membership, not module ownership. An
    unknown module and a module of another program are indistinguishable to
    the caller.
    """
    result = await db.execute(
        select(Module)
        .join(User, User.program_id == Module.program_id)
        .where(Module.id == module_id, User.id == student_id)
    )
    module = result.scalar_one_or_none()
    if module is None:
        logger.warning(f"Student {student_id} denied access to module {module_id}")
        raise AccessDeniedError(details={"module_id": module_id})
    return module


# ================= FACULTIES =================

async def list_faculties(db: AsyncSession) -> List[Dict[str, Any]]:
    result = await db.execute(select(Faculty).order_by(Faculty.name))
    return [f.to_dict() for f in result.scalars().all()]


# ================= PROGRAMS =================

def _program_query():
    return (
        select(Program, Faculty.name.label("faculty_name"))
        .outerjoin(Faculty, Faculty.id == Program.faculty_id)
    )


def _program_row(row) -> Dict[str, Any]:
    data = row.Program.to_dict()
    data["faculty_name"] = row.faculty_name
    return data


async def list_programs(db: AsyncSession, faculty_id: Optional[int] = None) -> List[Dict[str, Any]]:
    query = _program_query()
    if faculty_id is not None:
        query = query.where(Program.faculty_id == faculty_id)
    result = await db.execute(query.order_by(Program.code))
    return [_program_row(row) for row in result.all()]


async def get_program(db: AsyncSession, program_id: int) -> Dict[str, Any]:
    result = await db.execute(_program_query().where(Program.id == program_id))
    row = result.first()
    if row is None:
        raise NotFoundError("Program", program_id)
    return _program_row(row)


async def _ensure_program_code_free(db: AsyncSession, code: str, exclude_id: Optional[int] = None) -> None:
    query = select(Program.id).where(Program.code == code)
    if exclude_id is not None:
        query = query.where(Program.id != exclude_id)
    if (await db.execute(query)).first():
        raise ConflictError(f"Program code '{code}' already exists", code=ErrorCode.DUPLICATE_ENTRY)


async def create_program(db: AsyncSession, payload: ProgramCreate, created_by: int) -> Program:
    data = payload.model_dump()
    require_fields(data, ["code", "name"])

    code = payload.code.strip()
    if payload.faculty_id is not None:
        await get_faculty_or_reference_error(db, payload.faculty_id)
    await _ensure_program_code_free(db, code)

    program = Program(
        code=code,
        name=payload.name.strip(),
        faculty_id=payload.faculty_id,
        created_by=created_by,
    )
    db.add(program)
    await commit_or_conflict(db, f"Program code '{code}' already exists")
    await db.refresh(program)

    logger.info(f"✓ Program {program.code} created by user {created_by}")
    return program


async def update_program(db: AsyncSession, program_id: int, payload: ProgramUpdate) -> Program:
    program = await db.get(Program, program_id)
    if not program:
        raise NotFoundError("Program", program_id)

    changes = payload.model_dump(exclude_unset=True)
    if not changes:
        raise ValidationError("body", message="No fields to update")

    if "code" in changes:
        if is_missing(changes["code"]):
            raise ValidationError("code", code=ErrorCode.MISSING_FIELD)
        changes["code"] = changes["code"].strip()
        await _ensure_program_code_free(db, changes["code"], exclude_id=program_id)
    if "name" in changes:
        if is_missing(changes["name"]):
            raise ValidationError("name", code=ErrorCode.MISSING_FIELD)
        changes["name"] = changes["name"].strip()
    if changes.get("faculty_id") is not None:
        await get_faculty_or_reference_error(db, changes["faculty_id"])

    for field, value in changes.items():
        setattr(program, field, value)
    await commit_or_conflict(db, f"Program code '{program.code}' already exists")
    await db.refresh(program)

    logger.info(f"✓ Program {program_id} updated: {sorted(changes)}")
    return program


async def _count(db: AsyncSession, column, value) -> int:
    result = await db.execute(select(func.count()).select_from(column.class_).where(column == value))
    return result.scalar() or 0


async def program_dependencies(db: AsyncSession, program_id: int) -> Dict[str, int]:
    return {
        "modules": await _count(db, Module.program_id, program_id),
        "assignments": await _count(db, LectureAssignment.program_id, program_id),
        "reports": await _count(db, LectureReport.program_id, program_id),
        "users": await _count(db, User.program_id, program_id),
        "challenges": await _count(db, Challenge.program_id, program_id),
    }


async def delete_program(db: AsyncSession, program_id: int) -> None:
    program = await db.get(Program, program_id)
    if not program:
        raise NotFoundError("Program", program_id)

    dependencies = await program_dependencies(db, program_id)
    blocking = {name: count for name, count in dependencies.items() if count}
    if blocking:
        logger.info(f"Delete of program {program_id} blocked by {blocking}")
        raise ConflictError(
            f"Cannot delete program '{program.code}': it is still referenced",
            code=ErrorCode.DEPENDENCY_EXISTS,
            details=blocking,
        )

    await db.delete(program)
    await commit_or_conflict(
        db,
        f"Cannot delete program '{program.code}': it is still referenced",
        code=ErrorCode.DEPENDENCY_EXISTS,
    )
    logger.info(f"✓ Program {program_id} deleted")


# ================= MODULES =================

def _module_query():
    creator = aliased(User)
    assignment_count = (
        select(func.count(LectureAssignment.id))
        .where(LectureAssignment.module_id == Module.id)
        .correlate(Module)
        .scalar_subquery()
    )
    report_count = (
        select(func.count(LectureReport.id))
        .where(LectureReport.module_id == Module.id)
        .correlate(Module)
        .scalar_subquery()
    )
    return (
        select(
            Module,
            Program.code.label("program_code"),
            Program.name.label("program_name"),
            Faculty.name.label("faculty_name"),
            creator.name.label("created_by_name"),
            assignment_count.label("assignment_count"),
            report_count.label("report_count"),
        )
        .outerjoin(Program, Program.id == Module.program_id)
        .outerjoin(Faculty, Faculty.id == Module.faculty_id)
        .outerjoin(creator, creator.id == Module.created_by)
    )


def _module_row(row) -> Dict[str, Any]:
    data = row.Module.to_dict()
    data.update(
        program_code=row.program_code,
        program_name=row.program_name,
        faculty_name=row.faculty_name,
        created_by_name=row.created_by_name,
        assignment_count=row.assignment_count or 0,
        report_count=row.report_count or 0,
    )
    return data


async def list_modules(db: AsyncSession, program_id: Optional[int] = None) -> List[Dict[str, Any]]:
    query = _module_query()
    if program_id is not None:
        query = query.where(Module.program_id == program_id)
    result = await db.execute(query.order_by(Module.name))
    return [_module_row(row) for row in result.all()]


async def get_module(db: AsyncSession, module_id: int) -> Dict[str, Any]:
    result = await db.execute(_module_query().where(Module.id == module_id))
    row = result.first()
    if row is None:
        raise NotFoundError("Module", module_id)
    return _module_row(row)


async def _ensure_module_name_free(
    db: AsyncSession, name: str, program_id: int, exclude_id: Optional[int] = None
) -> None:
    query = select(Module.id).where(Module.name == name, Module.program_id == program_id)
    if exclude_id is not None:
        query = query.where(Module.id != exclude_id)
    if (await db.execute(query)).first():
        raise ConflictError(
            f"Module '{name}' already exists in this program",
            code=ErrorCode.DUPLICATE_ENTRY,
        )


def _check_student_total(value) -> None:
    if value is None:
        raise ValidationError("total_registered_students", code=ErrorCode.MISSING_FIELD)
    if value < 1:
        raise ValidationError(
            "total_registered_students",
            message="Total registered students must be at least 1",
            code=ErrorCode.OUT_OF_RANGE,
        )


async def create_module(db: AsyncSession, payload: ModuleCreate, created_by: int) -> Module:
    """
    Create a module owned by the caller.

    faculty_id defaults to the program's faculty when not supplied.
    """
    name = (payload.name or "").strip()
    if not name:
        raise ValidationError("name", code=ErrorCode.MISSING_FIELD)
    if payload.program_id is None:
        raise ValidationError("program_id", code=ErrorCode.MISSING_FIELD)
    _check_student_total(payload.total_registered_students)

    program = await get_program_or_reference_error(db, payload.program_id)
    faculty_id = payload.faculty_id
    if faculty_id is None:
        faculty_id = program.faculty_id
    else:
        await get_faculty_or_reference_error(db, faculty_id)

    await _ensure_module_name_free(db, name, program.id)

    module = Module(
        name=name,
        program_id=program.id,
        faculty_id=faculty_id,
        total_registered_students=payload.total_registered_students,
        created_by=created_by,
    )
    db.add(module)
    await commit_or_conflict(db, f"Module '{name}' already exists in this program")
    await db.refresh(module)

    logger.info(f"✓ Module '{module.name}' created in program {program.code} by user {created_by}")
    return module


async def update_module(db: AsyncSession, module_id: int, payload: ModuleUpdate) -> Module:
    module = await db.get(Module, module_id)
    if not module:
        raise NotFoundError("Module", module_id)

    changes = payload.model_dump(exclude_unset=True)
    if not changes:
        raise ValidationError("body", message="No fields to update")

    if "name" in changes:
        changes["name"] = (changes["name"] or "").strip()
        if not changes["name"]:
            raise ValidationError("name", code=ErrorCode.MISSING_FIELD)
    if "program_id" in changes:
        if changes["program_id"] is None:
            raise ValidationError("program_id", code=ErrorCode.MISSING_FIELD)
        program = await get_program_or_reference_error(db, changes["program_id"])
        if "faculty_id" not in changes and program.id != module.program_id:
            # Moving programs carries the new program's faculty along
            changes["faculty_id"] = program.faculty_id
    if "total_registered_students" in changes:
        _check_student_total(changes["total_registered_students"])
    if changes.get("faculty_id") is not None:
        await get_faculty_or_reference_error(db, changes["faculty_id"])

    if "name" in changes or "program_id" in changes:
        await _ensure_module_name_free(
            db,
            changes.get("name", module.name),
            changes.get("program_id", module.program_id),
            exclude_id=module_id,
        )

    for field, value in changes.items():
        setattr(module, field, value)
    await commit_or_conflict(db, f"Module '{module.name}' already exists in this program")
    await db.refresh(module)

    logger.info(f"✓ Module {module_id} updated: {sorted(changes)}")
    return module


async def module_dependencies(db: AsyncSession, module_id: int) -> Dict[str, int]:
    return {
        "assignments": await _count(db, LectureAssignment.module_id, module_id),
        "reports": await _count(db, LectureReport.module_id, module_id),
        "challenges": await _count(db, Challenge.module_id, module_id),
        "student_challenges": await _count(db, StudentChallenge.module_id, module_id),
        "module_ratings": await _count(db, ModuleRating.module_id, module_id),
    }


async def delete_module(db: AsyncSession, module_id: int) -> None:
    module = await db.get(Module, module_id)
    if not module:
        raise NotFoundError("Module", module_id)

    dependencies = await module_dependencies(db, module_id)
    blocking = {name: count for name, count in dependencies.items() if count}
    if blocking:
        logger.info(f"Delete of module {module_id} blocked by {blocking}")
        raise ConflictError(
            f"Cannot delete module '{module.name}': it is still referenced",
            code=ErrorCode.DEPENDENCY_EXISTS,
            details=blocking,
        )

    await db.delete(module)
    await commit_or_conflict(
        db,
        f"Cannot delete module '{module.name}': it is still referenced",
        code=ErrorCode.DEPENDENCY_EXISTS,
    )
    logger.info(f"✓ Module {module_id} deleted")


async def list_student_modules(db: AsyncSession, student_id: int) -> Dict[str, Any]:
    """Modules of the student's program; has_program is False when none is set."""
    student = await db.get(User, student_id)
    if not student:
        raise NotFoundError("User", student_id)
    if student.program_id is None:
        return {"has_program": False, "program_id": None, "modules": []}

    return {
        "has_program": True,
        "program_id": student.program_id,
        "modules": await list_modules(db, program_id=student.program_id),
    }
