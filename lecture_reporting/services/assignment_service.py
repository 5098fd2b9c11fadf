"""
lecture_reporting/services/assignment_service.py
Assignment ledger: which lecturer teaches which module in which program.

The (module, program, lecturer) triple is unique. The pre-check gives a
friendly message; the unique constraint decides under concurrent writes.
"""
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from lecture_reporting.database import commit_or_conflict
from lecture_reporting.errors import (
    ConflictError,
    ErrorCode,
    NotFoundError,
    ReferentialError,
    ValidationError,
    require_fields,
)
from lecture_reporting.orm import LectureAssignment, Module, Program, User, UserRole
from lecture_reporting.schemas.catalog import AssignmentCreate, AssignmentUpdate
from lecture_reporting.services.catalog_service import (
    get_module_or_reference_error,
    get_program_or_reference_error,
)

logger = logging.getLogger(__name__)

DUPLICATE_MESSAGE = "Lecturer is already assigned to this module in this program"


async def _get_lecturer_or_reference_error(db: AsyncSession, lecturer_id: int) -> User:
    lecturer = await db.get(User, lecturer_id)
    if not lecturer or lecturer.role != UserRole.lecturer:
        raise ReferentialError("Lecturer", lecturer_id, field="lecturer_id")
    return lecturer


async def _ensure_not_assigned(
    db: AsyncSession,
    module_id: int,
    program_id: int,
    lecturer_id: int,
    exclude_id: Optional[int] = None,
) -> None:
    query = select(LectureAssignment.id).where(
        LectureAssignment.module_id == module_id,
        LectureAssignment.program_id == program_id,
        LectureAssignment.lecturer_id == lecturer_id,
    )
    if exclude_id is not None:
        query = query.where(LectureAssignment.id != exclude_id)
    if (await db.execute(query)).first():
        raise ConflictError(DUPLICATE_MESSAGE, code=ErrorCode.DUPLICATE_ENTRY)


async def list_assignments(db: AsyncSession) -> List[Dict[str, Any]]:
    lecturer = aliased(User)
    assigner = aliased(User)
    result = await db.execute(
        select(
            LectureAssignment,
            Module.name.label("module_name"),
            Program.code.label("program_code"),
            Program.name.label("program_name"),
            lecturer.name.label("lecturer_name"),
            assigner.name.label("assigned_by_name"),
        )
        .outerjoin(Module, Module.id == LectureAssignment.module_id)
        .outerjoin(Program, Program.id == LectureAssignment.program_id)
        .outerjoin(lecturer, lecturer.id == LectureAssignment.lecturer_id)
        .outerjoin(assigner, assigner.id == LectureAssignment.assigned_by)
        .order_by(LectureAssignment.assigned_at.desc(), LectureAssignment.id.desc())
    )
    assignments = []
    for row in result.all():
        data = row.LectureAssignment.to_dict()
        data.update(
            module_name=row.module_name,
            program_code=row.program_code,
            program_name=row.program_name,
            lecturer_name=row.lecturer_name,
            assigned_by_name=row.assigned_by_name,
        )
        assignments.append(data)
    return assignments


async def assign(db: AsyncSession, payload: AssignmentCreate, assigned_by: int) -> LectureAssignment:
    require_fields(payload.model_dump(), ["module_id", "program_id", "lecturer_id"])

    await get_module_or_reference_error(db, payload.module_id)
    await get_program_or_reference_error(db, payload.program_id)
    await _get_lecturer_or_reference_error(db, payload.lecturer_id)
    await _ensure_not_assigned(db, payload.module_id, payload.program_id, payload.lecturer_id)

    assignment = LectureAssignment(
        module_id=payload.module_id,
        program_id=payload.program_id,
        lecturer_id=payload.lecturer_id,
        assigned_by=assigned_by,
    )
    db.add(assignment)
    await commit_or_conflict(db, DUPLICATE_MESSAGE)
    await db.refresh(assignment)

    logger.info(
        f"✓ Lecturer {assignment.lecturer_id} assigned to module {assignment.module_id} "
        f"/ program {assignment.program_id} by user {assigned_by}"
    )
    return assignment


async def update_assignment(db: AsyncSession, assignment_id: int, payload: AssignmentUpdate) -> LectureAssignment:
    assignment = await db.get(LectureAssignment, assignment_id)
    if not assignment:
        raise NotFoundError("Assignment", assignment_id)

    changes = payload.model_dump(exclude_unset=True)
    if not changes:
        raise ValidationError("body", message="No fields to update")
    for field, value in changes.items():
        if value is None:
            raise ValidationError(field, code=ErrorCode.MISSING_FIELD)

    if "module_id" in changes:
        await get_module_or_reference_error(db, changes["module_id"])
    if "program_id" in changes:
        await get_program_or_reference_error(db, changes["program_id"])
    if "lecturer_id" in changes:
        await _get_lecturer_or_reference_error(db, changes["lecturer_id"])

    await _ensure_not_assigned(
        db,
        changes.get("module_id", assignment.module_id),
        changes.get("program_id", assignment.program_id),
        changes.get("lecturer_id", assignment.lecturer_id),
        exclude_id=assignment_id,
    )

    for field, value in changes.items():
        setattr(assignment, field, value)
    await commit_or_conflict(db, DUPLICATE_MESSAGE)
    await db.refresh(assignment)

    logger.info(f"✓ Assignment {assignment_id} updated: {sorted(changes)}")
    return assignment


async def delete_assignment(db: AsyncSession, assignment_id: int) -> None:
    assignment = await db.get(LectureAssignment, assignment_id)
    if not assignment:
        raise NotFoundError("Assignment", assignment_id)
    await db.delete(assignment)
    await db.commit()
    logger.info(f"✓ Assignment {assignment_id} deleted")
