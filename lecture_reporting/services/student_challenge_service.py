"""
lecture_reporting/services/student_challenge_service.py
Student challenges: raised and managed by the owning student only.
"""
import logging
from datetime import datetime
from typing import Any, Dict, List

from sqlalchemy import case, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from lecture_reporting.errors import (
    ErrorCode,
    ForbiddenError,
    NotFoundError,
    ValidationError,
    is_missing,
    require_fields,
    validate_choice,
)
from lecture_reporting.orm import (
    ChallengePriority,
    Module,
    PRIORITY_RANK,
    Program,
    StudentChallenge,
)
from lecture_reporting.rbac import Identity, require_permission
from lecture_reporting.schemas.challenges import StudentChallengeCreate, StudentChallengeStatusUpdate
from lecture_reporting.services.catalog_service import ensure_student_module_access
from lecture_reporting.state_machines.workflow_status import StudentChallengeStatusMachine

logger = logging.getLogger(__name__)

STUDENT_ONLY = "Only students can manage student challenges"

priority_rank = case(
    {priority.value: rank for priority, rank in PRIORITY_RANK.items()},
    value=StudentChallenge.priority,
    else_=len(PRIORITY_RANK) + 1,
)


def _challenge_query():
    return (
        select(
            StudentChallenge,
            Module.name.label("module_name"),
            Program.code.label("program_code"),
            Program.name.label("program_name"),
        )
        .outerjoin(Module, Module.id == StudentChallenge.module_id)
        .outerjoin(Program, Program.id == Module.program_id)
    )


def _challenge_row(row) -> Dict[str, Any]:
    data = row.StudentChallenge.to_dict()
    data.update(
        module_name=row.module_name,
        program_code=row.program_code,
        program_name=row.program_name,
    )
    return data


async def create(db: AsyncSession, identity: Identity, payload: StudentChallengeCreate) -> Dict[str, Any]:
    require_permission(identity, "student_self_service", STUDENT_ONLY)
    require_fields(payload.model_dump(), ["module_id", "title", "description"])

    priority = ChallengePriority.medium
    if not is_missing(payload.priority):
        validate_choice(payload.priority, list(ChallengePriority), "priority")
        priority = ChallengePriority(payload.priority)

    await ensure_student_module_access(db, identity.user_id, payload.module_id)

    challenge = StudentChallenge(
        student_id=identity.user_id,
        module_id=payload.module_id,
        title=payload.title.strip(),
        description=payload.description.strip(),
        priority=priority,
    )
    db.add(challenge)
    await db.commit()
    await db.refresh(challenge)
    logger.info(f"✓ Student challenge {challenge.id} ({priority.value}) raised by student {identity.user_id}")

    try:
        result = await db.execute(_challenge_query().where(StudentChallenge.id == challenge.id))
        return _challenge_row(result.one())
    except SQLAlchemyError as e:
        logger.error(f"Student challenge {challenge.id} saved but detail lookup failed: {str(e)}")
        return {"success": True, "id": challenge.id, "message": "Challenge submitted successfully"}


async def list_own(db: AsyncSession, identity: Identity) -> List[Dict[str, Any]]:
    """The caller's challenges: high priority first, newest first within a priority."""
    require_permission(identity, "student_self_service", STUDENT_ONLY)
    result = await db.execute(
        _challenge_query()
        .where(StudentChallenge.student_id == identity.user_id)
        .order_by(priority_rank, StudentChallenge.created_at.desc(), StudentChallenge.id.desc())
    )
    return [_challenge_row(row) for row in result.all()]


async def update_status(
    db: AsyncSession, identity: Identity, challenge_id: int, payload: StudentChallengeStatusUpdate
) -> Dict[str, Any]:
    require_permission(identity, "student_self_service", STUDENT_ONLY)
    if is_missing(payload.status):
        raise ValidationError("status", code=ErrorCode.MISSING_FIELD)
    target = StudentChallengeStatusMachine.parse(payload.status)

    challenge = await db.get(StudentChallenge, challenge_id)
    if not challenge:
        raise NotFoundError("Student challenge", challenge_id)
    if challenge.student_id != identity.user_id:
        logger.warning(f"Student {identity.user_id} attempted to update challenge {challenge_id} of student {challenge.student_id}")
        raise ForbiddenError(
            "You can only update your own challenges",
            code=ErrorCode.OWNERSHIP_VIOLATION,
        )

    previous = challenge.status
    challenge.status = StudentChallengeStatusMachine.transition(previous, target)
    challenge.updated_at = datetime.utcnow()
    await db.commit()

    logger.info(f"✓ Student challenge {challenge_id}: {previous.value} → {target.value}")
    return challenge.to_dict()
