"""
lecture_reporting/services/challenge_service.py
Lecturer challenge workflow.

Status is freely settable between pending, in_progress and resolved by
program leaders and principal lecturers. resolved_date follows the status:
stamped on resolved, cleared on anything else.
"""
import logging
from datetime import date
from typing import Any, Dict, List

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from lecture_reporting.errors import (
    ErrorCode,
    ForbiddenError,
    NotFoundError,
    ReferentialError,
    ValidationError,
    is_missing,
    require_fields,
    validate_choice,
)
from lecture_reporting.orm import (
    Challenge,
    ChallengeStatus,
    ChallengeType,
    Faculty,
    Module,
    Program,
    User,
)
from lecture_reporting.rbac import Identity, has_permission, require_permission
from lecture_reporting.schemas.challenges import ChallengeCreate, ChallengeUpdate
from lecture_reporting.services.catalog_service import (
    get_faculty_or_reference_error,
    get_module_or_reference_error,
    get_program_or_reference_error,
)
from lecture_reporting.state_machines.workflow_status import ChallengeStatusMachine

logger = logging.getLogger(__name__)


def _challenge_query():
    return (
        select(
            Challenge,
            Module.name.label("module_name"),
            Program.code.label("program_code"),
            Program.name.label("program_name"),
            Faculty.name.label("faculty_name"),
            User.name.label("lecturer_name"),
        )
        .outerjoin(Module, Module.id == Challenge.module_id)
        .outerjoin(Program, Program.id == Challenge.program_id)
        .outerjoin(Faculty, Faculty.id == Challenge.faculty_id)
        .outerjoin(User, User.id == Challenge.lecturer_id)
    )


def _challenge_row(row) -> Dict[str, Any]:
    data = row.Challenge.to_dict()
    data.update(
        module_name=row.module_name,
        program_code=row.program_code,
        program_name=row.program_name,
        faculty_name=row.faculty_name,
        lecturer_name=row.lecturer_name,
    )
    return data


async def _get_detail(db: AsyncSession, challenge_id: int) -> Dict[str, Any]:
    result = await db.execute(_challenge_query().where(Challenge.id == challenge_id))
    row = result.first()
    if row is None:
        raise NotFoundError("Challenge", challenge_id)
    return _challenge_row(row)


async def create(db: AsyncSession, lecturer_id: int, payload: ChallengeCreate) -> Dict[str, Any]:
    """
    Record a challenge raised by the calling lecturer.

    References are checked in order module, program, faculty (when given),
    lecturer; the first missing row is reported as a ReferentialError.
    """
    require_fields(
        payload.model_dump(),
        ["module_id", "program_id", "challenge_type", "description", "impact"],
    )
    validate_choice(payload.challenge_type, list(ChallengeType), "challenge_type")

    await get_module_or_reference_error(db, payload.module_id)
    await get_program_or_reference_error(db, payload.program_id)
    if payload.faculty_id is not None:
        await get_faculty_or_reference_error(db, payload.faculty_id)
    if not await db.get(User, lecturer_id):
        raise ReferentialError("Lecturer", lecturer_id, field="lecturer_id")

    challenge = Challenge(
        lecturer_id=lecturer_id,
        module_id=payload.module_id,
        program_id=payload.program_id,
        faculty_id=payload.faculty_id,
        challenge_type=ChallengeType(payload.challenge_type),
        description=payload.description.strip(),
        impact=payload.impact.strip(),
        proposed_solution=None if is_missing(payload.proposed_solution) else payload.proposed_solution.strip(),
        status=ChallengeStatus.pending,
        submitted_date=date.today(),
    )
    db.add(challenge)
    await db.commit()
    await db.refresh(challenge)
    logger.info(f"✓ Challenge {challenge.id} ({challenge.challenge_type.value}) raised by lecturer {lecturer_id}")

    try:
        return await _get_detail(db, challenge.id)
    except SQLAlchemyError as e:
        logger.error(f"Challenge {challenge.id} saved but detail lookup failed: {str(e)}")
        return {"success": True, "id": challenge.id, "message": "Challenge submitted successfully"}


async def list_visible(db: AsyncSession, identity: Identity) -> List[Dict[str, Any]]:
    """Lecturers see their own challenges; other roles see all."""
    query = _challenge_query()
    if identity.is_lecturer:
        query = query.where(Challenge.lecturer_id == identity.user_id)
    result = await db.execute(query.order_by(Challenge.created_at.desc(), Challenge.id.desc()))
    return [_challenge_row(row) for row in result.all()]


async def get(db: AsyncSession, identity: Identity, challenge_id: int) -> Dict[str, Any]:
    challenge = await _get_detail(db, challenge_id)
    if identity.is_lecturer and challenge["lecturer_id"] != identity.user_id:
        raise ForbiddenError(
            "You can only view your own challenges",
            code=ErrorCode.OWNERSHIP_VIOLATION,
        )
    return challenge


async def update(
    db: AsyncSession, identity: Identity, challenge_id: int, payload: ChallengeUpdate
) -> Dict[str, Any]:
    require_permission(identity, "review_challenges", "Only program leaders and principal lecturers can update challenges")

    changes = payload.model_dump(exclude_unset=True)
    if not changes:
        raise ValidationError("body", message="Provide admin_feedback or status to update")
    if "status" in changes and is_missing(changes["status"]):
        raise ValidationError("status", code=ErrorCode.MISSING_FIELD)

    challenge = await db.get(Challenge, challenge_id)
    if not challenge:
        raise NotFoundError("Challenge", challenge_id)

    if "status" in changes:
        target = ChallengeStatusMachine.parse(changes["status"])
        previous = challenge.status
        challenge.status = ChallengeStatusMachine.transition(previous, target)
        challenge.resolved_date = ChallengeStatusMachine.resolved_date_for(target)
        logger.info(f"Challenge {challenge_id}: {previous.value} → {target.value} by user {identity.user_id}")
    if "admin_feedback" in changes:
        # An explicit null clears earlier feedback
        challenge.admin_feedback = changes["admin_feedback"]

    await db.commit()
    logger.info(f"✓ Challenge {challenge_id} updated: {sorted(changes)}")

    try:
        return await _get_detail(db, challenge_id)
    except SQLAlchemyError as e:
        logger.error(f"Challenge {challenge_id} updated but detail lookup failed: {str(e)}")
        return {"success": True, "id": challenge_id, "message": "Challenge updated successfully"}


async def delete(db: AsyncSession, identity: Identity, challenge_id: int) -> None:
    challenge = await db.get(Challenge, challenge_id)
    if not challenge:
        raise NotFoundError("Challenge", challenge_id)

    is_owner = challenge.lecturer_id == identity.user_id
    if not is_owner and not has_permission(identity, "delete_any_challenge"):
        logger.warning(f"User {identity.user_id} attempted to delete challenge {challenge_id} owned by {challenge.lecturer_id}")
        raise ForbiddenError(
            "You can only delete your own challenges",
            code=ErrorCode.OWNERSHIP_VIOLATION,
        )

    await db.delete(challenge)
    await db.commit()
    logger.info(f"✓ Challenge {challenge_id} deleted by user {identity.user_id}")


async def stats(db: AsyncSession, identity: Identity) -> Dict[str, int]:
    """Counts per status, zero-filled. Lecturers get their own counts only."""
    query = select(Challenge.status, func.count(Challenge.id)).group_by(Challenge.status)
    if identity.is_lecturer:
        query = query.where(Challenge.lecturer_id == identity.user_id)
    result = await db.execute(query)

    counts = {status.value: 0 for status in ChallengeStatus}
    for status, count in result.all():
        counts[ChallengeStatus(status).value] = count
    return counts
