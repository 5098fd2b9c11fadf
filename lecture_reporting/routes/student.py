"""
lecture_reporting/routes/student.py
Student self-service: own modules and own challenges.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from lecture_reporting.database import get_db
from lecture_reporting.rbac import Identity, get_current_identity, require_permission
from lecture_reporting.schemas.challenges import StudentChallengeCreate, StudentChallengeStatusUpdate
from lecture_reporting.services import catalog_service, student_challenge_service

router = APIRouter(prefix="/student", tags=["Student"])


@router.get("/modules")
async def my_modules(
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    require_permission(identity, "student_self_service")
    return await catalog_service.list_student_modules(db, identity.user_id)


@router.post("/challenges", status_code=status.HTTP_201_CREATED)
async def create_student_challenge(
    payload: StudentChallengeCreate,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    return await student_challenge_service.create(db, identity, payload)


@router.get("/challenges")
async def my_challenges(
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    return await student_challenge_service.list_own(db, identity)


@router.patch("/challenges/{challenge_id}/status")
async def update_student_challenge_status(
    challenge_id: int,
    payload: StudentChallengeStatusUpdate,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    return await student_challenge_service.update_status(db, identity, challenge_id, payload)
