"""
lecture_reporting/routes/challenges.py
Lecturer challenges.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from lecture_reporting.database import get_db
from lecture_reporting.rbac import Identity, get_current_identity
from lecture_reporting.schemas.challenges import ChallengeCreate, ChallengeStats, ChallengeUpdate
from lecture_reporting.services import challenge_service

router = APIRouter(prefix="/challenges", tags=["Challenges"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_challenge(
    payload: ChallengeCreate,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    return await challenge_service.create(db, identity.user_id, payload)


@router.get("")
async def list_challenges(
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    return await challenge_service.list_visible(db, identity)


# Must stay above /{challenge_id}
@router.get("/stats", response_model=ChallengeStats)
async def challenge_stats(
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    return await challenge_service.stats(db, identity)


@router.get("/{challenge_id}")
async def get_challenge(
    challenge_id: int,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    return await challenge_service.get(db, identity, challenge_id)


@router.put("/{challenge_id}")
async def update_challenge(
    challenge_id: int,
    payload: ChallengeUpdate,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    """Program leaders and principal lecturers only."""
    return await challenge_service.update(db, identity, challenge_id, payload)


@router.delete("/{challenge_id}")
async def delete_challenge(
    challenge_id: int,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    await challenge_service.delete(db, identity, challenge_id)
    return {"success": True, "message": "Challenge deleted successfully"}
