"""
lecture_reporting/routes/assignments.py
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from lecture_reporting.database import get_db
from lecture_reporting.rbac import Identity, get_current_identity, require_permission
from lecture_reporting.schemas.catalog import AssignmentCreate, AssignmentUpdate
from lecture_reporting.services import assignment_service

router = APIRouter(prefix="/assignments", tags=["Assignments"])


@router.get("")
async def list_assignments(
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    require_permission(identity, "manage_assignments")
    return await assignment_service.list_assignments(db)


@router.post("", status_code=status.HTTP_201_CREATED)
async def assign_lecturer(
    payload: AssignmentCreate,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    require_permission(identity, "manage_assignments")
    assignment = await assignment_service.assign(db, payload, assigned_by=identity.user_id)
    return assignment.to_dict()


@router.put("/{assignment_id}")
async def update_assignment(
    assignment_id: int,
    payload: AssignmentUpdate,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    require_permission(identity, "manage_assignments")
    assignment = await assignment_service.update_assignment(db, assignment_id, payload)
    return assignment.to_dict()


@router.delete("/{assignment_id}")
async def delete_assignment(
    assignment_id: int,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    require_permission(identity, "manage_assignments")
    await assignment_service.delete_assignment(db, assignment_id)
    return {"success": True, "message": "Assignment deleted successfully"}
