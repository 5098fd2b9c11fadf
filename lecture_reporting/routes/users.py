"""
lecture_reporting/routes/users.py
Staff directory listings.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from lecture_reporting.database import get_db
from lecture_reporting.rbac import Identity, get_current_identity, require_permission
from lecture_reporting.services import account_service

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("/lecturers")
async def list_lecturers(
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    require_permission(identity, "list_users")
    return await account_service.list_lecturers(db)


@router.get("/students")
async def list_students(
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    require_permission(identity, "list_users")
    return await account_service.list_students(db)
