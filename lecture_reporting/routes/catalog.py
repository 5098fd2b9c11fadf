"""
lecture_reporting/routes/catalog.py
Faculties, programs and modules.

Faculty and program listings are public so the signup form can use them.
Every mutation requires a staff role.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from lecture_reporting.database import get_db
from lecture_reporting.rbac import Identity, get_current_identity, require_permission
from lecture_reporting.schemas.catalog import ModuleCreate, ModuleUpdate, ProgramCreate, ProgramUpdate
from lecture_reporting.services import catalog_service

router = APIRouter(tags=["Catalog"])


# ================= FACULTIES =================

@router.get("/faculties")
async def list_faculties(db: AsyncSession = Depends(get_db)):
    return await catalog_service.list_faculties(db)


# ================= PROGRAMS =================

@router.get("/programs")
async def list_programs(
    faculty_id: Optional[int] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    return await catalog_service.list_programs(db, faculty_id=faculty_id)


@router.get("/programs/{program_id}")
async def get_program(program_id: int, db: AsyncSession = Depends(get_db)):
    return await catalog_service.get_program(db, program_id)


@router.post("/programs", status_code=status.HTTP_201_CREATED)
async def create_program(
    payload: ProgramCreate,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    require_permission(identity, "manage_catalog")
    program = await catalog_service.create_program(db, payload, created_by=identity.user_id)
    return program.to_dict()


@router.put("/programs/{program_id}")
async def update_program(
    program_id: int,
    payload: ProgramUpdate,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    require_permission(identity, "manage_catalog")
    program = await catalog_service.update_program(db, program_id, payload)
    return program.to_dict()


@router.delete("/programs/{program_id}")
async def delete_program(
    program_id: int,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    require_permission(identity, "manage_catalog")
    await catalog_service.delete_program(db, program_id)
    return {"success": True, "message": "Program deleted successfully"}


# ================= MODULES =================

@router.get("/modules")
async def list_modules(
    program_id: Optional[int] = Query(None),
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    return await catalog_service.list_modules(db, program_id=program_id)


@router.get("/modules/{module_id}")
async def get_module(
    module_id: int,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    return await catalog_service.get_module(db, module_id)


@router.post("/modules", status_code=status.HTTP_201_CREATED)
async def create_module(
    payload: ModuleCreate,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    require_permission(identity, "manage_catalog")
    module = await catalog_service.create_module(db, payload, created_by=identity.user_id)
    return module.to_dict()


@router.put("/modules/{module_id}")
async def update_module(
    module_id: int,
    payload: ModuleUpdate,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    require_permission(identity, "manage_catalog")
    module = await catalog_service.update_module(db, module_id, payload)
    return module.to_dict()


@router.delete("/modules/{module_id}")
async def delete_module(
    module_id: int,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    require_permission(identity, "manage_catalog")
    await catalog_service.delete_module(db, module_id)
    return {"success": True, "message": "Module deleted successfully"}
