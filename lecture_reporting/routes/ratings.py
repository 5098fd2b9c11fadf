"""
lecture_reporting/routes/ratings.py
Module ratings (upsert per student and module) and legacy report ratings.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from lecture_reporting.database import get_db
from lecture_reporting.rbac import Identity, get_current_identity
from lecture_reporting.schemas.ratings import ModuleRatingRequest, ReportRatingRequest
from lecture_reporting.services import rating_service

router = APIRouter(tags=["Ratings"])


@router.post("/module-ratings")
async def rate_module(
    payload: ModuleRatingRequest,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    rating = await rating_service.rate_module(db, identity, payload)
    return rating.to_dict()


@router.get("/module-ratings/me")
async def my_module_ratings(
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    return await rating_service.list_for_student(db, identity)


@router.get("/module-ratings")
async def all_module_ratings(
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    return await rating_service.list_all(db, identity)


@router.post("/ratings", status_code=status.HTTP_201_CREATED)
async def rate_report(
    payload: ReportRatingRequest,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    rating = await rating_service.rate_report(db, identity.user_id, payload)
    return rating.to_dict()


@router.get("/ratings/report/{report_id}")
async def report_ratings(
    report_id: int,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    return await rating_service.list_for_report(db, report_id)
