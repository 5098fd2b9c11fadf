"""
lecture_reporting/services/rating_service.py
Rating ledger.

Two separate ledgers:
- module ratings: one live row per (student, module), resubmission overwrites
- report ratings (legacy): append-only, any rater may rate a report repeatedly
"""
import logging
from datetime import datetime
from typing import Any, Dict, List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from lecture_reporting.database import commit_or_conflict
from lecture_reporting.errors import (
    ErrorCode,
    ReferentialError,
    ValidationError,
    is_missing,
    validate_range,
)
from lecture_reporting.orm import LectureReport, Module, ModuleRating, Program, Rating, User
from lecture_reporting.rbac import Identity, require_permission
from lecture_reporting.schemas.ratings import ModuleRatingRequest, ReportRatingRequest
from lecture_reporting.services.catalog_service import ensure_student_module_access

logger = logging.getLogger(__name__)

MIN_RATING = 1
MAX_RATING = 5


def _clean_comments(comments):
    return None if is_missing(comments) else comments.strip()


# ================= MODULE RATINGS =================

def _module_rating_query():
    return (
        select(
            ModuleRating,
            Module.name.label("module_name"),
            Program.code.label("program_code"),
            Program.name.label("program_name"),
            User.name.label("student_name"),
        )
        .outerjoin(Module, Module.id == ModuleRating.module_id)
        .outerjoin(Program, Program.id == Module.program_id)
        .outerjoin(User, User.id == ModuleRating.student_id)
    )


def _module_rating_row(row) -> Dict[str, Any]:
    data = row.ModuleRating.to_dict()
    data.update(
        module_name=row.module_name,
        program_code=row.program_code,
        program_name=row.program_name,
        student_name=row.student_name,
    )
    return data


async def rate_module(db: AsyncSession, identity: Identity, payload: ModuleRatingRequest) -> ModuleRating:
    """
    Upsert the caller's rating of a module.

    An existing (student, module) row is overwritten in place with the new
    rating, comments and a fresh timestamp.
    """
    require_permission(identity, "student_self_service", "Only students can rate modules")
    if payload.module_id is None:
        raise ValidationError("module_id", code=ErrorCode.MISSING_FIELD)
    if payload.rating is None:
        raise ValidationError("rating", code=ErrorCode.MISSING_FIELD)
    validate_range(payload.rating, MIN_RATING, MAX_RATING, "rating")

    await ensure_student_module_access(db, identity.user_id, payload.module_id)

    result = await db.execute(
        select(ModuleRating).where(
            ModuleRating.student_id == identity.user_id,
            ModuleRating.module_id == payload.module_id,
        )
    )
    rating = result.scalar_one_or_none()
    if rating:
        rating.rating = payload.rating
        rating.comments = _clean_comments(payload.comments)
        rating.created_at = datetime.utcnow()
        action = "updated"
    else:
        rating = ModuleRating(
            student_id=identity.user_id,
            module_id=payload.module_id,
            rating=payload.rating,
            comments=_clean_comments(payload.comments),
        )
        db.add(rating)
        action = "created"

    await commit_or_conflict(db, "Rating was submitted concurrently, please retry")
    await db.refresh(rating)

    logger.info(f"✓ Module rating {action}: student {identity.user_id}, module {payload.module_id} → {payload.rating}")
    return rating


async def list_for_student(db: AsyncSession, identity: Identity) -> List[Dict[str, Any]]:
    require_permission(identity, "student_self_service", "Only students have personal module ratings")
    result = await db.execute(
        _module_rating_query()
        .where(ModuleRating.student_id == identity.user_id)
        .order_by(ModuleRating.created_at.desc(), ModuleRating.id.desc())
    )
    return [_module_rating_row(row) for row in result.all()]


async def list_all(db: AsyncSession, identity: Identity) -> List[Dict[str, Any]]:
    require_permission(identity, "view_all_module_ratings")
    result = await db.execute(
        _module_rating_query().order_by(ModuleRating.created_at.desc(), ModuleRating.id.desc())
    )
    return [_module_rating_row(row) for row in result.all()]


# ================= REPORT RATINGS (LEGACY) =================

async def rate_report(db: AsyncSession, rater_id: int, payload: ReportRatingRequest) -> Rating:
    if payload.report_id is None:
        raise ValidationError("report_id", code=ErrorCode.MISSING_FIELD)
    if payload.rating is None:
        raise ValidationError("rating", code=ErrorCode.MISSING_FIELD)
    validate_range(payload.rating, MIN_RATING, MAX_RATING, "rating")

    if not await db.get(LectureReport, payload.report_id):
        raise ReferentialError("Report", payload.report_id, field="report_id")

    rating = Rating(
        report_id=payload.report_id,
        rated_by=rater_id,
        rating=payload.rating,
        comments=_clean_comments(payload.comments),
    )
    db.add(rating)
    await db.commit()
    await db.refresh(rating)

    logger.info(f"✓ Report {payload.report_id} rated {payload.rating} by user {rater_id}")
    return rating


async def list_for_report(db: AsyncSession, report_id: int) -> List[Dict[str, Any]]:
    result = await db.execute(
        select(Rating, User.name.label("rated_by_name"))
        .outerjoin(User, User.id == Rating.rated_by)
        .where(Rating.report_id == report_id)
        .order_by(Rating.created_at.desc(), Rating.id.desc())
    )
    ratings = []
    for row in result.all():
        data = row.Rating.to_dict()
        data["rated_by_name"] = row.rated_by_name
        ratings.append(data)
    return ratings
