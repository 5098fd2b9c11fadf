"""
lecture_reporting/routes/reports.py
Lecture report submission, listing, feedback and attendance signing.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from lecture_reporting.database import get_db
from lecture_reporting.rbac import Identity, get_current_identity
from lecture_reporting.schemas.reports import AttendanceSignature, FeedbackRequest, ReportSubmission
from lecture_reporting.services import report_service

router = APIRouter(prefix="/reports", tags=["Reports"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def submit_report(
    payload: ReportSubmission,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    """The caller is recorded as the report's lecturer."""
    return await report_service.submit(db, identity.user_id, payload)


@router.get("")
async def list_reports(
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    return await report_service.list_visible(db, identity)


@router.get("/{report_id}")
async def get_report(
    report_id: int,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    return await report_service.get_visible(db, identity, report_id)


@router.put("/{report_id}/feedback")
async def submit_feedback(
    report_id: int,
    payload: FeedbackRequest,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    return await report_service.submit_feedback(db, identity, report_id, payload)


@router.put("/{report_id}/attendance")
async def sign_attendance(
    report_id: int,
    payload: AttendanceSignature,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    return await report_service.sign_attendance(db, report_id, payload)
