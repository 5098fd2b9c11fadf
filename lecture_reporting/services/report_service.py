"""
lecture_reporting/services/report_service.py
Lecture report workflow: submission, visibility, feedback, attendance signing.

Status flow (see ReportStatusMachine):
    submitted → reviewed   via submit_feedback only
    reviewed  → reviewed   repeated feedback overwrites the text

Core fields are immutable after submission. Feedback and attendance signing
touch disjoint columns and do not depend on each other.
"""
import logging
from typing import Any, Dict, List

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from lecture_reporting.config.settings import settings
from lecture_reporting.errors import (
    ErrorCode,
    NotFoundError,
    ValidationError,
    is_missing,
    require_fields,
)
from lecture_reporting.orm import Faculty, LectureReport, Module, Program, ReportStatus, User
from lecture_reporting.rbac import Identity, require_permission
from lecture_reporting.schemas.reports import AttendanceSignature, FeedbackRequest, ReportSubmission
from lecture_reporting.services.catalog_service import (
    get_faculty_or_reference_error,
    get_module_or_reference_error,
    get_program_or_reference_error,
)
from lecture_reporting.state_machines.workflow_status import ReportStatusMachine

logger = logging.getLogger(__name__)

REQUIRED_REPORT_FIELDS = [
    "faculty_id",
    "module_id",
    "program_id",
    "week_of_reporting",
    "date_of_lecture",
    "actual_students_present",
    "total_registered_students",
    "venue",
    "scheduled_time",
    "topic_taught",
    "learning_outcomes",
    "recommendations",
]


def _report_query():
    return (
        select(
            LectureReport,
            Faculty.name.label("faculty_name"),
            Module.name.label("module_name"),
            Program.code.label("program_code"),
            Program.name.label("program_name"),
            User.name.label("lecturer_name"),
        )
        .outerjoin(Faculty, Faculty.id == LectureReport.faculty_id)
        .outerjoin(Module, Module.id == LectureReport.module_id)
        .outerjoin(Program, Program.id == LectureReport.program_id)
        .outerjoin(User, User.id == LectureReport.lecturer_id)
    )


def _report_row(row) -> Dict[str, Any]:
    data = row.LectureReport.to_dict()
    data.update(
        faculty_name=row.faculty_name,
        module_name=row.module_name,
        program_code=row.program_code,
        program_name=row.program_name,
        lecturer_name=row.lecturer_name,
    )
    return data


async def get_report_detail(db: AsyncSession, report_id: int) -> Dict[str, Any]:
    result = await db.execute(_report_query().where(LectureReport.id == report_id))
    row = result.first()
    if row is None:
        raise NotFoundError("Report", report_id)
    return _report_row(row)


async def submit(db: AsyncSession, lecturer_id: int, payload: ReportSubmission) -> Dict[str, Any]:
    """
    Store a new report authored by the caller.

    Re-submission for the same lecture slot is allowed; there is no
    duplicate detection.
    """
    data = payload.model_dump()
    require_fields(data, REQUIRED_REPORT_FIELDS)
    for field in ("actual_students_present", "total_registered_students"):
        if data[field] < 0:
            raise ValidationError(
                field,
                message=f"{field.replace('_', ' ').capitalize()} cannot be negative",
                code=ErrorCode.OUT_OF_RANGE,
            )

    await get_faculty_or_reference_error(db, payload.faculty_id)
    await get_module_or_reference_error(db, payload.module_id)
    await get_program_or_reference_error(db, payload.program_id)

    report = LectureReport(
        lecturer_id=lecturer_id,
        status=ReportStatus.submitted,
        **{field: data[field] for field in REQUIRED_REPORT_FIELDS},
        student_name=None if is_missing(payload.student_name) else payload.student_name,
        student_number=None if is_missing(payload.student_number) else payload.student_number,
    )
    db.add(report)
    await db.commit()
    await db.refresh(report)
    logger.info(f"✓ Report {report.id} submitted by lecturer {lecturer_id} for module {report.module_id}")

    try:
        return await get_report_detail(db, report.id)
    except SQLAlchemyError as e:
        logger.error(f"Report {report.id} saved but detail lookup failed: {str(e)}")
        return {"success": True, "id": report.id, "message": "Report submitted successfully"}


async def list_visible(db: AsyncSession, identity: Identity) -> List[Dict[str, Any]]:
    """Lecturers see their own reports; every other role sees all of them."""
    query = _report_query()
    if identity.is_lecturer:
        query = query.where(LectureReport.lecturer_id == identity.user_id)
    result = await db.execute(
        query.order_by(LectureReport.date_of_lecture.desc(), LectureReport.id.desc())
    )
    return [_report_row(row) for row in result.all()]


async def get_visible(db: AsyncSession, identity: Identity, report_id: int) -> Dict[str, Any]:
    report = await get_report_detail(db, report_id)
    if identity.is_lecturer and report["lecturer_id"] != identity.user_id:
        # Same visibility rule as list_visible
        raise NotFoundError("Report", report_id)
    return report


async def submit_feedback(
    db: AsyncSession, identity: Identity, report_id: int, payload: FeedbackRequest
) -> Dict[str, Any]:
    """
    Attach principal feedback and mark the report reviewed.

    Any authenticated role may call this unless REPORT_FEEDBACK_RESTRICTED is
    on, in which case only program leaders and principal lecturers may.
    """
    if settings.REPORT_FEEDBACK_RESTRICTED:
        require_permission(identity, "review_reports")

    if is_missing(payload.principal_feedback):
        raise ValidationError("principal_feedback", code=ErrorCode.MISSING_FIELD)

    report = await db.get(LectureReport, report_id)
    if not report:
        raise NotFoundError("Report", report_id)

    previous = report.status
    report.status = ReportStatusMachine.on_feedback(report.status)
    report.principal_feedback = payload.principal_feedback.strip()
    await db.commit()

    logger.info(
        f"✓ Report {report_id} feedback by user {identity.user_id}: "
        f"{previous.value} → {report.status.value}"
    )
    try:
        return await get_report_detail(db, report_id)
    except SQLAlchemyError as e:
        logger.error(f"Feedback on report {report_id} saved but detail lookup failed: {str(e)}")
        return {"success": True, "id": report_id, "message": "Feedback submitted successfully"}


async def sign_attendance(db: AsyncSession, report_id: int, payload: AttendanceSignature) -> Dict[str, Any]:
    require_fields(payload.model_dump(), ["student_name", "student_number"])

    report = await db.get(LectureReport, report_id)
    if not report:
        raise NotFoundError("Report", report_id)

    report.student_name = payload.student_name.strip()
    report.student_number = payload.student_number.strip()
    await db.commit()

    logger.info(f"✓ Attendance signed on report {report_id} by student number {report.student_number}")
    try:
        return await get_report_detail(db, report_id)
    except SQLAlchemyError as e:
        logger.error(f"Attendance on report {report_id} saved but detail lookup failed: {str(e)}")
        return {"success": True, "id": report_id, "message": "Attendance signed successfully"}
