"""
lecture_reporting/schemas/reports.py
"""
from datetime import date
from typing import Optional

from pydantic import BaseModel


class ReportSubmission(BaseModel):
    """Lecture report as submitted by the lecturer (lecturer is the caller)."""
    faculty_id: Optional[int] = None
    module_id: Optional[int] = None
    program_id: Optional[int] = None
    week_of_reporting: Optional[str] = None
    date_of_lecture: Optional[date] = None
    actual_students_present: Optional[int] = None
    total_registered_students: Optional[int] = None
    venue: Optional[str] = None
    scheduled_time: Optional[str] = None
    topic_taught: Optional[str] = None
    learning_outcomes: Optional[str] = None
    recommendations: Optional[str] = None
    student_name: Optional[str] = None
    student_number: Optional[str] = None


class FeedbackRequest(BaseModel):
    principal_feedback: Optional[str] = None


class AttendanceSignature(BaseModel):
    student_name: Optional[str] = None
    student_number: Optional[str] = None
