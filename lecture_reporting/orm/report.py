"""
lecture_reporting/orm/report.py
Lecture reports - one row per lecture delivered.

Core fields are written once at submission. Only principal_feedback/status
(feedback operation) and student_name/student_number (attendance signing)
change afterwards.
"""
from enum import Enum

from sqlalchemy import Column, Integer, String, Text, Date, ForeignKey

from lecture_reporting.orm.base import BaseModel, enum_column_type


class ReportStatus(str, Enum):
    submitted = "submitted"
    reviewed = "reviewed"


class LectureReport(BaseModel):
    __tablename__ = "lecture_reports"

    faculty_id = Column(Integer, ForeignKey("faculties.id"), nullable=False)
    module_id = Column(Integer, ForeignKey("modules.id"), nullable=False, index=True)
    program_id = Column(Integer, ForeignKey("programs.id"), nullable=False, index=True)
    lecturer_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    week_of_reporting = Column(String(50), nullable=False)
    date_of_lecture = Column(Date, nullable=False)
    # Point-in-time snapshots, not the module's current total
    actual_students_present = Column(Integer, nullable=False)
    total_registered_students = Column(Integer, nullable=False)
    venue = Column(String(100), nullable=False)
    scheduled_time = Column(String(50), nullable=False)
    topic_taught = Column(Text, nullable=False)
    learning_outcomes = Column(Text, nullable=False)
    recommendations = Column(Text, nullable=False)

    student_name = Column(String(100), nullable=True)
    student_number = Column(String(50), nullable=True)

    principal_feedback = Column(Text, nullable=True)
    status = Column(
        enum_column_type(ReportStatus, "report_status"),
        nullable=False,
        default=ReportStatus.submitted,
    )

    def __repr__(self):
        return f"<LectureReport(id={self.id}, module_id={self.module_id}, status={self.status})>"

    def to_dict(self):
        return {
            "id": self.id,
            "faculty_id": self.faculty_id,
            "module_id": self.module_id,
            "program_id": self.program_id,
            "lecturer_id": self.lecturer_id,
            "week_of_reporting": self.week_of_reporting,
            "date_of_lecture": self.date_of_lecture.isoformat() if self.date_of_lecture else None,
            "actual_students_present": self.actual_students_present,
            "total_registered_students": self.total_registered_students,
            "venue": self.venue,
            "scheduled_time": self.scheduled_time,
            "topic_taught": self.topic_taught,
            "learning_outcomes": self.learning_outcomes,
            "recommendations": self.recommendations,
            "student_name": self.student_name,
            "student_number": self.student_number,
            "principal_feedback": self.principal_feedback,
            "status": self.status.value if self.status else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
