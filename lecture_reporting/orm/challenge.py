"""
lecture_reporting/orm/challenge.py
Lecturer-reported obstacles tracked to resolution by administrative staff.
"""
from enum import Enum

from sqlalchemy import Column, Integer, Text, Date, ForeignKey

from lecture_reporting.orm.base import BaseModel, enum_column_type


class ChallengeType(str, Enum):
    attendance = "attendance"
    resources = "resources"
    technical = "technical"
    student_engagement = "student_engagement"
    content_coverage = "content_coverage"
    time_management = "time_management"
    other = "other"


class ChallengeStatus(str, Enum):
    """Shared by lecturer and student challenges."""
    pending = "pending"
    in_progress = "in_progress"
    resolved = "resolved"


class Challenge(BaseModel):
    """
    resolved_date is set exactly while status == resolved.
    admin_feedback is writable by ProgramLeader/PrincipalLecturer only.
    """
    __tablename__ = "challenges"

    lecturer_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    module_id = Column(Integer, ForeignKey("modules.id"), nullable=False, index=True)
    program_id = Column(Integer, ForeignKey("programs.id"), nullable=False)
    faculty_id = Column(Integer, ForeignKey("faculties.id"), nullable=True)

    challenge_type = Column(enum_column_type(ChallengeType, "challenge_type"), nullable=False)
    description = Column(Text, nullable=False)
    impact = Column(Text, nullable=False)
    proposed_solution = Column(Text, nullable=True)

    status = Column(
        enum_column_type(ChallengeStatus, "challenge_status"),
        nullable=False,
        default=ChallengeStatus.pending,
        index=True,
    )
    admin_feedback = Column(Text, nullable=True)
    submitted_date = Column(Date, nullable=False)
    resolved_date = Column(Date, nullable=True)

    def __repr__(self):
        return f"<Challenge(id={self.id}, lecturer_id={self.lecturer_id}, status={self.status})>"

    def to_dict(self):
        return {
            "id": self.id,
            "lecturer_id": self.lecturer_id,
            "module_id": self.module_id,
            "program_id": self.program_id,
            "faculty_id": self.faculty_id,
            "challenge_type": self.challenge_type.value if self.challenge_type else None,
            "description": self.description,
            "impact": self.impact,
            "proposed_solution": self.proposed_solution,
            "status": self.status.value if self.status else None,
            "admin_feedback": self.admin_feedback,
            "submitted_date": self.submitted_date.isoformat() if self.submitted_date else None,
            "resolved_date": self.resolved_date.isoformat() if self.resolved_date else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
