"""
lecture_reporting/orm/student_challenge.py
Student-initiated issue reports, self-managed by the owning student.
"""
from datetime import datetime
from enum import Enum

from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey

from lecture_reporting.orm.base import BaseModel, enum_column_type
from lecture_reporting.orm.challenge import ChallengeStatus


class ChallengePriority(str, Enum):
    low = "low"
    medium = "medium"
    high = "high"


# Listing order: high first. Lexicographic order would put "high" < "low" < "medium".
PRIORITY_RANK = {
    ChallengePriority.high: 1,
    ChallengePriority.medium: 2,
    ChallengePriority.low: 3,
}


class StudentChallenge(BaseModel):
    __tablename__ = "student_challenges"

    student_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    module_id = Column(Integer, ForeignKey("modules.id"), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    priority = Column(
        enum_column_type(ChallengePriority, "challenge_priority"),
        nullable=False,
        default=ChallengePriority.medium,
    )
    status = Column(
        enum_column_type(ChallengeStatus, "student_challenge_status"),
        nullable=False,
        default=ChallengeStatus.pending,
    )
    updated_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<StudentChallenge(id={self.id}, student_id={self.student_id}, priority={self.priority})>"

    def to_dict(self):
        return {
            "id": self.id,
            "student_id": self.student_id,
            "module_id": self.module_id,
            "title": self.title,
            "description": self.description,
            "priority": self.priority.value if self.priority else None,
            "status": self.status.value if self.status else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
