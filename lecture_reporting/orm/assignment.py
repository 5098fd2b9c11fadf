"""
lecture_reporting/orm/assignment.py
Lecturer-to-module-program bindings.
"""
from datetime import datetime

from sqlalchemy import Column, Integer, DateTime, ForeignKey, UniqueConstraint

from lecture_reporting.orm.base import Base


class LectureAssignment(Base):
    __tablename__ = "lecture_assignments"

    id = Column(Integer, primary_key=True, autoincrement=True, index=True)
    module_id = Column(Integer, ForeignKey("modules.id"), nullable=False, index=True)
    program_id = Column(Integer, ForeignKey("programs.id"), nullable=False, index=True)
    lecturer_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    assigned_by = Column(Integer, ForeignKey("users.id"), nullable=False)
    assigned_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("module_id", "program_id", "lecturer_id", name="uq_assignment_triple"),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "module_id": self.module_id,
            "program_id": self.program_id,
            "lecturer_id": self.lecturer_id,
            "assigned_by": self.assigned_by,
            "assigned_at": self.assigned_at.isoformat() if self.assigned_at else None,
        }
