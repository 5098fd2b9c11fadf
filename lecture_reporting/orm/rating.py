"""
lecture_reporting/orm/rating.py
Module ratings (one live value per student per module) and the legacy
append-only per-report ratings. The two ledgers are deliberately separate.
"""
from sqlalchemy import Column, Integer, Text, ForeignKey, UniqueConstraint, CheckConstraint

from lecture_reporting.orm.base import BaseModel


class ModuleRating(BaseModel):
    __tablename__ = "module_ratings"

    student_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    module_id = Column(Integer, ForeignKey("modules.id"), nullable=False, index=True)
    rating = Column(Integer, nullable=False)
    comments = Column(Text, nullable=True)

    __table_args__ = (
        UniqueConstraint("student_id", "module_id", name="uq_module_rating_student_module"),
        CheckConstraint("rating >= 1 AND rating <= 5", name="ck_module_rating_range"),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "student_id": self.student_id,
            "module_id": self.module_id,
            "rating": self.rating,
            "comments": self.comments,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


class Rating(BaseModel):
    """Legacy report rating. No uniqueness: a rater may rate a report repeatedly."""
    __tablename__ = "ratings"

    report_id = Column(Integer, ForeignKey("lecture_reports.id"), nullable=False, index=True)
    rated_by = Column(Integer, ForeignKey("users.id"), nullable=False)
    rating = Column(Integer, nullable=False)
    comments = Column(Text, nullable=True)

    __table_args__ = (
        CheckConstraint("rating >= 1 AND rating <= 5", name="ck_rating_range"),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "report_id": self.report_id,
            "rated_by": self.rated_by,
            "rating": self.rating,
            "comments": self.comments,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
