"""
lecture_reporting/orm/__init__.py
Importing this package registers every table on Base.metadata.
"""
from lecture_reporting.orm.base import Base, BaseModel
from lecture_reporting.orm.user import User, UserRole
from lecture_reporting.orm.catalog import Faculty, Program, Module
from lecture_reporting.orm.assignment import LectureAssignment
from lecture_reporting.orm.report import LectureReport, ReportStatus
from lecture_reporting.orm.challenge import Challenge, ChallengeType, ChallengeStatus
from lecture_reporting.orm.student_challenge import StudentChallenge, ChallengePriority, PRIORITY_RANK
from lecture_reporting.orm.rating import ModuleRating, Rating

__all__ = [
    "Base",
    "BaseModel",
    "User",
    "UserRole",
    "Faculty",
    "Program",
    "Module",
    "LectureAssignment",
    "LectureReport",
    "ReportStatus",
    "Challenge",
    "ChallengeType",
    "ChallengeStatus",
    "StudentChallenge",
    "ChallengePriority",
    "PRIORITY_RANK",
    "ModuleRating",
    "Rating",
]
