"""
lecture_reporting/schemas/challenges.py
Lecturer and student challenge payloads.
"""
from typing import Optional

from pydantic import BaseModel, Field


class ChallengeCreate(BaseModel):
    module_id: Optional[int] = None
    program_id: Optional[int] = None
    faculty_id: Optional[int] = None
    challenge_type: Optional[str] = None
    description: Optional[str] = None
    impact: Optional[str] = None
    proposed_solution: Optional[str] = None


class ChallengeUpdate(BaseModel):
    """Admin review. At least one field must be present."""
    admin_feedback: Optional[str] = None
    status: Optional[str] = None


class ChallengeStats(BaseModel):
    pending: int = 0
    in_progress: int = 0
    resolved: int = 0


class StudentChallengeCreate(BaseModel):
    module_id: Optional[int] = None
    title: Optional[str] = None
    description: Optional[str] = None
    priority: Optional[str] = Field(None, description="low, medium (default) or high")


class StudentChallengeStatusUpdate(BaseModel):
    status: Optional[str] = None
