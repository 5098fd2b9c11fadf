"""
lecture_reporting/schemas/ratings.py
"""
from typing import Optional

from pydantic import BaseModel


class ModuleRatingRequest(BaseModel):
    module_id: Optional[int] = None
    rating: Optional[int] = None
    comments: Optional[str] = None


class ReportRatingRequest(BaseModel):
    report_id: Optional[int] = None
    rating: Optional[int] = None
    comments: Optional[str] = None
